"""
Penalty persistence and settlement.

Penalties are created from a DamageAssessment during return inspection,
or by an operator for late returns. Outstanding amounts are paid from
the owner's wallet.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet, Q
from django.utils import timezone
from loguru import logger

from apps.accounts.models import User
from apps.borrowing.models import BorrowingRequest, BorrowingStatus
from apps.notifications.dispatcher import notify_on_commit
from apps.notifications.models import NotificationKind
from apps.penalties.models import Penalty, PenaltyDetail, PenaltyPolicy, PolicyType
from apps.wallets.models import TransactionType
from apps.wallets.services import debit

from .calculator import DamageAssessment
from .exceptions import (
    PenaltyNotFoundError,
    PolicyNotFoundError,
    InvalidPolicyError,
    PenaltyAlreadyResolvedError,
    LatePenaltyNotApplicableError,
    InsufficientPermissionsError,
)


def semester_for(moment: datetime) -> str:
    """Label like ``2026-SPRING`` (January to June) or ``2026-FALL``."""
    local = timezone.localtime(moment) if timezone.is_aware(moment) else moment
    half = 'SPRING' if local.month <= 6 else 'FALL'
    return f"{local.year}-{half}"


# =============================================================================
# Policies
# =============================================================================

def get_active_policies(*, at: Optional[datetime] = None) -> QuerySet:
    """Return policies in force at the given moment (default: now)."""
    at = at or timezone.now()
    return PenaltyPolicy.objects.filter(
        Q(issued_date__isnull=True) | Q(issued_date__lte=at),
        Q(resolved__isnull=True) | Q(resolved__gt=at),
    )


def policy_lookup(*, at: Optional[datetime] = None) -> dict:
    """
    Map each policy type to the ID of its most recently issued active policy.

    Used to label assessment lines; amounts are not taken from policies.
    """
    lookup = {}
    for policy in get_active_policies(at=at).order_by('policy_type', '-issued_date', '-created_at'):
        lookup.setdefault(policy.policy_type, policy.id)
    return lookup


def get_policy(*, policy_id: UUID) -> PenaltyPolicy:
    """
    Raises:
        PolicyNotFoundError: If policy doesn't exist
    """
    try:
        return PenaltyPolicy.objects.get(id=policy_id)
    except PenaltyPolicy.DoesNotExist:
        raise PolicyNotFoundError(f"Penalty policy with ID {policy_id} not found")


# =============================================================================
# Creation
# =============================================================================

def create_penalty_from_assessment(
    *,
    borrow_request: BorrowingRequest,
    assessment: DamageAssessment,
    note: str = ''
) -> Penalty:
    """
    Persist a penalty and one detail per assessment line.

    The deposit of the request covers the fine first: the covered part is
    recorded as settled, and the penalty is resolved when the deposit
    covers all of it. Must run inside the caller's transaction.
    """
    now = timezone.now()
    fine = assessment.fine_amount
    settled = min(fine, borrow_request.deposit_amount)
    resolved = fine <= borrow_request.deposit_amount

    damage_types = {line.damage_type for line in assessment.lines}
    penalty_type = PolicyType.LOST if damage_types == {'lost'} else PolicyType.DAMAGED

    penalty = Penalty.objects.create(
        borrow_request=borrow_request,
        account_id=borrow_request.requested_by_id,
        penalty_type=penalty_type,
        total_amount=fine,
        settled_amount=settled,
        resolved=resolved,
        resolved_at=now if resolved else None,
        take_effect_date=now,
        semester=semester_for(now),
        note=note or 'Returned with damage',
    )
    PenaltyDetail.objects.bulk_create([
        PenaltyDetail(
            penalty=penalty,
            policy_id=line.policy_id,
            kit_component_id=line.component_id,
            description=line.description,
            quantity=line.quantity,
            amount=line.amount,
            image_url=line.image_url,
            position=position,
        )
        for position, line in enumerate(assessment.lines)
    ])

    logger.info(
        f"Penalty {penalty.id} of {fine} issued for request {borrow_request.id} "
        f"({len(assessment.lines)} line(s), settled {settled})"
    )
    return penalty


@transaction.atomic
def issue_late_penalty(
    *,
    request_id: UUID,
    policy_id: UUID,
    issued_by: User,
    note: str = ''
) -> Penalty:
    """
    Charge a late-return fee at the operator's discretion.

    Lateness alone never creates a penalty; this is the only path.

    Args:
        request_id: A RETURNED request with is_late set
        policy_id: Policy of type ``lated``; its amount is the fee
        issued_by: Administrator issuing the fee
        note: Free text stored on the penalty

    Raises:
        LatePenaltyNotApplicableError: If the request is not a late
            return, or already carries a late fee
        PolicyNotFoundError: If policy doesn't exist
        InvalidPolicyError: If the policy is not of type ``lated``
    """
    # apps.borrowing.services imports this module at load time
    from apps.borrowing.services.exceptions import RequestNotFoundError

    try:
        borrow_request = BorrowingRequest.objects.select_for_update().get(id=request_id)
    except BorrowingRequest.DoesNotExist:
        raise RequestNotFoundError(f"Borrowing request with ID {request_id} not found")

    if borrow_request.status != BorrowingStatus.RETURNED or not borrow_request.is_late:
        raise LatePenaltyNotApplicableError("Late fees apply only to requests returned late")

    if borrow_request.penalties.filter(penalty_type=PolicyType.LATED).exists():
        raise LatePenaltyNotApplicableError("A late fee was already issued for this request")

    policy = get_policy(policy_id=policy_id)
    if policy.policy_type != PolicyType.LATED:
        raise InvalidPolicyError(f"Policy {policy.policy_name} is not a late-return policy")

    now = timezone.now()
    penalty = Penalty.objects.create(
        borrow_request=borrow_request,
        account_id=borrow_request.requested_by_id,
        penalty_type=PolicyType.LATED,
        total_amount=policy.amount,
        take_effect_date=now,
        semester=semester_for(now),
        note=note or f"Late return (issued by {issued_by.email})",
    )
    PenaltyDetail.objects.create(
        penalty=penalty,
        policy=policy,
        description=policy.policy_name,
        amount=policy.amount,
    )

    notify_on_commit(
        account_id=borrow_request.requested_by_id,
        kind=NotificationKind.FINE_ISSUED,
        title='Late return fee',
        message=f"A late return fee of {policy.amount} was issued. Please check and pay it.",
    )
    logger.info(f"Late fee {policy.amount} issued for request {request_id} by {issued_by.id}")
    return penalty


# =============================================================================
# Settlement
# =============================================================================

@transaction.atomic
def pay_penalty(*, penalty_id: UUID, account: User) -> Penalty:
    """
    Pay the outstanding part of a penalty from the owner's wallet.

    Raises:
        PenaltyNotFoundError: If penalty doesn't exist
        InsufficientPermissionsError: If the penalty belongs to someone else
        PenaltyAlreadyResolvedError: If nothing is outstanding
        InsufficientBalanceError: If the wallet cannot cover the amount
    """
    try:
        penalty = Penalty.objects.select_for_update().get(id=penalty_id)
    except Penalty.DoesNotExist:
        raise PenaltyNotFoundError(f"Penalty with ID {penalty_id} not found")

    if penalty.account_id != account.id:
        raise InsufficientPermissionsError("You can only pay your own penalties")

    if penalty.resolved or penalty.outstanding_amount == 0:
        raise PenaltyAlreadyResolvedError("Penalty is already resolved")

    outstanding = penalty.outstanding_amount
    debit(
        account_id=account.id,
        amount=outstanding,
        transaction_type=TransactionType.PENALTY_PAYMENT,
        reference=penalty.id,
        description=f"Penalty payment for request {penalty.borrow_request_id}",
    )

    penalty.settled_amount = penalty.total_amount
    penalty.resolved = True
    penalty.resolved_at = timezone.now()
    penalty.save(update_fields=['settled_amount', 'resolved', 'resolved_at', 'updated_at'])

    logger.info(f"Penalty {penalty.id} paid: {outstanding} by account {account.id}")
    return penalty


# =============================================================================
# Queries
# =============================================================================

def get_penalty(*, penalty_id: UUID) -> Penalty:
    """
    Raises:
        PenaltyNotFoundError: If penalty doesn't exist
    """
    try:
        return (
            Penalty.objects
            .select_related('account', 'borrow_request')
            .prefetch_related('details')
            .get(id=penalty_id)
        )
    except Penalty.DoesNotExist:
        raise PenaltyNotFoundError(f"Penalty with ID {penalty_id} not found")


def list_penalties_for_account(*, account_id: UUID) -> QuerySet:
    return Penalty.objects.filter(account_id=account_id).prefetch_related('details')


def list_unresolved_penalties() -> QuerySet:
    return (
        Penalty.objects
        .filter(resolved=False)
        .select_related('account', 'borrow_request')
        .prefetch_related('details')
    )


def outstanding_total(*, account_id: UUID) -> Decimal:
    """Sum of unpaid amounts across the account's penalties."""
    return sum(
        (p.outstanding_amount for p in Penalty.objects.filter(account_id=account_id, resolved=False)),
        Decimal('0.00')
    )
