"""
Borrowing request lifecycle.

    PENDING_APPROVAL --approve--> APPROVED --inspect_and_return--> RETURNED
           |
           +--reject--> REJECTED

Creation only validates. Approval reserves inventory and holds the
deposit. Return inspection assesses damage, releases undamaged units,
records any penalty and refunds what is left of the deposit.

Each operation is one transaction. Rows are locked in a fixed order:
the request, then inventory rows by primary key, then the wallet.
Notifications are sent only after commit.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional, Sequence
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from loguru import logger

from apps.accounts.models import User
from apps.borrowing.models import (
    BorrowingRequest,
    BorrowingRequestComponent,
    BorrowingStatus,
    RequestType,
)
from apps.inventory.models import Kit, KitComponent, KitStatus
from apps.inventory.services import (
    get_kit,
    lock_components,
    reserve,
    release,
    mark_damaged,
    ComponentNotFoundError,
    InsufficientInventoryError,
)
from apps.notifications.dispatcher import notify_on_commit
from apps.notifications.models import NotificationKind
from apps.penalties.models import Penalty
from apps.penalties.services import (
    DamageAssessment,
    assess_damage,
    policy_lookup,
    create_penalty_from_assessment,
)
from apps.wallets.models import TransactionType
from apps.wallets.services import get_balance, debit, credit, InsufficientBalanceError

from .exceptions import (
    RequestNotFoundError,
    BorrowingValidationError,
    InvalidReturnDateError,
    InvalidTransitionError,
)


@dataclass(frozen=True)
class ReturnOutcome:
    request: BorrowingRequest
    assessment: DamageAssessment
    penalty: Optional[Penalty]
    refund_amount: Decimal


def _lock_request(request_id: UUID) -> BorrowingRequest:
    try:
        return BorrowingRequest.objects.select_for_update().get(id=request_id)
    except BorrowingRequest.DoesNotExist:
        raise RequestNotFoundError(f"Borrowing request with ID {request_id} not found")


def _ensure_transition(borrow_request: BorrowingRequest, status: str) -> None:
    if not borrow_request.can_transition_to(status):
        logger.warning(
            f"Refused transition {borrow_request.status} -> {status} for request {borrow_request.id}"
        )
        raise InvalidTransitionError(
            f"Cannot move request from {borrow_request.status} to {status}"
        )


def _ensure_kit_rentable(kit: Kit) -> None:
    if kit.status in (KitStatus.MAINTENANCE, KitStatus.DAMAGED):
        raise InsufficientInventoryError(f"Kit {kit.kit_name} is not available ({kit.status})")
    if not kit.is_in_stock():
        raise InsufficientInventoryError(f"No units of kit {kit.kit_name} are available")


def _ensure_unique_names(names) -> None:
    """Damage is reported per component name, so names must identify one component."""
    seen = set()
    for name in names:
        if name in seen:
            raise BorrowingValidationError(f"More than one component is named {name}")
        seen.add(name)


def _normalize_lines(components: Sequence[Mapping]) -> list:
    """Validate requested (component_id, quantity) pairs, keeping their order."""
    if not components:
        raise BorrowingValidationError("At least one component is required")

    lines, seen = [], set()
    for item in components:
        try:
            component_id = UUID(str(item['component_id']))
            quantity = int(item['quantity'])
        except (KeyError, TypeError, ValueError):
            raise BorrowingValidationError(f"Invalid component line: {item!r}")

        if component_id in seen:
            raise BorrowingValidationError(f"Component {component_id} is listed more than once")
        if quantity < 1:
            raise BorrowingValidationError("Component quantity must be at least 1")

        seen.add(component_id)
        lines.append((component_id, quantity))
    return lines


# =============================================================================
# Creation
# =============================================================================

@transaction.atomic
def create_borrowing_request(
    *,
    requested_by: User,
    request_type: str,
    reason: str,
    expect_return_date: datetime,
    kit_id: Optional[UUID] = None,
    components: Optional[Sequence[Mapping]] = None
) -> BorrowingRequest:
    """
    Open a borrowing request in PENDING_APPROVAL.

    Nothing is reserved or debited yet; availability and balance are only
    checked so that hopeless requests are refused early.

    Args:
        requested_by: Borrower
        request_type: BORROW_KIT or BORROW_COMPONENT
        reason: Why the equipment is needed (required)
        expect_return_date: Must be in the future
        kit_id: Kit to borrow (kit requests only)
        components: ``[{'component_id': ..., 'quantity': ...}]`` of global
            components (component requests only), in display order

    Returns:
        Created BorrowingRequest

    Raises:
        BorrowingValidationError: Blank reason, wrong target for the type,
            duplicate or non-positive lines, bundled components
        InvalidReturnDateError: If expect_return_date is not in the future
        KitNotFoundError / ComponentNotFoundError: Unknown targets
        InsufficientInventoryError: If stock cannot cover the request
        InsufficientBalanceError: If the wallet cannot cover the deposit
    """
    if not reason or not reason.strip():
        raise BorrowingValidationError("A reason is required")

    if expect_return_date <= timezone.now():
        raise InvalidReturnDateError("Expected return date must be in the future")

    if request_type == RequestType.BORROW_KIT:
        if kit_id is None or components:
            raise BorrowingValidationError("Kit requests need a kit and no component lines")

        kit = get_kit(kit_id=kit_id)
        _ensure_kit_rentable(kit)
        _ensure_unique_names(c.component_name for c in kit.components.all())
        deposit = kit.amount
        lines = []

    elif request_type == RequestType.BORROW_COMPONENT:
        if kit_id is not None:
            raise BorrowingValidationError("Component requests cannot name a kit")

        kit = None
        requested = _normalize_lines(components)
        found = KitComponent.objects.in_bulk([component_id for component_id, _ in requested])

        lines = []
        for component_id, quantity in requested:
            component = found.get(component_id)
            if component is None:
                raise ComponentNotFoundError(f"Component with ID {component_id} not found")
            if not component.is_global:
                raise BorrowingValidationError(
                    f"{component.component_name} belongs to a kit and cannot be borrowed alone"
                )
            if component.status in (KitStatus.MAINTENANCE, KitStatus.DAMAGED):
                raise InsufficientInventoryError(f"{component.component_name} is not available")
            if not component.is_in_stock(quantity):
                raise InsufficientInventoryError(
                    f"Only {component.quantity_available} unit(s) of "
                    f"{component.component_name} available, {quantity} requested"
                )
            lines.append((component, quantity))

        _ensure_unique_names(c.component_name for c, _ in lines)
        deposit = sum((c.price_per_unit * q for c, q in lines), Decimal('0.00'))

    else:
        raise BorrowingValidationError(f"Unknown request type: {request_type!r}")

    balance = get_balance(account_id=requested_by.id)
    if balance < deposit:
        logger.warning(f"Request by {requested_by.id} refused: balance {balance} < deposit {deposit}")
        raise InsufficientBalanceError(
            f"Insufficient balance: {balance} available, deposit of {deposit} required"
        )

    borrow_request = BorrowingRequest.objects.create(
        request_type=request_type,
        requested_by=requested_by,
        kit=kit,
        deposit_amount=deposit,
        reason=reason.strip(),
        expect_return_date=expect_return_date,
    )
    BorrowingRequestComponent.objects.bulk_create([
        BorrowingRequestComponent(
            request=borrow_request,
            kit_component=component,
            component_name=component.component_name,
            unit_price=component.price_per_unit,
            quantity=quantity,
            position=position,
        )
        for position, (component, quantity) in enumerate(lines)
    ])

    notify_on_commit(
        account_id=requested_by.id,
        kind=NotificationKind.RENTAL_REQUEST_CREATED,
        title='Rental request submitted',
        message=f"Your request is waiting for approval. Deposit: {deposit}.",
    )
    logger.info(f"Borrowing request {borrow_request.id} created by {requested_by.id}, deposit {deposit}")
    return borrow_request


# =============================================================================
# Decision
# =============================================================================

@transaction.atomic
def approve_borrowing_request(
    *,
    request_id: UUID,
    approver: User,
    note: str = ''
) -> BorrowingRequest:
    """
    Approve a pending request: reserve inventory and hold the deposit.

    Availability and balance are checked again under lock; either may
    have changed since creation. On any failure nothing is changed.

    Raises:
        RequestNotFoundError: If request doesn't exist
        InvalidTransitionError: If the request is not PENDING_APPROVAL
        InsufficientInventoryError: If stock ran out since creation
        InsufficientBalanceError: If the balance fell below the deposit
    """
    borrow_request = _lock_request(request_id)
    _ensure_transition(borrow_request, BorrowingStatus.APPROVED)

    if borrow_request.is_kit_request:
        kit = Kit.objects.select_for_update().get(pk=borrow_request.kit_id)
        _ensure_kit_rentable(kit)
        reserve(target=kit, quantity=1, borrow_request_id=borrow_request.id, note='Approved')
    else:
        lines = list(borrow_request.components.all())
        locked = lock_components(component_ids=[line.kit_component_id for line in lines])
        for line in sorted(lines, key=lambda line: line.kit_component_id):
            reserve(
                target=locked[line.kit_component_id],
                quantity=line.quantity,
                borrow_request_id=borrow_request.id,
                note='Approved',
            )

    if borrow_request.deposit_amount > 0:
        debit(
            account_id=borrow_request.requested_by_id,
            amount=borrow_request.deposit_amount,
            transaction_type=TransactionType.DEPOSIT_HOLD,
            reference=borrow_request.id,
            description='Deposit for borrowing request',
        )

    borrow_request.status = BorrowingStatus.APPROVED
    borrow_request.decided_by = approver
    borrow_request.decided_at = timezone.now()
    borrow_request.decision_note = note
    borrow_request.save(update_fields=['status', 'decided_by', 'decided_at', 'decision_note', 'updated_at'])

    notify_on_commit(
        account_id=borrow_request.requested_by_id,
        kind=NotificationKind.RENTAL_APPROVED,
        title='Rental request approved',
        message=f"Your request was approved. A deposit of {borrow_request.deposit_amount} is held.",
    )
    logger.info(f"Borrowing request {borrow_request.id} approved by {approver.id}")
    return borrow_request


@transaction.atomic
def reject_borrowing_request(
    *,
    request_id: UUID,
    approver: User,
    note: str = ''
) -> BorrowingRequest:
    """
    Reject a pending request. Inventory and wallet are untouched.

    Raises:
        RequestNotFoundError: If request doesn't exist
        InvalidTransitionError: If the request is not PENDING_APPROVAL
    """
    borrow_request = _lock_request(request_id)
    _ensure_transition(borrow_request, BorrowingStatus.REJECTED)

    borrow_request.status = BorrowingStatus.REJECTED
    borrow_request.decided_by = approver
    borrow_request.decided_at = timezone.now()
    borrow_request.decision_note = note
    borrow_request.save(update_fields=['status', 'decided_by', 'decided_at', 'decision_note', 'updated_at'])

    notify_on_commit(
        account_id=borrow_request.requested_by_id,
        kind=NotificationKind.RENTAL_REJECTED,
        title='Rental request rejected',
        message=note or 'Your request was rejected.',
    )
    logger.info(f"Borrowing request {borrow_request.id} rejected by {approver.id}")
    return borrow_request


# =============================================================================
# Return
# =============================================================================

def _rental_snapshot(borrow_request: BorrowingRequest):
    """
    Return (rented quantities, unit prices, component ids) keyed by name.

    A kit request rents one kit unit, so each bundled component counts
    its stock divided across the kit's units.
    """
    if borrow_request.is_kit_request:
        kit = borrow_request.kit
        kit_units = max(kit.quantity_total, 1)
        parts = [
            (c.component_name, max(c.quantity_total // kit_units, 1), c.price_per_unit, c.id)
            for c in kit.components.all()
        ]
    else:
        parts = [
            (line.component_name, line.quantity, line.unit_price, line.kit_component_id)
            for line in borrow_request.components.all()
        ]

    rented = {name: quantity for name, quantity, _, _ in parts}
    prices = {name: price for name, _, price, _ in parts}
    ids = {name: component_id for name, _, _, component_id in parts}
    return rented, prices, ids


@transaction.atomic
def inspect_and_return(
    *,
    request_id: UUID,
    inspector: User,
    damage_assessment: Optional[Mapping[str, Mapping]] = None,
    note: str = ''
) -> ReturnOutcome:
    """
    Check a returned request in.

    Steps, all in one transaction:
        1. Assess damage against what was rented
        2. Record the return date and lateness, move to RETURNED
        3. Release undamaged units; write off damaged bundled components
        4. Persist a penalty when the fine is positive
        5. Refund ``max(deposit - fine, 0)``

    Lateness is recorded but never fined here (see issue_late_penalty).

    Args:
        request_id: An APPROVED request
        inspector: Administrator performing the check-in
        damage_assessment: Component name to damage entry, see
            apps.penalties.services.calculator
        note: Stored on the penalty, if one is created

    Raises:
        RequestNotFoundError: If request doesn't exist
        InvalidTransitionError: If the request is not APPROVED
        BorrowingValidationError: If a damaged name is not part of the rental
        InvalidDamageAssessmentError: If an entry cannot be valued
    """
    borrow_request = _lock_request(request_id)
    _ensure_transition(borrow_request, BorrowingStatus.RETURNED)

    damage_assessment = damage_assessment or {}
    rented, prices, ids = _rental_snapshot(borrow_request)

    unknown = [name for name in damage_assessment if name not in rented]
    if unknown:
        raise BorrowingValidationError(f"Not part of this rental: {', '.join(unknown)}")

    assessment = assess_damage(
        damage_assessment,
        rented_quantities=rented,
        component_ids=ids,
        policies=policy_lookup(),
        unit_prices=prices,
    )

    now = timezone.now()
    borrow_request.actual_return_date = now
    borrow_request.is_late = now > borrow_request.expect_return_date
    borrow_request.status = BorrowingStatus.RETURNED
    borrow_request.inspected_by = inspector
    borrow_request.save(update_fields=[
        'actual_return_date', 'is_late', 'status', 'inspected_by', 'updated_at'
    ])

    if borrow_request.is_kit_request:
        kit = Kit.objects.select_for_update().get(pk=borrow_request.kit_id)
        damaged_ids = [line.component_id for line in assessment.lines]
        locked = lock_components(component_ids=damaged_ids) if damaged_ids else {}
        for line in sorted(assessment.lines, key=lambda line: line.component_id):
            mark_damaged(
                component=locked[line.component_id],
                quantity=line.quantity,
                borrow_request_id=borrow_request.id,
                note=line.description,
            )
        release(target=kit, quantity=1, borrow_request_id=borrow_request.id, note='Returned')
    else:
        lines = sorted(borrow_request.components.all(), key=lambda line: line.kit_component_id)
        locked = lock_components(component_ids=[line.kit_component_id for line in lines])
        for line in lines:
            component = locked[line.kit_component_id]
            damaged = assessment.damaged_quantity(line.component_name)
            if line.quantity - damaged > 0:
                release(
                    target=component,
                    quantity=line.quantity - damaged,
                    borrow_request_id=borrow_request.id,
                    note='Returned',
                )
            if damaged:
                mark_damaged(
                    component=component,
                    quantity=damaged,
                    borrow_request_id=borrow_request.id,
                    note='Returned damaged',
                )

    penalty = None
    if assessment.has_fine:
        penalty = create_penalty_from_assessment(
            borrow_request=borrow_request,
            assessment=assessment,
            note=note,
        )

    refund = max(borrow_request.deposit_amount - assessment.fine_amount, Decimal('0.00'))
    if refund > 0:
        credit(
            account_id=borrow_request.requested_by_id,
            amount=refund,
            transaction_type=TransactionType.DEPOSIT_REFUND,
            reference=borrow_request.id,
            description='Deposit refund',
        )

    if penalty is not None:
        notify_on_commit(
            account_id=borrow_request.requested_by_id,
            kind=NotificationKind.FINE_ISSUED,
            title='New penalty issued',
            message=(
                f"Your return has a penalty of {assessment.fine_amount}. "
                f"Refunded: {refund}. Outstanding: {penalty.outstanding_amount}."
            ),
        )
    else:
        notify_on_commit(
            account_id=borrow_request.requested_by_id,
            kind=NotificationKind.RETURN_COMPLETED,
            title='Return completed',
            message=f"Your return was checked in. Refunded: {refund}.",
        )

    logger.info(
        f"Borrowing request {borrow_request.id} returned (late={borrow_request.is_late}, "
        f"fine={assessment.fine_amount}, refund={refund})"
    )
    return ReturnOutcome(
        request=borrow_request,
        assessment=assessment,
        penalty=penalty,
        refund_amount=refund,
    )


# =============================================================================
# Queries
# =============================================================================

def _base_queryset() -> QuerySet:
    return (
        BorrowingRequest.objects
        .select_related('requested_by', 'kit', 'decided_by', 'inspected_by')
        .prefetch_related('components')
    )


def get_borrowing_request(*, request_id: UUID) -> BorrowingRequest:
    """
    Raises:
        RequestNotFoundError: If request doesn't exist
    """
    try:
        return _base_queryset().get(id=request_id)
    except BorrowingRequest.DoesNotExist:
        raise RequestNotFoundError(f"Borrowing request with ID {request_id} not found")


def list_requests_for_account(*, account_id: UUID, status: Optional[str] = None) -> QuerySet:
    """Return an account's requests, newest first."""
    queryset = _base_queryset().filter(requested_by_id=account_id)
    if status:
        queryset = queryset.filter(status=status)
    return queryset


def list_all_requests(*, status: Optional[str] = None) -> QuerySet:
    """Return every request, newest first (administrators)."""
    queryset = _base_queryset()
    if status:
        queryset = queryset.filter(status=status)
    return queryset


def list_requests_by_status(*, status: str) -> QuerySet:
    """Return requests in a status, oldest first (approval and return queues)."""
    return _base_queryset().filter(status=status).order_by('created_at')
