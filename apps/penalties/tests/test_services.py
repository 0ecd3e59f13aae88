"""
Service layer tests for penalties.

Tests cover:
- Persisting penalties from damage assessments
- Late-return fees issued by operators
- Paying outstanding amounts from the wallet
- Active policy lookup and semester labels
"""

import pytest
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from uuid import uuid4

from django.db import IntegrityError
from django.utils import timezone

from apps.borrowing.models import BorrowingStatus
from apps.borrowing.services.exceptions import RequestNotFoundError
from apps.notifications.models import Notification, NotificationKind
from apps.penalties.models import Penalty, PenaltyPolicy, PolicyType
from apps.penalties.services import (
    assess_damage,
    create_penalty_from_assessment,
    issue_late_penalty,
    pay_penalty,
    get_penalty,
    get_active_policies,
    policy_lookup,
    semester_for,
    list_unresolved_penalties,
    outstanding_total,
    PenaltyNotFoundError,
    PolicyNotFoundError,
    InvalidPolicyError,
    PenaltyAlreadyResolvedError,
    LatePenaltyNotApplicableError,
    InsufficientPermissionsError,
)
from apps.wallets.models import Wallet, WalletTransaction, TransactionType
from apps.wallets.services import InsufficientBalanceError


# =============================================================================
# Creation from assessment
# =============================================================================

@pytest.mark.django_db
class TestCreatePenaltyFromAssessment:
    """Tests for create_penalty_from_assessment()."""

    def test_deposit_covers_fine(self, on_time_return):
        assessment = assess_damage(
            {'Arduino Uno R3': {'damaged': True, 'unit_value': '40000'}},
        )

        penalty = create_penalty_from_assessment(borrow_request=on_time_return, assessment=assessment)

        assert penalty.total_amount == Decimal('40000.00')
        assert penalty.settled_amount == Decimal('40000.00')
        assert penalty.resolved is True
        assert penalty.resolved_at is not None
        assert penalty.account_id == on_time_return.requested_by_id
        assert penalty.semester == semester_for(penalty.take_effect_date)

    def test_fine_exceeds_deposit(self, on_time_return):
        assessment = assess_damage(
            {'Arduino Uno R3': {'damaged': True, 'unit_value': '250000'}},
        )

        penalty = create_penalty_from_assessment(borrow_request=on_time_return, assessment=assessment)

        assert penalty.settled_amount == Decimal('100000.00')
        assert penalty.outstanding_amount == Decimal('150000.00')
        assert penalty.resolved is False
        assert penalty.resolved_at is None

    def test_fine_equal_to_deposit_is_resolved(self, on_time_return):
        assessment = assess_damage(
            {'Arduino Uno R3': {'damaged': True, 'unit_value': '100000'}},
        )

        penalty = create_penalty_from_assessment(borrow_request=on_time_return, assessment=assessment)

        assert penalty.resolved is True
        assert penalty.outstanding_amount == Decimal('0.00')

    def test_details_follow_lines(self, on_time_return, damage_policy):
        assessment = assess_damage(
            {
                'Ultrasonic Sensor': {'damaged': True, 'quantity': 2, 'unit_value': '20000'},
                'Arduino Uno R3': {'damaged': True, 'unit_value': '50000', 'description': 'Cracked'},
            },
            policies=policy_lookup(),
        )

        penalty = create_penalty_from_assessment(borrow_request=on_time_return, assessment=assessment)

        details = list(penalty.details.all())
        assert [d.description for d in details] == ['Damage to Ultrasonic Sensor', 'Cracked']
        assert [d.quantity for d in details] == [2, 1]
        assert all(d.policy_id == damage_policy.id for d in details)
        assert penalty.total_amount == sum(d.amount for d in details)

    def test_all_lost_lines(self, on_time_return):
        assessment = assess_damage(
            {'Arduino Uno R3': {'damaged': True, 'damage_type': 'lost', 'unit_value': '1000'}},
        )

        penalty = create_penalty_from_assessment(borrow_request=on_time_return, assessment=assessment)

        assert penalty.penalty_type == PolicyType.LOST

    def test_mixed_lines_are_damage(self, on_time_return):
        assessment = assess_damage({
            'Arduino Uno R3': {'damaged': True, 'damage_type': 'lost', 'unit_value': '1000'},
            'Ultrasonic Sensor': {'damaged': True, 'unit_value': '1000'},
        })

        penalty = create_penalty_from_assessment(borrow_request=on_time_return, assessment=assessment)

        assert penalty.penalty_type == PolicyType.DAMAGED

    def test_settled_cannot_exceed_total(self, on_time_return, borrower):
        with pytest.raises(IntegrityError):
            Penalty.objects.create(
                borrow_request=on_time_return,
                account=borrower,
                total_amount=Decimal('10.00'),
                settled_amount=Decimal('20.00'),
            )


# =============================================================================
# Late-return fees
# =============================================================================

@pytest.mark.django_db
class TestIssueLatePenalty:
    """Tests for issue_late_penalty()."""

    def test_issue_late_fee(self, late_return, late_policy, lending_admin, borrower):
        penalty = issue_late_penalty(
            request_id=late_return.id, policy_id=late_policy.id, issued_by=lending_admin
        )

        assert penalty.penalty_type == PolicyType.LATED
        assert penalty.total_amount == Decimal('20000.00')
        assert penalty.settled_amount == Decimal('0.00')
        assert penalty.resolved is False
        assert penalty.account == borrower
        detail = penalty.details.get()
        assert detail.policy == late_policy
        assert detail.amount == penalty.total_amount

    def test_notifies_borrower(
        self, late_return, late_policy, lending_admin, borrower, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            issue_late_penalty(
                request_id=late_return.id, policy_id=late_policy.id, issued_by=lending_admin
            )

        notification = Notification.objects.get(recipient=borrower)
        assert notification.kind == NotificationKind.FINE_ISSUED

    def test_only_once_per_request(self, late_return, late_policy, lending_admin):
        issue_late_penalty(request_id=late_return.id, policy_id=late_policy.id, issued_by=lending_admin)

        with pytest.raises(LatePenaltyNotApplicableError):
            issue_late_penalty(
                request_id=late_return.id, policy_id=late_policy.id, issued_by=lending_admin
            )

    def test_on_time_return(self, on_time_return, late_policy, lending_admin):
        with pytest.raises(LatePenaltyNotApplicableError):
            issue_late_penalty(
                request_id=on_time_return.id, policy_id=late_policy.id, issued_by=lending_admin
            )

    def test_request_still_out(self, late_return, late_policy, lending_admin):
        late_return.status = BorrowingStatus.APPROVED
        late_return.save()

        with pytest.raises(LatePenaltyNotApplicableError):
            issue_late_penalty(
                request_id=late_return.id, policy_id=late_policy.id, issued_by=lending_admin
            )

    def test_wrong_policy_type(self, late_return, damage_policy, lending_admin):
        with pytest.raises(InvalidPolicyError):
            issue_late_penalty(
                request_id=late_return.id, policy_id=damage_policy.id, issued_by=lending_admin
            )

    def test_unknown_policy(self, late_return, lending_admin):
        with pytest.raises(PolicyNotFoundError):
            issue_late_penalty(request_id=late_return.id, policy_id=uuid4(), issued_by=lending_admin)

    def test_unknown_request(self, late_policy, lending_admin):
        with pytest.raises(RequestNotFoundError):
            issue_late_penalty(request_id=uuid4(), policy_id=late_policy.id, issued_by=lending_admin)


# =============================================================================
# Payment
# =============================================================================

@pytest.mark.django_db
class TestPayPenalty:
    """Tests for pay_penalty()."""

    def test_pay_outstanding(self, outstanding_penalty, borrower, wallet):
        penalty = pay_penalty(penalty_id=outstanding_penalty.id, account=borrower)

        assert penalty.resolved is True
        assert penalty.settled_amount == Decimal('300000.00')
        assert penalty.outstanding_amount == Decimal('0.00')
        assert Wallet.objects.get(pk=wallet.pk).balance == Decimal('300000.00')

        entry = WalletTransaction.objects.get()
        assert entry.transaction_type == TransactionType.PENALTY_PAYMENT
        assert entry.amount == Decimal('-200000.00')
        assert entry.reference == str(outstanding_penalty.id)

    def test_pay_twice(self, outstanding_penalty, borrower, wallet):
        pay_penalty(penalty_id=outstanding_penalty.id, account=borrower)

        with pytest.raises(PenaltyAlreadyResolvedError):
            pay_penalty(penalty_id=outstanding_penalty.id, account=borrower)

    def test_someone_elses_penalty(self, outstanding_penalty, other_borrower):
        with pytest.raises(InsufficientPermissionsError):
            pay_penalty(penalty_id=outstanding_penalty.id, account=other_borrower)

    def test_insufficient_balance(self, outstanding_penalty, borrower, wallet):
        Wallet.objects.filter(pk=wallet.pk).update(balance=Decimal('1000.00'))

        with pytest.raises(InsufficientBalanceError):
            pay_penalty(penalty_id=outstanding_penalty.id, account=borrower)

        outstanding_penalty.refresh_from_db()
        assert outstanding_penalty.resolved is False
        assert outstanding_penalty.settled_amount == Decimal('100000.00')

    def test_unknown_penalty(self, borrower):
        with pytest.raises(PenaltyNotFoundError):
            pay_penalty(penalty_id=uuid4(), account=borrower)


# =============================================================================
# Queries
# =============================================================================

@pytest.mark.django_db
class TestQueries:
    """Tests for penalty queries."""

    def test_get_penalty(self, outstanding_penalty):
        assert get_penalty(penalty_id=outstanding_penalty.id) == outstanding_penalty

    def test_get_unknown_penalty(self):
        with pytest.raises(PenaltyNotFoundError):
            get_penalty(penalty_id=uuid4())

    def test_unresolved_and_outstanding_total(self, outstanding_penalty, borrower, other_borrower):
        assert list(list_unresolved_penalties()) == [outstanding_penalty]
        assert outstanding_total(account_id=borrower.id) == Decimal('200000.00')
        assert outstanding_total(account_id=other_borrower.id) == Decimal('0.00')


# =============================================================================
# Policies
# =============================================================================

@pytest.mark.django_db
class TestPolicies:
    """Tests for active policy lookup."""

    def test_expired_and_future_policies_excluded(self, late_policy):
        now = timezone.now()
        PenaltyPolicy.objects.create(
            policy_name='Old damage rule',
            policy_type=PolicyType.DAMAGED,
            amount=Decimal('1.00'),
            issued_date=now - timedelta(days=400),
            resolved=now - timedelta(days=30),
        )
        PenaltyPolicy.objects.create(
            policy_name='Next semester',
            policy_type=PolicyType.LOST,
            amount=Decimal('1.00'),
            issued_date=now + timedelta(days=30),
        )

        assert list(get_active_policies()) == [late_policy]

    def test_lookup_prefers_latest(self, damage_policy):
        newer = PenaltyPolicy.objects.create(
            policy_name='Component damage 2026',
            policy_type=PolicyType.DAMAGED,
            amount=Decimal('120000.00'),
            issued_date=timezone.now() - timedelta(days=1),
        )

        assert policy_lookup() == {PolicyType.DAMAGED: newer.id}

    def test_policy_is_active(self, damage_policy):
        assert damage_policy.is_active()
        assert not damage_policy.is_active(at=damage_policy.issued_date - timedelta(seconds=1))


class TestSemester:
    """Tests for semester_for()."""

    @pytest.mark.parametrize('month, expected', [
        (1, '2026-SPRING'),
        (6, '2026-SPRING'),
        (7, '2026-FALL'),
        (12, '2026-FALL'),
    ])
    def test_semester_halves(self, month, expected):
        moment = datetime(2026, month, 15, 12, 0, tzinfo=dt_timezone.utc)

        assert semester_for(moment) == expected

    def test_naive_datetime(self):
        assert semester_for(datetime(2025, 3, 1)) == '2025-SPRING'
