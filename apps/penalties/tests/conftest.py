import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, AccountRole
from apps.borrowing.models import BorrowingRequest, BorrowingStatus, RequestType
from apps.penalties.models import Penalty, PenaltyDetail, PenaltyPolicy, PolicyType
from apps.wallets.models import Wallet


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def borrower(db):
    return User.objects.create_user(
        email='borrower@example.com',
        password='TestPass123!',
        full_name='Le Van C',
    )


@pytest.fixture
def other_borrower(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def lending_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        role=AccountRole.ADMIN,
    )


@pytest.fixture
def borrower_client(borrower):
    return _client_for(borrower)


@pytest.fixture
def admin_client(lending_admin):
    return _client_for(lending_admin)


@pytest.fixture
def wallet(borrower):
    """Borrower wallet holding 500,000."""
    return Wallet.objects.create(account=borrower, balance=Decimal('500000.00'))


@pytest.fixture
def late_return(borrower):
    """Component request returned a day after its due date."""
    now = timezone.now()
    return BorrowingRequest.objects.create(
        request_type=RequestType.BORROW_COMPONENT,
        requested_by=borrower,
        deposit_amount=Decimal('100000.00'),
        reason='Lab 5',
        expect_return_date=now - timedelta(days=2),
        actual_return_date=now - timedelta(days=1),
        is_late=True,
        status=BorrowingStatus.RETURNED,
    )


@pytest.fixture
def on_time_return(borrower):
    now = timezone.now()
    return BorrowingRequest.objects.create(
        request_type=RequestType.BORROW_COMPONENT,
        requested_by=borrower,
        deposit_amount=Decimal('100000.00'),
        reason='Lab 6',
        expect_return_date=now + timedelta(days=1),
        actual_return_date=now,
        is_late=False,
        status=BorrowingStatus.RETURNED,
    )


@pytest.fixture
def late_policy(db):
    return PenaltyPolicy.objects.create(
        policy_name='Late return',
        policy_type=PolicyType.LATED,
        amount=Decimal('20000.00'),
        issued_date=timezone.now() - timedelta(days=60),
    )


@pytest.fixture
def damage_policy(db):
    return PenaltyPolicy.objects.create(
        policy_name='Component damage',
        policy_type=PolicyType.DAMAGED,
        amount=Decimal('100000.00'),
        issued_date=timezone.now() - timedelta(days=30),
    )


@pytest.fixture
def outstanding_penalty(late_return, borrower):
    """Fine of 300,000 with 100,000 covered by the deposit."""
    penalty = Penalty.objects.create(
        borrow_request=late_return,
        account=borrower,
        penalty_type=PolicyType.DAMAGED,
        total_amount=Decimal('300000.00'),
        settled_amount=Decimal('100000.00'),
        semester='2026-FALL',
    )
    PenaltyDetail.objects.create(
        penalty=penalty,
        description='Damage to Arduino Uno R3',
        quantity=2,
        amount=Decimal('300000.00'),
    )
    return penalty
