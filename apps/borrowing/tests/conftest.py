import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, AccountRole
from apps.inventory.models import Kit, KitComponent
from apps.penalties.models import PenaltyPolicy, PolicyType
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
        full_name='Tran Thi B',
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
    """Return an API client authenticated as the borrower."""
    return _client_for(borrower)


@pytest.fixture
def admin_client(lending_admin):
    """Return an API client authenticated as the administrator."""
    return _client_for(lending_admin)


@pytest.fixture
def wallet(borrower):
    """Borrower wallet holding 200,000."""
    return Wallet.objects.create(account=borrower, balance=Decimal('200000.00'))


@pytest.fixture
def component(db):
    """Global component priced 50,000 with 10 units."""
    return KitComponent.objects.create(
        component_name='Arduino Uno R3',
        quantity_total=10,
        quantity_available=10,
        price_per_unit=Decimal('50000.00'),
    )


@pytest.fixture
def sensor(db):
    """Global component priced 20,000 with 5 units."""
    return KitComponent.objects.create(
        component_name='Ultrasonic Sensor',
        quantity_total=5,
        quantity_available=5,
        price_per_unit=Decimal('20000.00'),
    )


@pytest.fixture
def kit(db):
    """Kit with one unit, a 150,000 deposit and two bundled components."""
    kit = Kit.objects.create(
        kit_name='IoT Kit',
        quantity_total=1,
        quantity_available=1,
        amount=Decimal('150000.00'),
    )
    KitComponent.objects.create(
        kit=kit,
        component_name='ESP32',
        quantity_total=2,
        quantity_available=2,
        price_per_unit=Decimal('120000.00'),
    )
    KitComponent.objects.create(
        kit=kit,
        component_name='Jumper Wires',
        quantity_total=40,
        quantity_available=40,
        price_per_unit=Decimal('1000.00'),
    )
    return kit


@pytest.fixture
def damage_policy(db):
    return PenaltyPolicy.objects.create(
        policy_name='Component damage',
        policy_type=PolicyType.DAMAGED,
        amount=Decimal('100000.00'),
        issued_date=timezone.now() - timedelta(days=30),
    )


@pytest.fixture
def return_date():
    return timezone.now() + timedelta(days=7)
