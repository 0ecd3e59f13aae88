import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, AccountRole
from apps.inventory.models import Kit, KitComponent, KitStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def student(db):
    return User.objects.create_user(
        email='student@example.com',
        password='TestPass123!',
        full_name='Student One',
    )


@pytest.fixture
def lending_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        role=AccountRole.ADMIN,
    )


@pytest.fixture
def student_client(api_client, student):
    """Return an API client authenticated as the student."""
    refresh = RefreshToken.for_user(student)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(lending_admin):
    """Return an API client authenticated as the administrator."""
    client = APIClient()
    refresh = RefreshToken.for_user(lending_admin)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def kit(db):
    """Kit with two units and a 500,000 deposit."""
    return Kit.objects.create(
        kit_name='Arduino Starter Kit',
        quantity_total=2,
        quantity_available=2,
        amount=Decimal('500000.00'),
    )


@pytest.fixture
def bundled_component(kit):
    """Component that travels with the kit."""
    return KitComponent.objects.create(
        kit=kit,
        component_name='Breadboard',
        component_type='board',
        quantity_total=4,
        quantity_available=4,
        price_per_unit=Decimal('30000.00'),
    )


@pytest.fixture
def global_component(db):
    """Component rented individually."""
    return KitComponent.objects.create(
        component_name='Arduino Uno R3',
        component_type='microcontroller',
        quantity_total=10,
        quantity_available=10,
        price_per_unit=Decimal('50000.00'),
    )


@pytest.fixture
def maintenance_kit(db):
    return Kit.objects.create(
        kit_name='Raspberry Pi Kit',
        quantity_total=1,
        quantity_available=1,
        status=KitStatus.MAINTENANCE,
        amount=Decimal('800000.00'),
    )
