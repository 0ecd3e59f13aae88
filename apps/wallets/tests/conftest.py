import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.wallets.models import Wallet


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        email='student@example.com',
        password='TestPass123!',
        full_name='Student One',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='friend@example.com',
        password='TestPass123!',
        full_name='Student Two',
    )


@pytest.fixture
def wallet(user):
    """Wallet holding 100,000."""
    return Wallet.objects.create(account=user, balance=Decimal('100000.00'))


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
