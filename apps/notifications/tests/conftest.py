import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def user(db):
    return User.objects.create_user(email='student@example.com', password='TestPass123!')


@pytest.fixture
def other_user(db):
    return User.objects.create_user(email='other@example.com', password='TestPass123!')


@pytest.fixture
def authenticated_client(user):
    """Return an authenticated API client using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
