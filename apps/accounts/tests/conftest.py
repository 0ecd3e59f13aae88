import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, AccountRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def student(db):
    """Create and return a student account."""
    return User.objects.create_user(
        email='student@example.com',
        password='TestPass123!',
        full_name='Nguyen Van A',
        role=AccountRole.STUDENT,
    )


@pytest.fixture
def lending_admin(db):
    """Create and return an administrator account."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        full_name='Lab Admin',
        role=AccountRole.ADMIN,
    )


@pytest.fixture
def inactive_user(db):
    """Create and return an inactive account."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, student):
    """Return an API client authenticated as the student using JWT."""
    refresh = RefreshToken.for_user(student)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
