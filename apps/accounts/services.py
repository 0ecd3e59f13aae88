"""
Account provider boundary.

The lending engine never authenticates anyone; it only records account
identifiers and resolves them to a profile for display and notifications.
"""

from dataclasses import dataclass
from uuid import UUID

from .exceptions import AccountNotFoundError
from .models import User


@dataclass(frozen=True)
class AccountProfile:
    id: UUID
    email: str
    full_name: str
    role: str


def get_account(*, account_id: UUID) -> User:
    """
    Return the active account with the given ID.

    Raises:
        AccountNotFoundError: If no active account matches.
    """
    try:
        return User.objects.get(id=account_id, is_active=True)
    except User.DoesNotExist:
        raise AccountNotFoundError(f"Account {account_id} not found")


def get_account_profile(*, account_id: UUID) -> AccountProfile:
    """Resolve an account ID to ``{email, full_name, role}``."""
    user = get_account(account_id=account_id)
    return AccountProfile(
        id=user.id,
        email=user.email,
        full_name=user.get_display_name(),
        role=user.role,
    )
