"""Domain exceptions for accounts app."""


class AccountsServiceError(Exception):
    """Base exception for account lookup errors."""
    pass


class AccountNotFoundError(AccountsServiceError):
    """Raised when an account does not exist or is inactive."""
    pass
