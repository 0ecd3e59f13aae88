"""
Domain-specific exceptions for wallets app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class WalletsServiceError(Exception):
    """Base exception for all wallet service errors."""
    pass


class WalletNotFoundError(WalletsServiceError):
    """Raised when an account has no wallet."""
    pass


class InsufficientBalanceError(WalletsServiceError):
    """Raised when a debit would take the balance below zero."""
    pass


class InvalidAmountError(WalletsServiceError):
    """Raised when an amount is non-positive or outside allowed limits."""
    pass


class InvalidTransferError(WalletsServiceError):
    """Raised when a transfer targets the sender's own wallet."""
    pass
