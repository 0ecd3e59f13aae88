"""
Domain-specific exceptions for borrowing app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
Inventory and wallet shortfalls are raised by their own ledgers
(InsufficientInventoryError, InsufficientBalanceError).
"""


class BorrowingServiceError(Exception):
    """Base exception for all borrowing service errors."""
    pass


class RequestNotFoundError(BorrowingServiceError):
    """Raised when a borrowing request does not exist."""
    pass


class BorrowingValidationError(BorrowingServiceError):
    """Raised when request input breaks a business rule."""
    pass


class InvalidReturnDateError(BorrowingValidationError):
    """Raised when the expected return date is not in the future."""
    pass


class InvalidTransitionError(BorrowingServiceError):
    """Raised when a status change is not allowed from the current status."""
    pass
