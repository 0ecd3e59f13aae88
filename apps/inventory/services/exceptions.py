"""
Domain-specific exceptions for inventory app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class InventoryServiceError(Exception):
    """Base exception for all inventory service errors."""
    pass


class KitNotFoundError(InventoryServiceError):
    """Raised when a kit does not exist."""
    pass


class ComponentNotFoundError(InventoryServiceError):
    """Raised when a kit component does not exist."""
    pass


class InsufficientInventoryError(InventoryServiceError):
    """Raised when fewer units are available than requested."""
    pass


class InvalidQuantityError(InventoryServiceError):
    """Raised when a ledger movement is given a non-positive quantity."""
    pass
