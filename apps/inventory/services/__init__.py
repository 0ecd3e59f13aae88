"""
Inventory app services layer.

All availability changes go through the ledger functions, which lock
rows and append to the movement history.
"""

from .exceptions import (
    InventoryServiceError,
    KitNotFoundError,
    ComponentNotFoundError,
    InsufficientInventoryError,
    InvalidQuantityError,
)

from .ledger import (
    get_kit,
    get_component,
    lock_components,
    reserve,
    release,
    mark_damaged,
    list_history,
)


__all__ = [
    # Exceptions
    'InventoryServiceError',
    'KitNotFoundError',
    'ComponentNotFoundError',
    'InsufficientInventoryError',
    'InvalidQuantityError',

    # Ledger
    'get_kit',
    'get_component',
    'lock_components',
    'reserve',
    'release',
    'mark_damaged',
    'list_history',
]
