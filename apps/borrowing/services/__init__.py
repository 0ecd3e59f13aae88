"""
Borrowing app services layer.

The lifecycle functions are the only way a request changes status.
Ledger errors from inventory and wallets are re-exported so callers can
handle every lifecycle outcome from one import.
"""

from .exceptions import (
    BorrowingServiceError,
    RequestNotFoundError,
    BorrowingValidationError,
    InvalidReturnDateError,
    InvalidTransitionError,
)

from apps.inventory.services.exceptions import (
    KitNotFoundError,
    ComponentNotFoundError,
    InsufficientInventoryError,
)
from apps.wallets.services.exceptions import InsufficientBalanceError

from .lifecycle import (
    ReturnOutcome,
    create_borrowing_request,
    approve_borrowing_request,
    reject_borrowing_request,
    inspect_and_return,
    get_borrowing_request,
    list_requests_for_account,
    list_all_requests,
    list_requests_by_status,
)


__all__ = [
    # Exceptions
    'BorrowingServiceError',
    'RequestNotFoundError',
    'BorrowingValidationError',
    'InvalidReturnDateError',
    'InvalidTransitionError',
    'KitNotFoundError',
    'ComponentNotFoundError',
    'InsufficientInventoryError',
    'InsufficientBalanceError',

    # Lifecycle
    'ReturnOutcome',
    'create_borrowing_request',
    'approve_borrowing_request',
    'reject_borrowing_request',
    'inspect_and_return',
    'get_borrowing_request',
    'list_requests_for_account',
    'list_all_requests',
    'list_requests_by_status',
]
