"""
Wallets app services layer.

Balance changes are atomic per account and always leave a ledger entry.
"""

from .exceptions import (
    WalletsServiceError,
    WalletNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTransferError,
)

from .ledger import (
    get_wallet,
    get_or_create_wallet,
    get_balance,
    debit,
    credit,
    top_up,
    transfer,
    list_transactions,
)


__all__ = [
    # Exceptions
    'WalletsServiceError',
    'WalletNotFoundError',
    'InsufficientBalanceError',
    'InvalidAmountError',
    'InvalidTransferError',

    # Ledger
    'get_wallet',
    'get_or_create_wallet',
    'get_balance',
    'debit',
    'credit',
    'top_up',
    'transfer',
    'list_transactions',
]
