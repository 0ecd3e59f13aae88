"""
Wallet ledger.

Balances change only through debit() and credit(). Debits are guarded
conditional updates under a row lock, so the balance can never go
negative even when two debits race. Every change appends a
WalletTransaction carrying the resulting balance.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import F, QuerySet
from loguru import logger

from apps.accounts.services import get_account
from apps.wallets.models import Wallet, WalletTransaction, TransactionType

from .exceptions import (
    WalletNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTransferError,
)


def _check_amount(amount: Decimal) -> None:
    if amount is None or amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")


def _append(wallet: Wallet, transaction_type: str, amount: Decimal,
            reference: str, description: str) -> WalletTransaction:
    return WalletTransaction.objects.create(
        wallet=wallet,
        transaction_type=transaction_type,
        amount=amount,
        balance_after=wallet.balance,
        reference=str(reference or ''),
        description=description,
    )


def get_wallet(*, account_id: UUID) -> Wallet:
    """
    Get the wallet of an account.

    Raises:
        WalletNotFoundError: If the account has no wallet
    """
    try:
        return Wallet.objects.select_related('account').get(account_id=account_id)
    except Wallet.DoesNotExist:
        raise WalletNotFoundError(f"Account {account_id} has no wallet")


def get_or_create_wallet(*, account_id: UUID) -> Wallet:
    """Return the account's wallet, opening an empty one if needed."""
    wallet, created = Wallet.objects.get_or_create(account_id=account_id)
    if created:
        logger.info(f"Opened wallet for account {account_id}")
    return wallet


def get_balance(*, account_id: UUID) -> Decimal:
    """Return the current balance. Accounts without a wallet have zero."""
    balance = (
        Wallet.objects
        .filter(account_id=account_id)
        .values_list('balance', flat=True)
        .first()
    )
    return balance if balance is not None else Decimal('0.00')


@transaction.atomic
def debit(
    *,
    account_id: UUID,
    amount: Decimal,
    transaction_type: str = TransactionType.DEPOSIT_HOLD,
    reference: str = '',
    description: str = ''
) -> WalletTransaction:
    """
    Take money out of a wallet.

    Args:
        account_id: Owner of the wallet
        amount: Positive amount to debit
        transaction_type: Ledger entry type
        reference: ID of the request or penalty the debit belongs to
        description: Human readable note

    Returns:
        The ledger entry (amount is negative)

    Raises:
        InvalidAmountError: If amount is not positive
        InsufficientBalanceError: If the balance is lower than amount,
            including accounts that have no wallet
    """
    _check_amount(amount)

    wallet = Wallet.objects.select_for_update().filter(account_id=account_id).first()
    if wallet is None:
        raise InsufficientBalanceError(f"Account {account_id} has no funds")

    updated = (
        Wallet.objects
        .filter(pk=wallet.pk, balance__gte=amount)
        .update(balance=F('balance') - amount)
    )
    if not updated:
        logger.warning(
            f"Debit of {amount} refused for account {account_id}: balance {wallet.balance}"
        )
        raise InsufficientBalanceError(
            f"Insufficient balance: {wallet.balance} available, {amount} required"
        )

    wallet.refresh_from_db()
    entry = _append(wallet, transaction_type, -amount, reference, description)

    logger.info(f"Debited {amount} from account {account_id} ({transaction_type})")
    return entry


@transaction.atomic
def credit(
    *,
    account_id: UUID,
    amount: Decimal,
    transaction_type: str = TransactionType.DEPOSIT_REFUND,
    reference: str = '',
    description: str = ''
) -> WalletTransaction:
    """
    Put money into a wallet, opening one if the account has none.

    Raises:
        InvalidAmountError: If amount is not positive
    """
    _check_amount(amount)

    get_or_create_wallet(account_id=account_id)
    wallet = Wallet.objects.select_for_update().get(account_id=account_id)
    Wallet.objects.filter(pk=wallet.pk).update(balance=F('balance') + amount)

    wallet.refresh_from_db()
    entry = _append(wallet, transaction_type, amount, reference, description)

    logger.info(f"Credited {amount} to account {account_id} ({transaction_type})")
    return entry


def top_up(*, account_id: UUID, amount: Decimal) -> WalletTransaction:
    """
    Add funds to the account's own wallet.

    Raises:
        InvalidAmountError: If amount is outside the configured limits
    """
    minimum = settings.WALLET_TOP_UP_MIN
    maximum = settings.WALLET_TOP_UP_MAX
    if amount is None or amount < minimum or amount > maximum:
        raise InvalidAmountError(
            f"Top-up amount must be between {minimum} and {maximum}"
        )

    return credit(
        account_id=account_id,
        amount=amount,
        transaction_type=TransactionType.TOP_UP,
        description='Wallet top-up',
    )


@transaction.atomic
def transfer(
    *,
    sender_id: UUID,
    recipient_id: UUID,
    amount: Decimal,
    note: str = ''
) -> tuple:
    """
    Move money between two wallets.

    Both wallets are locked in primary key order before either balance
    changes, so opposite transfers between the same pair cannot deadlock.

    Returns:
        (outgoing entry, incoming entry)

    Raises:
        InvalidAmountError: If amount is not positive
        InvalidTransferError: If sender and recipient are the same account
        AccountNotFoundError: If the recipient does not exist
        InsufficientBalanceError: If the sender cannot cover the amount
    """
    _check_amount(amount)
    if str(sender_id) == str(recipient_id):
        raise InvalidTransferError("Cannot transfer to your own wallet")

    recipient = get_account(account_id=recipient_id)
    get_or_create_wallet(account_id=recipient.id)
    get_or_create_wallet(account_id=sender_id)

    list(
        Wallet.objects
        .select_for_update()
        .filter(account_id__in=[sender_id, recipient.id])
        .order_by('pk')
    )

    outgoing = debit(
        account_id=sender_id,
        amount=amount,
        transaction_type=TransactionType.TRANSFER_OUT,
        reference=recipient.id,
        description=note or f"Transfer to {recipient.email}",
    )
    incoming = credit(
        account_id=recipient.id,
        amount=amount,
        transaction_type=TransactionType.TRANSFER_IN,
        reference=sender_id,
        description=note or 'Transfer received',
    )
    return outgoing, incoming


def list_transactions(
    *,
    account_id: UUID,
    transaction_type: Optional[str] = None
) -> QuerySet:
    """Return the account's ledger entries, newest first."""
    queryset = WalletTransaction.objects.filter(wallet__account_id=account_id)
    if transaction_type:
        queryset = queryset.filter(transaction_type=transaction_type)
    return queryset
