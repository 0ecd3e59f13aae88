from django.db import models
from decimal import Decimal
import uuid


class TransactionType(models.TextChoices):
    TOP_UP = 'TOP_UP', 'Top up'
    DEPOSIT_HOLD = 'DEPOSIT_HOLD', 'Deposit hold'
    DEPOSIT_REFUND = 'DEPOSIT_REFUND', 'Deposit refund'
    PENALTY_PAYMENT = 'PENALTY_PAYMENT', 'Penalty payment'
    TRANSFER_IN = 'TRANSFER_IN', 'Transfer in'
    TRANSFER_OUT = 'TRANSFER_OUT', 'Transfer out'


class Wallet(models.Model):
    """Prepaid balance of an account. One wallet per account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='wallet'
    )
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'wallets'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name='wallet_balance_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.account.email}: {self.balance}"


class WalletTransaction(models.Model):
    """Append-only ledger entry for every balance change."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    wallet = models.ForeignKey(
        Wallet,
        on_delete=models.CASCADE,
        related_name='transactions'
    )
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)

    # Positive for credits, negative for debits
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    balance_after = models.DecimalField(max_digits=14, decimal_places=2)

    # Borrow request, penalty or counterpart wallet
    reference = models.CharField(max_length=64, blank=True, db_index=True)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'wallet_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['wallet', 'created_at'], name='wallet_tx_wallet_created_idx'),
            models.Index(fields=['transaction_type'], name='wallet_tx_type_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount}"
