from decimal import Decimal
from rest_framework import serializers
from apps.penalties.services import outstanding_total
from .models import Wallet, WalletTransaction, TransactionType


class WalletSerializer(serializers.ModelSerializer):
    """Serializer for a wallet and its owner."""

    account_email = serializers.EmailField(source='account.email', read_only=True)

    class Meta:
        model = Wallet
        fields = [
            'id',
            'account',
            'account_email',
            'balance',
            'updated_at',
        ]


class MyWalletSerializer(WalletSerializer):
    """The owner's own wallet, with what they still owe in penalties."""

    outstanding_penalties = serializers.SerializerMethodField()

    class Meta(WalletSerializer.Meta):
        fields = WalletSerializer.Meta.fields + ['outstanding_penalties']

    def get_outstanding_penalties(self, obj) -> str:
        return str(outstanding_total(account_id=obj.account_id))


class WalletTransactionSerializer(serializers.ModelSerializer):
    """Serializer for ledger entries."""

    class Meta:
        model = WalletTransaction
        fields = [
            'id',
            'transaction_type',
            'amount',
            'balance_after',
            'reference',
            'description',
            'created_at',
        ]


class TransferResponseSerializer(serializers.Serializer):
    outgoing = WalletTransactionSerializer()
    incoming = WalletTransactionSerializer()


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()


# =============================================================================
# Input serializers
# =============================================================================

class TopUpInputSerializer(serializers.Serializer):
    """
    Validate input for a wallet top-up.

    Limits are enforced by the ledger so they follow settings.
    """

    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class TransferInputSerializer(serializers.Serializer):
    """Validate input for a wallet-to-wallet transfer."""

    recipient = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
    note = serializers.CharField(max_length=255, required=False, allow_blank=True)


class TransactionFilterSerializer(serializers.Serializer):
    """Validate query parameters for the transaction listing."""

    transaction_type = serializers.ChoiceField(choices=TransactionType.choices, required=False)
