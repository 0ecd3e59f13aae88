# ==========================================
# apps/wallets/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from apps.wallets.models import Wallet, WalletTransaction


class WalletTransactionInline(admin.TabularInline):
    """Read-only ledger entries of a wallet."""
    model = WalletTransaction
    extra = 0
    fields = ['created_at', 'transaction_type', 'amount', 'balance_after', 'reference', 'description']
    readonly_fields = fields
    can_delete = False
    ordering = ['-created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    """
    Admin interface for wallets.

    Balances are read-only here; they change only through the ledger.
    """

    list_display = ['account', 'balance', 'updated_at']
    search_fields = ['account__email', 'account__full_name']
    readonly_fields = ['account', 'balance', 'created_at', 'updated_at']
    inlines = [WalletTransactionInline]


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    """Admin interface for ledger entries."""

    list_display = ['created_at', 'wallet', 'transaction_type', 'amount_display', 'balance_after', 'reference']
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['wallet__account__email', 'reference', 'description']
    date_hierarchy = 'created_at'

    def amount_display(self, obj):
        """Display credits in green and debits in red."""
        color = '#6B8E5E' if obj.amount >= 0 else '#B85C5C'
        return format_html('<span style="color: {};">{}</span>', color, obj.amount)
    amount_display.short_description = 'Amount'
    amount_display.admin_order_field = 'amount'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
