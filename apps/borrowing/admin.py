# ==========================================
# apps/borrowing/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from apps.borrowing.models import BorrowingRequest, BorrowingRequestComponent, BorrowingStatus


class BorrowingRequestComponentInline(admin.TabularInline):
    """Requested component lines (read-only snapshots)."""
    model = BorrowingRequestComponent
    extra = 0
    fields = ['kit_component', 'component_name', 'unit_price', 'quantity']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(BorrowingRequest)
class BorrowingRequestAdmin(admin.ModelAdmin):
    """
    Admin interface for borrowing requests.

    Read-only: status changes go through the lifecycle API so that
    inventory and wallets stay consistent.
    """

    list_display = [
        'created_at',
        'requested_by',
        'request_type',
        'kit',
        'deposit_amount',
        'status_badge',
        'expect_return_date',
        'is_late',
    ]
    list_filter = ['status', 'request_type', 'is_late', 'created_at']
    search_fields = ['requested_by__email', 'kit__kit_name', 'reason']
    date_hierarchy = 'created_at'
    inlines = [BorrowingRequestComponentInline]
    readonly_fields = [
        'request_type',
        'requested_by',
        'kit',
        'deposit_amount',
        'reason',
        'expect_return_date',
        'actual_return_date',
        'is_late',
        'status',
        'decided_by',
        'decided_at',
        'decision_note',
        'inspected_by',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        """Display request status as colored badge."""
        colors = {
            BorrowingStatus.PENDING_APPROVAL: '#E5A04A',
            BorrowingStatus.APPROVED: '#1890ff',
            BorrowingStatus.REJECTED: '#B85C5C',
            BorrowingStatus.RETURNED: '#6B8E5E',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#999'), obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
