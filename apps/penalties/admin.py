# ==========================================
# apps/penalties/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from apps.penalties.models import Penalty, PenaltyDetail, PenaltyPolicy


@admin.register(PenaltyPolicy)
class PenaltyPolicyAdmin(admin.ModelAdmin):
    """Admin interface for penalty policies (catalog CRUD)."""

    list_display = ['policy_name', 'policy_type', 'amount', 'issued_date', 'resolved']
    list_filter = ['policy_type']
    search_fields = ['policy_name']
    ordering = ['policy_type', '-issued_date']


class PenaltyDetailInline(admin.TabularInline):
    """Penalty lines (read-only)."""
    model = PenaltyDetail
    extra = 0
    fields = ['description', 'quantity', 'amount', 'policy', 'kit_component', 'image_url']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Penalty)
class PenaltyAdmin(admin.ModelAdmin):
    """Admin interface for penalties."""

    list_display = [
        'take_effect_date',
        'account',
        'penalty_type',
        'total_amount',
        'settled_amount',
        'resolved_badge',
        'semester',
    ]
    list_filter = ['resolved', 'penalty_type', 'semester']
    search_fields = ['account__email', 'note']
    date_hierarchy = 'take_effect_date'
    inlines = [PenaltyDetailInline]
    readonly_fields = [
        'borrow_request',
        'account',
        'penalty_type',
        'total_amount',
        'settled_amount',
        'resolved',
        'resolved_at',
        'take_effect_date',
        'semester',
        'created_at',
        'updated_at',
    ]

    def resolved_badge(self, obj):
        """Display payment state as colored badge."""
        if obj.resolved:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">{}</span>',
                'Resolved'
            )
        return format_html(
            '<span style="background: #B85C5C; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{} due</span>',
            obj.outstanding_amount
        )
    resolved_badge.short_description = 'Status'
    resolved_badge.admin_order_field = 'resolved'

    def has_add_permission(self, request):
        return False
