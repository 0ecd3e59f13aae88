# ==========================================
# apps/inventory/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from apps.inventory.models import Kit, KitComponent, KitComponentHistory, KitStatus


STATUS_COLORS = {
    KitStatus.AVAILABLE: '#6B8E5E',
    KitStatus.IN_USE: '#1890ff',
    KitStatus.MAINTENANCE: '#E5A04A',
    KitStatus.DAMAGED: '#B85C5C',
}


def _status_badge(obj):
    return format_html(
        '<span style="background: {}; color: white; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        STATUS_COLORS.get(obj.status, '#999'), obj.get_status_display()
    )


class KitComponentInline(admin.TabularInline):
    """Inline admin for components bundled in a kit."""
    model = KitComponent
    extra = 1
    fields = [
        'component_name',
        'component_type',
        'quantity_total',
        'quantity_available',
        'price_per_unit',
        'status',
    ]


@admin.register(Kit)
class KitAdmin(admin.ModelAdmin):
    """Admin interface for kits (catalog CRUD)."""

    list_display = [
        'kit_name',
        'kit_type',
        'status_badge',
        'quantity_available',
        'quantity_total',
        'amount',
        'updated_at',
    ]
    list_filter = ['status', 'kit_type']
    search_fields = ['kit_name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [KitComponentInline]
    ordering = ['kit_name']

    fieldsets = (
        ('Basic Information', {
            'fields': ('kit_name', 'kit_type', 'status', 'description', 'image_url')
        }),
        ('Stock & Deposit', {
            'fields': ('quantity_total', 'quantity_available', 'amount')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        return _status_badge(obj)
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(KitComponent)
class KitComponentAdmin(admin.ModelAdmin):
    """Admin interface for components."""

    list_display = [
        'component_name',
        'component_type',
        'kit',
        'status_badge',
        'quantity_available',
        'quantity_total',
        'price_per_unit',
    ]
    list_filter = ['status', 'component_type']
    search_fields = ['component_name', 'kit__kit_name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['component_name']

    def status_badge(self, obj):
        return _status_badge(obj)
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(KitComponentHistory)
class KitComponentHistoryAdmin(admin.ModelAdmin):
    """Read-only view of the movement log."""

    list_display = ['created_at', 'action', 'quantity', 'kit', 'kit_component', 'borrow_request_id']
    list_filter = ['action', 'created_at']
    search_fields = ['kit__kit_name', 'kit_component__component_name', 'note']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
