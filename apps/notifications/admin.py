from django.contrib import admin
from apps.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Admin interface for stored notifications."""

    list_display = ['created_at', 'recipient', 'kind', 'title', 'is_read']
    list_filter = ['kind', 'is_read', 'created_at']
    search_fields = ['recipient__email', 'title', 'message']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at']
