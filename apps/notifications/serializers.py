from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for inbox notifications."""

    class Meta:
        model = Notification
        fields = [
            'id',
            'kind',
            'title',
            'message',
            'is_read',
            'created_at',
        ]


class NotificationFilterSerializer(serializers.Serializer):
    """Validate query parameters for the inbox listing."""

    unread = serializers.BooleanField(required=False, default=False)
