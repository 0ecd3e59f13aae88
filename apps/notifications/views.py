from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .dispatcher import list_notifications, mark_read
from .models import Notification
from .serializers import NotificationSerializer, NotificationFilterSerializer


class NotificationPagination(PageNumberPagination):
    """Custom pagination for notifications."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Inbox of the current user.

    list: Get own notifications (?unread=true for unread only)
    read: Mark a notification as read
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = NotificationPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        filter_serializer = NotificationFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_notifications(
            account_id=self.request.user.id,
            unread_only=filter_serializer.validated_data.get('unread', False),
        )

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark a notification as read."""
        try:
            notification = mark_read(account_id=request.user.id, notification_id=pk)
        except Notification.DoesNotExist:
            return Response({'error': 'Notification not found'}, status=status.HTTP_404_NOT_FOUND)

        return Response(NotificationSerializer(notification).data)
