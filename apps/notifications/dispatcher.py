"""
Notification dispatch.

Lifecycle operations announce outcomes through notify_on_commit(), which
runs the configured dispatcher only after the surrounding transaction
commits. Delivery problems are logged and never reach the caller.
"""

from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string
from loguru import logger

from .models import Notification


class BaseDispatcher:
    """Delivers one notification to one account."""

    def send(self, *, account_id: UUID, kind: str, title: str, message: str) -> None:
        raise NotImplementedError


class DatabaseDispatcher(BaseDispatcher):
    """Stores notifications for the in-app inbox."""

    def send(self, *, account_id, kind, title, message):
        Notification.objects.create(
            recipient_id=account_id,
            kind=kind,
            title=title,
            message=message,
        )


def get_dispatcher() -> BaseDispatcher:
    """Instantiate the class named by NOTIFICATION_DISPATCHER."""
    return import_string(settings.NOTIFICATION_DISPATCHER)()


def notify(*, account_id: UUID, kind: str, title: str, message: str = '') -> bool:
    """
    Send a notification now.

    Returns:
        True if the dispatcher accepted it, False if it failed
    """
    try:
        get_dispatcher().send(account_id=account_id, kind=kind, title=title, message=message)
    except Exception:
        logger.exception(f"Failed to dispatch {kind} notification to {account_id}")
        return False

    logger.debug(f"Dispatched {kind} notification to {account_id}")
    return True


def notify_on_commit(*, account_id: UUID, kind: str, title: str, message: str = '') -> None:
    """Schedule a notification for after the current transaction commits."""
    transaction.on_commit(
        lambda: notify(account_id=account_id, kind=kind, title=title, message=message)
    )


def list_notifications(*, account_id: UUID, unread_only: bool = False):
    """Return the account's notifications, newest first."""
    queryset = Notification.objects.filter(recipient_id=account_id)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    return queryset


def mark_read(*, account_id: UUID, notification_id: UUID) -> Notification:
    """
    Mark one of the account's notifications as read.

    Raises:
        Notification.DoesNotExist: If it does not belong to the account
    """
    notification = Notification.objects.get(id=notification_id, recipient_id=account_id)
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])
    return notification
