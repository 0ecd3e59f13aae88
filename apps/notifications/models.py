from django.db import models
import uuid


class NotificationKind(models.TextChoices):
    RENTAL_REQUEST_CREATED = 'RENTAL_REQUEST_CREATED', 'Rental request created'
    RENTAL_APPROVED = 'RENTAL_APPROVED', 'Rental approved'
    RENTAL_REJECTED = 'RENTAL_REJECTED', 'Rental rejected'
    FINE_ISSUED = 'FINE_ISSUED', 'Fine issued'
    RETURN_COMPLETED = 'RETURN_COMPLETED', 'Return completed'


class Notification(models.Model):
    """In-app notification stored by the default dispatcher."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    kind = models.CharField(max_length=40, choices=NotificationKind.choices)
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notifications_unread_idx'),
        ]

    def __str__(self):
        return f"{self.kind} -> {self.recipient_id}"
