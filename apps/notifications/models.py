from django.db import models
import uuid


class NotificationKind(models.TextChoices):
    MARKETPLACE_PROSPECT = 'marketplace_prospect', 'Marketplace prospect'
    MARKETPLACE_SALE = 'marketplace_sale', 'Marketplace sale'
    GENERAL = 'general', 'General'


class Notification(models.Model):
    """In-app notification delivered to a single member."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    kind = models.CharField(
        max_length=32,
        choices=NotificationKind.choices,
        default=NotificationKind.GENERAL
    )
    title = models.CharField(max_length=200)
    body = models.TextField(blank=True)
    link = models.CharField(max_length=500, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
            models.Index(fields=['recipient', 'created_at'], name='notif_recipient_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} -> {self.recipient_id}"
