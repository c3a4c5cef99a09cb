"""Read side of a member's notifications."""

from uuid import UUID

from django.db.models import QuerySet

from apps.accounts.models import User
from apps.notifications.models import Notification

from .exceptions import NotificationNotFoundError


def get_member_notifications(*, member: User, unread_only: bool = False) -> QuerySet[Notification]:
    queryset = Notification.objects.filter(recipient=member)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    return queryset.order_by('-created_at')


def mark_as_read(*, notification_id: UUID, member: User) -> Notification:
    """
    Mark a single notification as read.

    Raises:
        NotificationNotFoundError: If it doesn't exist or isn't the member's
    """
    try:
        notification = Notification.objects.get(id=notification_id, recipient=member)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])
    return notification


def mark_all_as_read(*, member: User) -> int:
    """Mark every unread notification of the member as read. Returns the count."""
    return Notification.objects.filter(recipient=member, is_read=False).update(is_read=True)
