"""
Notifications app services layer.

Other apps deliver messages through send_notification() or
send_notification_on_commit(); both swallow and log delivery failures.
"""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
)
from .delivery import (
    send_notification,
    send_notification_on_commit,
)
from .inbox import (
    get_member_notifications,
    mark_as_read,
    mark_all_as_read,
)

__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',
    # Delivery
    'send_notification',
    'send_notification_on_commit',
    # Inbox
    'get_member_notifications',
    'mark_as_read',
    'mark_all_as_read',
]
