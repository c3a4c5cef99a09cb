"""
Notification delivery service.

Delivery is fire-and-forget: callers never see a failure, and a failed
insert never rolls back the caller's own transaction.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.notifications.models import Notification, NotificationKind

logger = logging.getLogger(__name__)


def send_notification(
    *,
    recipient_id: UUID,
    title: str,
    body: str = '',
    link: str = '',
    kind: str = NotificationKind.GENERAL
) -> Optional[Notification]:
    """
    Store an in-app notification for a member.

    Args:
        recipient_id: Member receiving the notification
        title: Short headline
        body: Message text
        link: In-app path the notification points at
        kind: NotificationKind value

    Returns:
        Created Notification, or None if delivery failed
    """
    try:
        # Savepoint keeps an enclosing transaction usable after a failed insert
        with transaction.atomic():
            return Notification.objects.create(
                recipient_id=recipient_id,
                kind=kind,
                title=title[:200],
                body=body,
                link=link,
            )
    except Exception:
        logger.warning(
            "Failed to deliver %s notification to member %s",
            kind, recipient_id, exc_info=True
        )
        return None


def send_notification_on_commit(**kwargs) -> None:
    """Queue send_notification() to run once the current transaction commits."""
    transaction.on_commit(lambda: send_notification(**kwargs))
