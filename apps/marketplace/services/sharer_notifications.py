"""Notifications sent to referring members. All are queued until commit."""

from decimal import Decimal
from uuid import UUID

from django.conf import settings

from apps.marketplace.models import ProspectAction
from apps.notifications.models import NotificationKind
from apps.notifications.services import send_notification_on_commit

MY_SHARES_LINK = '/marketplace/my-shares'


def format_amount(amount: Decimal) -> str:
    """Currency-prefixed amount with thousands separators: ₱1,500 or ₱99.50."""
    text = f"{amount:,.2f}"
    if text.endswith('.00'):
        text = text[:-3]
    return f"{settings.MARKETPLACE_CURRENCY_SYMBOL}{text}"


def notify_sharer_prospect(
    *,
    sharer_id: UUID,
    listing_title: str,
    prospect_name: str,
    action_type: str
) -> None:
    if action_type == ProspectAction.CONTACT:
        action = 'contacted you'
    else:
        action = 'revealed the discount'

    send_notification_on_commit(
        recipient_id=sharer_id,
        kind=NotificationKind.MARKETPLACE_PROSPECT,
        title='Someone responded to your share!',
        body=f'{prospect_name} {action} via your shared link for "{listing_title}".',
        link=MY_SHARES_LINK,
    )


def notify_sharer_sale_confirmed(
    *,
    sharer_id: UUID,
    listing_title: str,
    love_gift_amount: Decimal
) -> None:
    send_notification_on_commit(
        recipient_id=sharer_id,
        kind=NotificationKind.MARKETPLACE_SALE,
        title='Your share led to a sale!',
        body=(
            f'The seller confirmed a sale for "{listing_title}". '
            f"You've been credited {format_amount(love_gift_amount)} Love Gift!"
        ),
        link=MY_SHARES_LINK,
    )
