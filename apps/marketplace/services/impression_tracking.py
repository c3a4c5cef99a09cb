"""
Impression tracking service.

Best-effort engagement log. Nothing in the referral flow depends on these
rows, so every failure is logged and swallowed here.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.marketplace.models import Impression, ImpressionEvent, Listing

from .referral_guard import clean_share_code

logger = logging.getLogger(__name__)

VALID_EVENTS = frozenset(ImpressionEvent.values)


def record_impression(
    *,
    listing_id: UUID,
    share_code: Optional[str],
    event: str,
    ip_hash: str = ''
) -> bool:
    """
    Append an impression/click event.

    Never raises. Unknown events, dangling listing ids and database errors
    are all logged and reported as False.

    Returns:
        True if the event was stored
    """
    if event not in VALID_EVENTS:
        logger.warning("Ignoring unknown impression event %r for listing %s", event, listing_id)
        return False

    try:
        # FK checks are deferred to commit, so look the listing up first
        if not Listing.objects.filter(id=listing_id).exists():
            logger.warning("Ignoring %s impression for unknown listing %s", event, listing_id)
            return False

        # Savepoint keeps an enclosing transaction usable after a failed insert
        with transaction.atomic():
            Impression.objects.create(
                listing_id=listing_id,
                share_code=clean_share_code(share_code),
                event=event,
                ip_hash=ip_hash,
            )
    except Exception:
        logger.warning(
            "Failed to record %s impression for listing %s", event, listing_id, exc_info=True
        )
        return False

    return True
