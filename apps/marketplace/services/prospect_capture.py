"""
Prospect capture service.

An anonymous visitor identifies themselves on a listing. Storing that
record is what unlocks the discounted price: the reveal payload is only
ever built from a freshly created prospect.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.marketplace.models import (
    Listing,
    ListingShare,
    ListingStatus,
    Prospect,
    ProspectAction,
    ProspectStatus,
)

from .exceptions import ListingNotFoundError, ValidationError
from .fingerprint import hash_ip
from .referral_guard import clean_share_code
from .sharer_notifications import notify_sharer_prospect

logger = logging.getLogger(__name__)

USER_AGENT_MAX_LENGTH = 500

INITIAL_STATUS = {
    ProspectAction.REVEAL: ProspectStatus.REVEALED,
    ProspectAction.CONTACT: ProspectStatus.CONTACTED,
}


@dataclass(frozen=True)
class RevealResult:
    """What an identified visitor is now entitled to see."""
    prospect_id: UUID
    action_type: str
    discounted_price: Optional[Decimal]
    original_price: Optional[Decimal]
    seller_name: str
    love_gift_amount: Decimal
    coupon_code: Optional[str]


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or '').strip()
    return value or None


def resolve_sharer_id(*, listing_id: UUID, share_code: Optional[str]) -> Optional[UUID]:
    """Sharer the code belongs to on this listing, or None if it doesn't resolve."""
    if not share_code:
        return None
    return (
        ListingShare.objects
        .filter(share_code=share_code, listing_id=listing_id)
        .values_list('sharer_id', flat=True)
        .first()
    )


@transaction.atomic
def submit_prospect(
    *,
    listing_id: UUID,
    action_type: str,
    prospect_name: str,
    share_code: Optional[str] = None,
    prospect_mobile: Optional[str] = None,
    prospect_email: Optional[str] = None,
    consented: bool = False,
    ip_address: Optional[str] = None,
    user_agent: str = ''
) -> RevealResult:
    """
    Record a visitor's reveal/contact request and return the gated prices.

    Attribution is resolved once, here, and frozen onto the prospect. An
    unknown or foreign share code is kept as submitted but attributes to
    no one; it never fails the submission.

    Args:
        listing_id: Listing the visitor is looking at
        action_type: 'reveal' or 'contact'
        prospect_name: Visitor's name (required)
        share_code: ?ref= code the visitor arrived with
        prospect_mobile: Optional contact number
        prospect_email: Optional contact email
        consented: Visitor agreed to be contacted
        ip_address: Client address, hashed before storage
        user_agent: Client user agent, truncated

    Returns:
        RevealResult with the discounted price unlocked

    Raises:
        ValidationError: If name is blank or action_type is unknown
        ListingNotFoundError: If listing doesn't exist or was removed
    """
    prospect_name = (prospect_name or '').strip()
    if not prospect_name:
        raise ValidationError("Name is required")

    if action_type not in INITIAL_STATUS:
        raise ValidationError(f"Invalid action type: {action_type}")

    try:
        listing = (
            Listing.objects
            .select_related('owner')
            .exclude(status=ListingStatus.REMOVED)
            .get(id=listing_id)
        )
    except Listing.DoesNotExist:
        raise ListingNotFoundError(f"Listing with ID {listing_id} not found")

    share_code = clean_share_code(share_code)
    sharer_id = resolve_sharer_id(listing_id=listing.id, share_code=share_code)

    prospect = Prospect.objects.create(
        listing=listing,
        share_code=share_code,
        sharer_id=sharer_id,
        prospect_name=prospect_name,
        prospect_mobile=_clean(prospect_mobile),
        prospect_email=_clean(prospect_email),
        action_type=action_type,
        status=INITIAL_STATUS[action_type],
        consented=bool(consented),
        ip_hash=hash_ip(ip_address),
        user_agent=(user_agent or '')[:USER_AGENT_MAX_LENGTH],
    )

    if sharer_id:
        notify_sharer_prospect(
            sharer_id=sharer_id,
            listing_title=listing.title,
            prospect_name=prospect_name,
            action_type=action_type,
        )
    elif share_code:
        logger.info("Share code %r did not resolve on listing %s", share_code, listing.id)

    logger.info(
        "Prospect %s (%s) captured on listing %s from %s, referred by %s",
        prospect.id, action_type, listing.id, prospect.ip_hash, sharer_id
    )

    return RevealResult(
        prospect_id=prospect.id,
        action_type=action_type,
        discounted_price=listing.discounted_price,
        original_price=listing.original_price,
        seller_name=listing.owner.get_display_name(),
        love_gift_amount=listing.love_gift_amount,
        coupon_code=share_code,
    )
