"""
Share registry service.

Issues one referral code per (listing, member) pair. The pair is guarded
by a database unique constraint; losing a creation race is resolved by
re-reading the winner's row.
"""

import logging
import secrets
from collections import defaultdict
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Count, Q, Sum, DecimalField
from django.db.models.functions import Coalesce

from apps.accounts.models import User
from apps.marketplace.models import (
    Listing,
    ListingShare,
    ListingStatus,
    ShareStatus,
    Impression,
    ImpressionEvent,
    Prospect,
)

from .exceptions import ListingNotFoundError, SelfReferralNotAllowed

logger = logging.getLogger(__name__)

# 6 random bytes -> 12 lowercase hex chars
SHARE_CODE_BYTES = 6


def generate_share_code() -> str:
    return secrets.token_hex(SHARE_CODE_BYTES)


def _find_share(listing_id: UUID, member_id: UUID) -> Optional[ListingShare]:
    return (
        ListingShare.objects
        .filter(listing_id=listing_id, sharer_id=member_id)
        .first()
    )


def build_share_link(listing_id: UUID, share_code: str) -> str:
    """Absolute public URL carrying the referral code."""
    base_url = settings.MARKETPLACE_BASE_URL.rstrip('/')
    return f"{base_url}/marketplace/{listing_id}?ref={share_code}"


def get_or_create_share(*, listing_id: UUID, member: User) -> Tuple[ListingShare, bool]:
    """
    Return the member's share for a listing, creating it on first request.

    Safe under concurrent duplicate requests: the (listing, sharer) unique
    constraint rejects the second insert and the existing row is returned.

    Args:
        listing_id: UUID of the listing to share
        member: Member requesting the link

    Returns:
        Tuple of (ListingShare, created)

    Raises:
        ListingNotFoundError: If listing doesn't exist or isn't active
        SelfReferralNotAllowed: If member owns the listing
        RuntimeError: If no unique code could be drawn after retries
    """
    try:
        listing = Listing.objects.get(id=listing_id)
    except Listing.DoesNotExist:
        raise ListingNotFoundError(f"Listing with ID {listing_id} not found")

    if listing.status != ListingStatus.ACTIVE:
        raise ListingNotFoundError("Listing not found or inactive")

    if listing.owner_id == member.id:
        raise SelfReferralNotAllowed("You cannot share your own listing")

    existing = _find_share(listing.id, member.id)
    if existing:
        return existing, False

    max_retries = settings.SHARE_CODE_MAX_RETRIES
    for attempt in range(max_retries):
        share_code = generate_share_code()
        try:
            with transaction.atomic():
                share = ListingShare.objects.create(
                    listing=listing,
                    sharer=member,
                    share_code=share_code,
                    love_gift_earned=Decimal('0.00'),
                    status=ShareStatus.PENDING,
                )
        except IntegrityError:
            # Either a concurrent request created the pair, or the code collided
            existing = _find_share(listing.id, member.id)
            if existing:
                return existing, False
            logger.warning(
                "Share code collision for listing %s (attempt %d/%d)",
                listing.id, attempt + 1, max_retries
            )
            continue

        logger.info("Share %s created for listing %s by member %s", share.share_code, listing.id, member.id)
        return share, True

    raise RuntimeError(
        f"Failed to generate unique share code after {max_retries} attempts"
    )


def get_share(*, listing_id: UUID, member: User) -> Optional[ListingShare]:
    """Read-only lookup of the member's share for a listing, or None."""
    return _find_share(listing_id, member.id)


def get_member_shares(*, member: User) -> List[ListingShare]:
    """
    The member's shares, newest first, each annotated with engagement stats.

    Annotated attributes:
        impressions: 'impression' events logged with the share's code
        cta_clicks: 'reveal_click' plus 'contact_click' events
        prospect_count: prospects on the listing that quoted the code
    """
    shares = list(
        ListingShare.objects
        .filter(sharer=member)
        .select_related('listing')
        .order_by('-created_at')
    )
    codes = [share.share_code for share in shares]
    if not codes:
        return shares

    event_counts = defaultdict(dict)
    impression_rows = (
        Impression.objects
        .filter(share_code__in=codes)
        .values('share_code', 'event')
        .annotate(count=Count('id'))
        .order_by()
    )
    for row in impression_rows:
        event_counts[row['share_code']][row['event']] = row['count']

    prospect_rows = (
        Prospect.objects
        .filter(share_code__in=codes)
        .values('listing_id', 'share_code')
        .annotate(count=Count('id'))
        .order_by()
    )
    prospect_counts = {
        (row['listing_id'], row['share_code']): row['count']
        for row in prospect_rows
    }

    for share in shares:
        events = event_counts.get(share.share_code, {})
        share.impressions = events.get(ImpressionEvent.IMPRESSION, 0)
        share.cta_clicks = (
            events.get(ImpressionEvent.REVEAL_CLICK, 0)
            + events.get(ImpressionEvent.CONTACT_CLICK, 0)
        )
        share.prospect_count = prospect_counts.get((share.listing_id, share.share_code), 0)

    return shares


def get_love_gift_summary(*, member: User) -> dict:
    """
    Earnings overview across all of the member's shares.

    Returns:
        dict with total_earned, share_count, credited_count, pending_count
    """
    totals = ListingShare.objects.filter(sharer=member).aggregate(
        total_earned=Coalesce(
            Sum('love_gift_earned'),
            Decimal('0.00'),
            output_field=DecimalField(max_digits=12, decimal_places=2)
        ),
        share_count=Count('id'),
        credited_count=Count('id', filter=Q(status=ShareStatus.CREDITED)),
        pending_count=Count('id', filter=Q(status=ShareStatus.PENDING)),
    )
    return totals
