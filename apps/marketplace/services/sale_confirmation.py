"""
Sale confirmation and Love Gift crediting.

Converting a prospect, marking the listing sold and crediting the
referring share happen in one transaction. The prospect row is locked
first, so a duplicate confirmation waits and then sees 'converted'.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.services import get_display_names
from apps.marketplace.models import (
    Listing,
    ListingShare,
    ListingStatus,
    Prospect,
    ProspectStatus,
    ShareStatus,
)

from .exceptions import (
    AlreadyConverted,
    InvalidProspectState,
    ListingNotFoundError,
    ProspectNotFoundError,
)
from .sharer_notifications import format_amount, notify_sharer_sale_confirmed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleConfirmation:
    sharer_credited: bool
    love_gift_amount: Decimal
    message: str
    sharer_id: Optional[UUID] = None


def _lock_prospect_and_listing(listing_id: UUID, prospect_id: UUID, owner: User):
    """
    Lock the prospect and its listing for the rest of the transaction.

    A missing prospect, a prospect on another listing, a removed listing
    and a listing owned by someone else all raise NotFound with no
    further detail.
    """
    try:
        prospect = (
            Prospect.objects
            .select_for_update()
            .get(id=prospect_id, listing_id=listing_id)
        )
    except Prospect.DoesNotExist:
        raise ProspectNotFoundError(f"Prospect with ID {prospect_id} not found")

    try:
        listing = (
            Listing.objects
            .select_for_update()
            .exclude(status=ListingStatus.REMOVED)
            .get(id=listing_id, owner=owner)
        )
    except Listing.DoesNotExist:
        raise ProspectNotFoundError(f"Prospect with ID {prospect_id} not found")

    return prospect, listing


@transaction.atomic
def confirm_sale(*, listing_id: UUID, prospect_id: UUID, owner: User) -> SaleConfirmation:
    """
    Confirm that a prospect bought the listing and credit the referrer.

    At most one share is ever credited for a prospect: the prospect
    becomes 'converted' in the same transaction, and a converted prospect
    is rejected on every later attempt.

    Args:
        listing_id: UUID of the listing
        prospect_id: UUID of the buying prospect
        owner: Member confirming (must own the listing)

    Returns:
        SaleConfirmation describing whether a sharer was credited

    Raises:
        ProspectNotFoundError: If prospect/listing is missing, removed or not the caller's
        AlreadyConverted: If this prospect's sale was already confirmed
        InvalidProspectState: If the prospect was rejected
    """
    prospect, listing = _lock_prospect_and_listing(listing_id, prospect_id, owner)

    if prospect.status == ProspectStatus.CONVERTED:
        raise AlreadyConverted("This sale has already been confirmed")
    if prospect.status == ProspectStatus.REJECTED:
        raise InvalidProspectState("A rejected prospect cannot be converted")

    now = timezone.now()

    prospect.status = ProspectStatus.CONVERTED
    prospect.converted_at = now
    prospect.save(update_fields=['status', 'converted_at', 'updated_at'])

    listing.status = ListingStatus.SOLD
    listing.sold_at = now
    listing.save(update_fields=['status', 'sold_at', 'updated_at'])

    love_gift_amount = listing.love_gift_amount or Decimal('0.00')

    # Credit the referrer frozen on the prospect at submission, never re-resolve the code
    share = None
    if prospect.sharer_id and love_gift_amount > 0:
        share = (
            ListingShare.objects
            .select_related('sharer')
            .filter(listing_id=listing.id, sharer_id=prospect.sharer_id)
            .first()
        )

    if share is None:
        logger.info("Sale confirmed on listing %s via prospect %s, no referrer", listing.id, prospect.id)
        return SaleConfirmation(
            sharer_credited=False,
            love_gift_amount=love_gift_amount,
            message="Sale confirmed. No referral link was associated with this sale.",
        )

    ListingShare.objects.filter(id=share.id).update(
        love_gift_earned=F('love_gift_earned') + love_gift_amount,
        status=ShareStatus.CREDITED,
    )

    notify_sharer_sale_confirmed(
        sharer_id=share.sharer_id,
        listing_title=listing.title,
        love_gift_amount=love_gift_amount,
    )

    logger.info(
        "Sale confirmed on listing %s via prospect %s, credited %s to share %s",
        listing.id, prospect.id, love_gift_amount, share.share_code
    )

    sharer_name = share.sharer.get_display_name()
    return SaleConfirmation(
        sharer_credited=True,
        love_gift_amount=love_gift_amount,
        message=f"Sale confirmed. Love Gift of {format_amount(love_gift_amount)} credited to {sharer_name}.",
        sharer_id=share.sharer_id,
    )


@transaction.atomic
def reject_prospect(*, listing_id: UUID, prospect_id: UUID, owner: User) -> Prospect:
    """
    Mark a prospect as not buying. Rejecting twice is a no-op.

    Raises:
        ProspectNotFoundError: If prospect/listing is missing or not the caller's
        AlreadyConverted: If the prospect already bought the listing
    """
    prospect, _listing = _lock_prospect_and_listing(listing_id, prospect_id, owner)

    if prospect.status == ProspectStatus.CONVERTED:
        raise AlreadyConverted("This sale has already been confirmed")

    if prospect.status != ProspectStatus.REJECTED:
        prospect.status = ProspectStatus.REJECTED
        prospect.save(update_fields=['status', 'updated_at'])
    return prospect


def get_listing_prospects(*, listing_id: UUID, owner: User) -> List[Prospect]:
    """
    Prospects for an owned listing, newest first.

    Each prospect carries a sharer_name attribute (None when unattributed).

    Raises:
        ListingNotFoundError: If listing doesn't exist or isn't the caller's
    """
    if not Listing.objects.filter(id=listing_id, owner=owner).exists():
        raise ListingNotFoundError(f"Listing with ID {listing_id} not found")

    prospects = list(
        Prospect.objects
        .filter(listing_id=listing_id)
        .order_by('-created_at')
    )
    names = get_display_names(member_ids=[p.sharer_id for p in prospects])
    for prospect in prospects:
        prospect.sharer_name = names.get(prospect.sharer_id)
    return prospects
