"""
Listing management service.

Owner-facing listing lifecycle: create, edit, soft-remove, reactivate,
plus the public browse queries and de-duplicated view counting.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.marketplace.models import (
    Listing,
    ListingStatus,
    ListingType,
    Impression,
    ImpressionEvent,
)

from .exceptions import ListingNotFoundError, ValidationError
from .impression_tracking import record_impression

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'title',
    'description',
    'listing_type',
    'category',
    'condition',
    'location_area',
    'original_price',
    'discounted_price',
    'price_label',
    'love_gift_amount',
)


def _validate_pricing(
    original_price: Optional[Decimal],
    discounted_price: Optional[Decimal],
    love_gift_amount: Optional[Decimal]
) -> None:
    if discounted_price is not None:
        if original_price is None:
            raise ValidationError("A discounted price requires an original price")
        if discounted_price > original_price:
            raise ValidationError("Discounted price cannot exceed the original price")
    if love_gift_amount is not None and love_gift_amount < 0:
        raise ValidationError("Love Gift amount cannot be negative")


@transaction.atomic
def create_listing(
    *,
    owner: User,
    title: str,
    description: str = '',
    listing_type: str = ListingType.SELL,
    category: str = 'Other',
    condition: str = '',
    location_area: str = '',
    original_price: Optional[Decimal] = None,
    discounted_price: Optional[Decimal] = None,
    price_label: str = '',
    love_gift_amount: Decimal = Decimal('0.00')
) -> Listing:
    """
    Create a new active listing.

    Args:
        owner: Member selling the item
        title: Listing title (required)
        original_price: Public price
        discounted_price: Price revealed only to identified prospects
        love_gift_amount: Fixed reward credited to a referring sharer

    Returns:
        Created Listing instance

    Raises:
        ValidationError: If title is blank or pricing is inconsistent
    """
    title = (title or '').strip()
    if not title:
        raise ValidationError("Title is required")

    love_gift_amount = love_gift_amount if love_gift_amount is not None else Decimal('0.00')
    _validate_pricing(original_price, discounted_price, love_gift_amount)

    listing = Listing.objects.create(
        owner=owner,
        title=title,
        description=(description or '').strip(),
        listing_type=listing_type or ListingType.SELL,
        category=category or 'Other',
        condition=condition or '',
        location_area=(location_area or '').strip(),
        original_price=original_price,
        discounted_price=discounted_price,
        price_label=(price_label or '').strip(),
        love_gift_amount=love_gift_amount,
        status=ListingStatus.ACTIVE,
    )
    logger.info("Listing %s created by member %s", listing.id, owner.id)
    return listing


def get_owned_listing(*, listing_id: UUID, owner: User) -> Listing:
    """
    Owner-scoped read.

    Raises:
        ListingNotFoundError: If listing doesn't exist or isn't the caller's
    """
    try:
        return Listing.objects.select_related('owner').get(id=listing_id, owner=owner)
    except Listing.DoesNotExist:
        raise ListingNotFoundError(f"Listing with ID {listing_id} not found")


def _lock_owned_listing(listing_id: UUID, owner: User) -> Listing:
    try:
        return (
            Listing.objects
            .select_for_update()
            .get(id=listing_id, owner=owner)
        )
    except Listing.DoesNotExist:
        raise ListingNotFoundError(f"Listing with ID {listing_id} not found")


@transaction.atomic
def update_listing(*, listing_id: UUID, owner: User, **fields) -> Listing:
    """
    Update editable listing fields (owner only).

    Unknown keys are ignored. Status is never changed here.

    Raises:
        ListingNotFoundError: If listing doesn't exist or isn't the caller's
        ValidationError: If the result would have a blank title or bad pricing
    """
    listing = _lock_owned_listing(listing_id, owner)

    changes = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
    if 'title' in changes:
        changes['title'] = (changes['title'] or '').strip()
        if not changes['title']:
            raise ValidationError("Title is required")
    if changes.get('love_gift_amount', '') is None:
        changes['love_gift_amount'] = Decimal('0.00')

    _validate_pricing(
        changes.get('original_price', listing.original_price),
        changes.get('discounted_price', listing.discounted_price),
        changes.get('love_gift_amount', listing.love_gift_amount),
    )

    for key, value in changes.items():
        setattr(listing, key, value)

    if changes:
        listing.save(update_fields=list(changes.keys()) + ['updated_at'])
    return listing


@transaction.atomic
def remove_listing(*, listing_id: UUID, owner: User) -> Listing:
    """Soft-delete a listing. Listings are never hard-deleted."""
    listing = _lock_owned_listing(listing_id, owner)

    if listing.status != ListingStatus.REMOVED:
        listing.status = ListingStatus.REMOVED
        listing.save(update_fields=['status', 'updated_at'])
        logger.info("Listing %s removed by owner", listing.id)
    return listing


@transaction.atomic
def reactivate_listing(*, listing_id: UUID, owner: User) -> Listing:
    """
    Bring a removed listing back to active.

    Raises:
        ValidationError: If the listing has been sold
    """
    listing = _lock_owned_listing(listing_id, owner)

    if listing.status == ListingStatus.SOLD:
        raise ValidationError("A sold listing cannot be reactivated")

    if listing.status != ListingStatus.ACTIVE:
        listing.status = ListingStatus.ACTIVE
        listing.save(update_fields=['status', 'updated_at'])
    return listing


def get_my_listings(*, owner: User) -> QuerySet[Listing]:
    """Owner's listings (every status) with prospect and share counts."""
    return (
        Listing.objects
        .filter(owner=owner)
        .annotate(
            prospect_count=Count('prospects', distinct=True),
            share_count=Count('shares', distinct=True),
        )
        .order_by('-created_at')
    )


def get_active_listings(
    *,
    listing_type: Optional[str] = None,
    category: Optional[str] = None
) -> QuerySet[Listing]:
    """Public browse query: active listings, newest first."""
    queryset = Listing.objects.filter(status=ListingStatus.ACTIVE).select_related('owner')
    if listing_type:
        queryset = queryset.filter(listing_type=listing_type)
    if category:
        queryset = queryset.filter(category=category)
    return queryset.order_by('-created_at')


def get_public_listing(*, listing_id: UUID) -> Listing:
    """
    Public detail read.

    Raises:
        ListingNotFoundError: If listing doesn't exist or isn't active
    """
    try:
        return (
            Listing.objects
            .select_related('owner')
            .get(id=listing_id, status=ListingStatus.ACTIVE)
        )
    except Listing.DoesNotExist:
        raise ListingNotFoundError(f"Listing with ID {listing_id} not found")


def record_listing_view(
    *,
    listing: Listing,
    ip_hash: str,
    share_code: Optional[str] = None
) -> bool:
    """
    Count a unique view of a listing.

    A fingerprint counts once per listing inside the dedup window. Like the
    impression tracker this is best-effort and never raises.

    Returns:
        True if the view was counted, False if it was a repeat or failed
    """
    window_start = timezone.now() - timedelta(hours=settings.IMPRESSION_DEDUP_WINDOW_HOURS)
    try:
        with transaction.atomic():
            seen = Impression.objects.filter(
                listing=listing,
                event=ImpressionEvent.IMPRESSION,
                ip_hash=ip_hash,
                created_at__gte=window_start,
            ).exists()
            if seen:
                return False

            Listing.objects.filter(id=listing.id).update(view_count=F('view_count') + 1)
    except Exception:
        logger.warning("Failed to count view for listing %s", listing.id, exc_info=True)
        return False

    return record_impression(
        listing_id=listing.id,
        share_code=share_code,
        event=ImpressionEvent.IMPRESSION,
        ip_hash=ip_hash,
    )
