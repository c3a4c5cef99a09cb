"""
Self-referral guard.

A code that would credit the person viewing the listing is dropped before
it reaches any client payload. Share creation enforces the owner rule
separately in share_registry.
"""

from typing import Optional

from apps.marketplace.models import Listing, ListingShare, Prospect

SHARE_CODE_MAX_LENGTH = Prospect._meta.get_field('share_code').max_length


def clean_share_code(share_code: Optional[str]) -> Optional[str]:
    """Stripped ?ref= value, or None when blank or too long to ever resolve."""
    share_code = (share_code or '').strip()
    if not share_code or len(share_code) > SHARE_CODE_MAX_LENGTH:
        return None
    return share_code


def effective_share_code(
    *,
    listing: Listing,
    viewer,
    share_code: Optional[str]
) -> Optional[str]:
    """
    The referral code a viewer's page should carry, or None.

    Args:
        listing: Listing being viewed
        viewer: request.user (may be anonymous)
        share_code: Raw ?ref= value from the URL

    Returns:
        None if the code is blank or oversized, the viewer owns the listing, or the
        viewer is the sharer the code belongs to. The code unchanged
        otherwise, even when it does not resolve.
    """
    share_code = clean_share_code(share_code)
    if not share_code:
        return None

    if listing.is_owned_by(viewer):
        return None

    if viewer is not None and viewer.is_authenticated:
        own_code = ListingShare.objects.filter(
            listing=listing,
            share_code=share_code,
            sharer_id=viewer.id,
        ).exists()
        if own_code:
            return None

    return share_code
