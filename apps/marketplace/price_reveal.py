"""
Price reveal gate.

Builds every listing payload an anonymous visitor can receive. Discounted
prices leave the server only through reveal_payload(), which needs the
result of a freshly stored prospect.
"""

from typing import Optional

from .models import Listing
from .serializers import PublicListingSerializer, RevealSerializer
from .services import effective_share_code, RevealResult


def public_listing_payload(listing: Listing, request, ref: Optional[str] = None) -> dict:
    """Public detail payload with the referral code passed through the self-referral guard."""
    share_code = effective_share_code(listing=listing, viewer=request.user, share_code=ref)
    serializer = PublicListingSerializer(
        listing,
        context={'request': request, 'share_code': share_code}
    )
    return serializer.data


def public_listing_list_payload(listings, request) -> list:
    serializer = PublicListingSerializer(listings, many=True, context={'request': request})
    return serializer.data


def reveal_payload(result: RevealResult) -> dict:
    return RevealSerializer(result).data
