"""
Marketplace app services layer.

Views are thin HTTP handlers; every referral rule lives here.
"""

from .exceptions import (
    MarketplaceServiceError,
    ValidationError,
    NotFound,
    ListingNotFoundError,
    ProspectNotFoundError,
    SelfReferralNotAllowed,
    AlreadyConverted,
    InvalidProspectState,
)
from .fingerprint import client_ip_from_request, hash_ip
from .impression_tracking import record_impression, VALID_EVENTS
from .listing_management import (
    create_listing,
    update_listing,
    remove_listing,
    reactivate_listing,
    get_owned_listing,
    get_my_listings,
    get_active_listings,
    get_public_listing,
    record_listing_view,
)
from .share_registry import (
    get_or_create_share,
    get_share,
    build_share_link,
    get_member_shares,
    get_love_gift_summary,
)
from .referral_guard import effective_share_code, clean_share_code
from .prospect_capture import submit_prospect, RevealResult
from .sale_confirmation import (
    confirm_sale,
    reject_prospect,
    get_listing_prospects,
    SaleConfirmation,
)

__all__ = [
    # Exceptions
    'MarketplaceServiceError',
    'ValidationError',
    'NotFound',
    'ListingNotFoundError',
    'ProspectNotFoundError',
    'SelfReferralNotAllowed',
    'AlreadyConverted',
    'InvalidProspectState',
    # Fingerprinting
    'client_ip_from_request',
    'hash_ip',
    # Impressions
    'record_impression',
    'VALID_EVENTS',
    # Listings
    'create_listing',
    'update_listing',
    'remove_listing',
    'reactivate_listing',
    'get_owned_listing',
    'get_my_listings',
    'get_active_listings',
    'get_public_listing',
    'record_listing_view',
    # Shares
    'get_or_create_share',
    'get_share',
    'build_share_link',
    'get_member_shares',
    'get_love_gift_summary',
    'effective_share_code',
    'clean_share_code',
    # Prospects
    'submit_prospect',
    'RevealResult',
    'confirm_sale',
    'reject_prospect',
    'get_listing_prospects',
    'SaleConfirmation',
]
