"""
Domain-specific exceptions for marketplace app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.

Exception Hierarchy:
    MarketplaceServiceError (base)
    ├── ValidationError
    ├── NotFound
    │   ├── ListingNotFoundError
    │   └── ProspectNotFoundError
    ├── SelfReferralNotAllowed
    ├── AlreadyConverted
    └── InvalidProspectState
"""


class MarketplaceServiceError(Exception):
    """Base exception for all marketplace service errors."""
    pass


class ValidationError(MarketplaceServiceError):
    """Raised when required input is missing or malformed."""
    pass


class NotFound(MarketplaceServiceError):
    """
    Raised when a listing or prospect does not exist, or the caller
    does not own it. Both cases look the same to the caller.
    """
    pass


class ListingNotFoundError(NotFound):
    """Raised when a listing does not exist or is not accessible."""
    pass


class ProspectNotFoundError(NotFound):
    """Raised when a prospect does not exist or belongs to another listing."""
    pass


class SelfReferralNotAllowed(MarketplaceServiceError):
    """Raised when a member tries to get a share link for their own listing."""
    pass


class AlreadyConverted(MarketplaceServiceError):
    """Raised when a sale is confirmed twice for the same prospect."""
    pass


class InvalidProspectState(MarketplaceServiceError):
    """Raised when a prospect's status does not allow the requested transition."""
    pass
