# ==========================================
# apps/marketplace/models.py
# ==========================================

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class ListingType(models.TextChoices):
    SELL = 'sell', 'For Sale'
    BUY = 'buy', 'Wanted'
    SERVICE = 'service', 'Service'
    DONATE = 'donate', 'Free / Donate'
    RENT = 'rent', 'For Rent'


class ListingCondition(models.TextChoices):
    NEW = 'new', 'Brand New'
    LIKE_NEW = 'like_new', 'Like New'
    GOOD = 'good', 'Good'
    FAIR = 'fair', 'Fair'
    POOR = 'poor', 'For Parts'


class ListingStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    SOLD = 'sold', 'Sold'
    REMOVED = 'removed', 'Removed'


class ShareStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CREDITED = 'credited', 'Credited'


class ProspectAction(models.TextChoices):
    REVEAL = 'reveal', 'Reveal price'
    CONTACT = 'contact', 'Contact seller'


class ProspectStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    REVEALED = 'revealed', 'Revealed'
    CONTACTED = 'contacted', 'Contacted'
    CONVERTED = 'converted', 'Converted'
    REJECTED = 'rejected', 'Rejected'


class ImpressionEvent(models.TextChoices):
    IMPRESSION = 'impression', 'Impression'
    REVEAL_CLICK = 'reveal_click', 'Reveal click'
    CONTACT_CLICK = 'contact_click', 'Contact click'


class Listing(models.Model):
    """
    Marketplace listing owned by a member.

    discounted_price is stored here but only ever serialized for the owner
    or in a prospect submission response.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='marketplace_listings'
    )

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    listing_type = models.CharField(
        max_length=20,
        choices=ListingType.choices,
        default=ListingType.SELL
    )
    category = models.CharField(max_length=100, default='Other')
    condition = models.CharField(
        max_length=20,
        choices=ListingCondition.choices,
        blank=True
    )
    location_area = models.CharField(max_length=200, blank=True)

    # Pricing
    original_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    discounted_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    price_label = models.CharField(max_length=100, blank=True)

    # Fixed referral reward paid to the sharer on a confirmed sale
    love_gift_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    status = models.CharField(
        max_length=20,
        choices=ListingStatus.choices,
        default=ListingStatus.ACTIVE
    )
    view_count = models.PositiveIntegerField(default=0)
    sold_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'marketplace_listings'
        indexes = [
            models.Index(fields=['status', 'created_at'], name='mkt_listing_status_idx'),
            models.Index(fields=['owner', 'created_at'], name='mkt_listing_owner_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def has_discount(self):
        return (
            self.discounted_price is not None
            and self.original_price is not None
            and self.discounted_price < self.original_price
        )

    def is_owned_by(self, user):
        return bool(user and user.is_authenticated and self.owner_id == user.id)


class ListingShare(models.Model):
    """A member's referral link for one listing."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(
        Listing,
        on_delete=models.CASCADE,
        related_name='shares'
    )
    sharer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='listing_shares'
    )
    share_code = models.CharField(max_length=32, unique=True, db_index=True, editable=False)
    love_gift_earned = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    status = models.CharField(
        max_length=20,
        choices=ShareStatus.choices,
        default=ShareStatus.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'marketplace_listing_shares'
        constraints = [
            models.UniqueConstraint(
                fields=['listing', 'sharer'],
                name='unique_share_per_listing_sharer'
            ),
        ]
        indexes = [
            models.Index(fields=['sharer', 'created_at'], name='mkt_share_sharer_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.share_code} ({self.listing_id})"


class Prospect(models.Model):
    """
    An anonymous visitor who identified themselves on a listing.

    share_code is the raw value submitted; sharer is the referrer it
    resolved to at submission time. Both are written once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(
        Listing,
        on_delete=models.CASCADE,
        related_name='prospects'
    )
    share_code = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    sharer = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='referred_prospects'
    )

    prospect_name = models.CharField(max_length=200)
    prospect_mobile = models.CharField(max_length=30, null=True, blank=True)
    prospect_email = models.EmailField(null=True, blank=True)

    action_type = models.CharField(max_length=20, choices=ProspectAction.choices)
    status = models.CharField(
        max_length=20,
        choices=ProspectStatus.choices,
        default=ProspectStatus.PENDING
    )
    consented = models.BooleanField(default=False)

    # Diagnostics only: hashed client address, never the raw value
    ip_hash = models.CharField(max_length=16, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)

    converted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'marketplace_prospects'
        indexes = [
            models.Index(fields=['listing', 'created_at'], name='mkt_prospect_listing_idx'),
            models.Index(fields=['sharer', 'status'], name='mkt_prospect_sharer_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.prospect_name} on {self.listing_id} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in (ProspectStatus.CONVERTED, ProspectStatus.REJECTED)


class Impression(models.Model):
    """Append-only engagement log entry."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(
        Listing,
        on_delete=models.CASCADE,
        related_name='impressions'
    )
    share_code = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    event = models.CharField(max_length=20, choices=ImpressionEvent.choices)
    ip_hash = models.CharField(max_length=16, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'marketplace_impressions'
        indexes = [
            models.Index(fields=['listing', 'event', 'ip_hash', 'created_at'], name='mkt_impression_dedup_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.event} on {self.listing_id}"
