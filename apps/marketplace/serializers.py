from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer

from .models import (
    Listing,
    ListingShare,
    ListingType,
    ListingCondition,
    Prospect,
    ProspectAction,
    ImpressionEvent,
)
from .services.share_registry import build_share_link


class PublicListingSerializer(serializers.ModelSerializer):
    """
    Listing as any visitor sees it.

    Never carries discounted_price. has_discount only tells the visitor
    that submitting their details will unlock one.

    Context keys:
        request: used for is_owner / is_logged_in
        share_code: referral code already passed through the self-referral guard
    """

    seller = UserMinimalSerializer(source='owner', read_only=True)
    has_discount = serializers.BooleanField(read_only=True)
    is_owner = serializers.SerializerMethodField()
    is_logged_in = serializers.SerializerMethodField()
    share_code = serializers.SerializerMethodField()

    class Meta:
        model = Listing
        fields = [
            'id',
            'title',
            'description',
            'listing_type',
            'category',
            'condition',
            'location_area',
            'original_price',
            'has_discount',
            'price_label',
            'love_gift_amount',
            'status',
            'view_count',
            'seller',
            'is_owner',
            'is_logged_in',
            'share_code',
            'created_at',
        ]
        read_only_fields = fields

    def _viewer(self):
        request = self.context.get('request')
        return request.user if request else None

    def get_is_owner(self, obj):
        return obj.is_owned_by(self._viewer())

    def get_is_logged_in(self, obj):
        viewer = self._viewer()
        return bool(viewer and viewer.is_authenticated)

    def get_share_code(self, obj):
        return self.context.get('share_code')


class OwnerListingSerializer(serializers.ModelSerializer):
    """Full listing for its owner, discounted price included."""

    has_discount = serializers.BooleanField(read_only=True)
    prospect_count = serializers.SerializerMethodField()
    share_count = serializers.SerializerMethodField()

    class Meta:
        model = Listing
        fields = [
            'id',
            'title',
            'description',
            'listing_type',
            'category',
            'condition',
            'location_area',
            'original_price',
            'discounted_price',
            'has_discount',
            'price_label',
            'love_gift_amount',
            'status',
            'view_count',
            'sold_at',
            'prospect_count',
            'share_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_prospect_count(self, obj):
        # Annotated by get_my_listings(); absent on single reads
        if hasattr(obj, 'prospect_count'):
            return obj.prospect_count
        return obj.prospects.count()

    def get_share_count(self, obj):
        if hasattr(obj, 'share_count'):
            return obj.share_count
        return obj.shares.count()


class ListingInputSerializer(serializers.Serializer):
    """Validate listing create/update payloads. Use partial=True for PATCH."""

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    listing_type = serializers.ChoiceField(choices=ListingType.choices, default=ListingType.SELL)
    category = serializers.CharField(max_length=100, required=False, default='Other')
    condition = serializers.ChoiceField(
        choices=ListingCondition.choices,
        required=False,
        allow_blank=True,
        default=''
    )
    location_area = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    original_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'),
        required=False, allow_null=True, default=None
    )
    discounted_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'),
        required=False, allow_null=True, default=None
    )
    price_label = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    love_gift_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'),
        required=False, default=Decimal('0.00')
    )


class ListingFilterSerializer(serializers.Serializer):
    """Validate query parameters for the public browse list."""

    type = serializers.ChoiceField(choices=ListingType.choices, required=False)
    category = serializers.CharField(max_length=100, required=False)


class ProspectSubmitSerializer(serializers.Serializer):
    """Validate an anonymous reveal/contact submission."""

    listing_id = serializers.UUIDField()
    action_type = serializers.ChoiceField(choices=ProspectAction.choices)
    share_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    prospect_name = serializers.CharField(max_length=200)
    prospect_mobile = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)
    prospect_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    consented = serializers.BooleanField(required=False, default=False)


class RevealSerializer(serializers.Serializer):
    """
    Prices unlocked by a prospect submission.

    The only anonymous-facing serializer that carries discounted_price.
    """

    prospect_id = serializers.UUIDField()
    action_type = serializers.CharField()
    discounted_price = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    original_price = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    seller_name = serializers.CharField()
    love_gift_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    coupon_code = serializers.CharField(allow_null=True)


class ProspectSerializer(serializers.ModelSerializer):
    """Prospect as the listing owner sees it."""

    sharer_name = serializers.SerializerMethodField()

    class Meta:
        model = Prospect
        fields = [
            'id',
            'prospect_name',
            'prospect_mobile',
            'prospect_email',
            'action_type',
            'status',
            'consented',
            'share_code',
            'sharer',
            'sharer_name',
            'converted_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_sharer_name(self, obj):
        return getattr(obj, 'sharer_name', None)


class ShareSerializer(serializers.ModelSerializer):
    """A member's share link for one listing."""

    share_url = serializers.SerializerMethodField()

    class Meta:
        model = ListingShare
        fields = [
            'id',
            'listing',
            'share_code',
            'share_url',
            'love_gift_earned',
            'status',
            'created_at',
        ]
        read_only_fields = fields

    def get_share_url(self, obj):
        return build_share_link(obj.listing_id, obj.share_code)


class SharedListingSerializer(serializers.ModelSerializer):
    """Listing summary nested in a sharer's dashboard."""

    class Meta:
        model = Listing
        fields = ['id', 'title', 'listing_type', 'original_price', 'love_gift_amount', 'status']
        read_only_fields = fields


class MyShareSerializer(ShareSerializer):
    """Share with engagement stats (annotated by get_member_shares)."""

    listing = SharedListingSerializer(read_only=True)
    impressions = serializers.IntegerField(read_only=True)
    cta_clicks = serializers.IntegerField(read_only=True)
    prospect_count = serializers.IntegerField(read_only=True)

    class Meta(ShareSerializer.Meta):
        fields = ShareSerializer.Meta.fields + ['impressions', 'cta_clicks', 'prospect_count']
        read_only_fields = fields


class LoveGiftSummarySerializer(serializers.Serializer):
    total_earned = serializers.DecimalField(max_digits=12, decimal_places=2)
    share_count = serializers.IntegerField()
    credited_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    shares = MyShareSerializer(many=True)


class SaleConfirmationSerializer(serializers.Serializer):
    sharer_credited = serializers.BooleanField()
    love_gift_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    message = serializers.CharField()
    sharer_id = serializers.UUIDField(allow_null=True)


class ImpressionInputSerializer(serializers.Serializer):
    """Validate an impression/click beacon."""

    listing_id = serializers.UUIDField()
    event = serializers.ChoiceField(choices=ImpressionEvent.choices)
    share_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OkResponseSerializer(serializers.Serializer):
    ok = serializers.BooleanField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    details = serializers.DictField(required=False)
