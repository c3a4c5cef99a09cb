# ==========================================
# apps/marketplace/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Listing, ListingShare, Prospect, Impression, ListingStatus, ProspectStatus


STATUS_COLORS = {
    ListingStatus.ACTIVE: ('#6B8E5E', 'white'),
    ListingStatus.SOLD: ('#A47449', 'white'),
    ListingStatus.REMOVED: ('#B85C5C', 'white'),
    ProspectStatus.PENDING: ('#E5C49A', '#2C1810'),
    ProspectStatus.REVEALED: ('#E5C49A', '#2C1810'),
    ProspectStatus.CONTACTED: ('#E5C49A', '#2C1810'),
    ProspectStatus.CONVERTED: ('#6B8E5E', 'white'),
    ProspectStatus.REJECTED: ('#B85C5C', 'white'),
}


def _badge(obj):
    bg, fg = STATUS_COLORS.get(obj.status, ('#ccc', '#666'))
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, obj.get_status_display()
    )


class ListingShareInline(admin.TabularInline):
    """Shares of a listing. Created only through the share registry."""
    model = ListingShare
    extra = 0
    fields = ['sharer', 'share_code', 'love_gift_earned', 'status', 'created_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'owner',
        'listing_type',
        'original_price',
        'discounted_price',
        'love_gift_amount',
        'status_badge',
        'view_count',
        'created_at',
    ]
    list_filter = ['status', 'listing_type', 'category', 'created_at']
    search_fields = ['title', 'description', 'owner__email']
    readonly_fields = ['view_count', 'sold_at', 'created_at', 'updated_at']
    ordering = ['-created_at']
    inlines = [ListingShareInline]

    def status_badge(self, obj):
        return _badge(obj)
    status_badge.short_description = 'Status'

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('owner')


@admin.register(ListingShare)
class ListingShareAdmin(admin.ModelAdmin):
    list_display = ['share_code', 'listing', 'sharer', 'love_gift_earned', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['share_code', 'sharer__email', 'listing__title']
    readonly_fields = ['share_code', 'love_gift_earned', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('listing', 'sharer')


@admin.register(Prospect)
class ProspectAdmin(admin.ModelAdmin):
    list_display = [
        'prospect_name',
        'listing',
        'action_type',
        'status_badge',
        'share_code',
        'sharer',
        'created_at',
    ]
    list_filter = ['status', 'action_type', 'consented', 'created_at']
    search_fields = ['prospect_name', 'prospect_mobile', 'prospect_email', 'share_code']
    # Attribution is frozen at submission
    readonly_fields = ['share_code', 'sharer', 'ip_hash', 'user_agent', 'converted_at', 'created_at', 'updated_at']
    ordering = ['-created_at']

    def status_badge(self, obj):
        return _badge(obj)
    status_badge.short_description = 'Status'

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('listing', 'sharer')


@admin.register(Impression)
class ImpressionAdmin(admin.ModelAdmin):
    list_display = ['event', 'listing', 'share_code', 'created_at']
    list_filter = ['event', 'created_at']
    search_fields = ['share_code']
    ordering = ['-created_at']
