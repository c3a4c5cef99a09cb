from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'marketplace'

# Router for ViewSets
router = DefaultRouter()
router.register(r'listings', views.ListingViewSet, basename='listing')

urlpatterns = [
    # Listing ViewSet routes
    # GET    /api/marketplace/listings/                 - Browse active listings
    # POST   /api/marketplace/listings/                 - Create listing
    # GET    /api/marketplace/listings/{id}/            - Owner detail
    # PATCH  /api/marketplace/listings/{id}/            - Update (owner)
    # DELETE /api/marketplace/listings/{id}/            - Soft-remove (owner)

    # Custom listing actions
    # GET    /api/marketplace/listings/mine/            - My listings
    # GET    /api/marketplace/listings/{id}/public/     - Public detail (?ref=)
    # POST   /api/marketplace/listings/{id}/reactivate/ - Reactivate (owner)
    # GET    /api/marketplace/listings/{id}/share/      - My share link
    # POST   /api/marketplace/listings/{id}/share/      - Create share link
    # GET    /api/marketplace/listings/{id}/prospects/  - Prospects (owner)

    # Sale confirmation
    path(
        'listings/<uuid:listing_id>/prospects/<uuid:prospect_id>/confirm/',
        views.prospect_confirm,
        name='prospect-confirm'
    ),
    path(
        'listings/<uuid:listing_id>/prospects/<uuid:prospect_id>/reject/',
        views.prospect_reject,
        name='prospect-reject'
    ),

    # Anonymous visitor endpoints
    path('prospects/', views.prospect_submit, name='prospect-submit'),
    path('impressions/', views.impression_log, name='impression-log'),

    # Sharer dashboard
    path('shares/mine/', views.my_shares, name='my-shares'),
    path('love-gifts/', views.love_gifts, name='love-gifts'),

    # Include router URLs
    path('', include(router.urls)),
]
