import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.marketplace.models import Listing, ListingShare, Prospect, ProspectAction, ProspectStatus


def client_for(user):
    """Return a fresh API client authenticated as user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def seller(db):
    """Member who owns the listings."""
    return User.objects.create_user(
        email='alma@example.com',
        password='TestPass123!',
        first_name='Alma',
        last_name='Reyes',
    )


@pytest.fixture
def sharer(db):
    """Member who shares the seller's listing."""
    return User.objects.create_user(
        email='ben@example.com',
        password='TestPass123!',
        first_name='Ben',
        last_name='Cruz',
    )


@pytest.fixture
def other_member(db):
    """Member with no relation to the listing."""
    return User.objects.create_user(
        email='carla@example.com',
        password='TestPass123!',
        first_name='Carla',
        last_name='Diaz',
    )


@pytest.fixture
def seller_client(seller):
    return client_for(seller)


@pytest.fixture
def sharer_client(sharer):
    return client_for(sharer)


@pytest.fixture
def other_client(other_member):
    return client_for(other_member)


@pytest.fixture
def listing(db, seller):
    """Active listing: 1000 public, 700 revealed, 100 Love Gift."""
    return Listing.objects.create(
        owner=seller,
        title='Acoustic Guitar',
        description='Yamaha F310, lightly used.',
        category='Music',
        original_price=Decimal('1000.00'),
        discounted_price=Decimal('700.00'),
        love_gift_amount=Decimal('100.00'),
    )


@pytest.fixture
def plain_listing(db, seller):
    """Active listing without a discount or Love Gift."""
    return Listing.objects.create(
        owner=seller,
        title='Study Table',
        original_price=Decimal('2500.00'),
    )


@pytest.fixture
def share(db, listing, sharer):
    """The sharer's referral link for listing."""
    return ListingShare.objects.create(
        listing=listing,
        sharer=sharer,
        share_code='c9f1a2b3d4e5',
    )


@pytest.fixture
def referred_prospect(db, listing, share, sharer):
    """Prospect who arrived through the sharer's link."""
    return Prospect.objects.create(
        listing=listing,
        share_code=share.share_code,
        sharer=sharer,
        prospect_name='Maria',
        action_type=ProspectAction.REVEAL,
        status=ProspectStatus.REVEALED,
    )


@pytest.fixture
def direct_prospect(db, listing):
    """Prospect who arrived without a referral code."""
    return Prospect.objects.create(
        listing=listing,
        prospect_name='Jose',
        action_type=ProspectAction.CONTACT,
        status=ProspectStatus.CONTACTED,
    )
