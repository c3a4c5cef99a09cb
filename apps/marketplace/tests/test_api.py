"""
API tests for marketplace app.

Covers the HTTP contract: status codes, error mapping, and that the
discounted price only ever appears for the owner or in a reveal response.
"""

import pytest
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.marketplace.models import (
    Listing,
    ListingShare,
    ListingStatus,
    ShareStatus,
    Impression,
    ImpressionEvent,
    Prospect,
    ProspectStatus,
)
from apps.marketplace.services import hash_ip
from apps.notifications.models import Notification

from .conftest import client_for


def public_url(listing, ref=None):
    url = reverse('marketplace:listing-public', kwargs={'pk': listing.id})
    return f'{url}?ref={ref}' if ref else url


def confirm_url(listing, prospect):
    return reverse(
        'marketplace:prospect-confirm',
        kwargs={'listing_id': listing.id, 'prospect_id': prospect.id}
    )


# =============================================================================
# Listing Endpoints
# =============================================================================

@pytest.mark.django_db
class TestListingBrowse:
    """Tests for GET /api/marketplace/listings/ and /public/"""

    def test_browse_hides_discounted_price(self, api_client, listing, plain_listing):
        response = api_client.get(reverse('marketplace:listing-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        for item in response.data['results']:
            assert 'discounted_price' not in item
        guitar = next(item for item in response.data['results'] if item['id'] == str(listing.id))
        assert guitar['has_discount'] is True
        assert guitar['original_price'] == '1000.00'

    def test_browse_filters_by_type(self, api_client, listing, seller):
        Listing.objects.create(owner=seller, title='Tutoring', listing_type='service')

        response = api_client.get(reverse('marketplace:listing-list'), {'type': 'service'})

        assert [item['title'] for item in response.data['results']] == ['Tutoring']

    def test_public_detail_hides_discounted_price(self, api_client, listing, share):
        response = api_client.get(public_url(listing, ref=share.share_code))

        assert response.status_code == status.HTTP_200_OK
        assert 'discounted_price' not in response.data
        assert response.data['has_discount'] is True
        assert response.data['share_code'] == share.share_code
        assert response.data['is_logged_in'] is False
        assert response.data['is_owner'] is False
        assert response.data['seller']['display_name'] == 'Alma Reyes'

    def test_public_detail_counts_view_once(self, api_client, listing, share):
        api_client.get(public_url(listing, ref=share.share_code), HTTP_X_FORWARDED_FOR='203.0.113.7')
        api_client.get(public_url(listing, ref=share.share_code), HTTP_X_FORWARDED_FOR='203.0.113.7')

        listing.refresh_from_db()
        assert listing.view_count == 1
        impression = Impression.objects.get(listing=listing)
        assert impression.share_code == share.share_code
        assert impression.ip_hash == hash_ip('203.0.113.7')

    def test_sharer_opening_own_link_gets_no_code(self, sharer_client, listing, share):
        response = sharer_client.get(public_url(listing, ref=share.share_code))

        assert response.data['share_code'] is None
        assert response.data['is_logged_in'] is True

    def test_owner_never_gets_code(self, seller_client, listing, share):
        response = seller_client.get(public_url(listing, ref=share.share_code))

        assert response.data['share_code'] is None
        assert response.data['is_owner'] is True
        assert 'discounted_price' not in response.data
        listing.refresh_from_db()
        assert listing.view_count == 0

    def test_public_detail_removed_listing(self, api_client, listing):
        listing.status = ListingStatus.REMOVED
        listing.save()

        response = api_client.get(public_url(listing))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert 'error' in response.data


@pytest.mark.django_db
class TestListingOwnerEndpoints:
    """Tests for owner-scoped listing endpoints."""

    def test_create_listing(self, seller_client):
        payload = {
            'title': 'Electric Fan',
            'original_price': '1500.00',
            'discounted_price': '1200.00',
            'love_gift_amount': '50.00',
        }
        response = seller_client.post(reverse('marketplace:listing-list'), payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['discounted_price'] == '1200.00'
        assert response.data['status'] == ListingStatus.ACTIVE

    def test_create_listing_unauthenticated(self, api_client):
        response = api_client.post(reverse('marketplace:listing-list'), {'title': 'Fan'}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_listing_bad_pricing(self, seller_client):
        payload = {'title': 'Fan', 'original_price': '100.00', 'discounted_price': '150.00'}
        response = seller_client.post(reverse('marketplace:listing-list'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_owner_detail_shows_discounted_price(self, seller_client, listing):
        response = seller_client.get(reverse('marketplace:listing-detail', kwargs={'pk': listing.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['discounted_price'] == '700.00'

    def test_owner_detail_hidden_from_others(self, other_client, listing):
        response = other_client.get(reverse('marketplace:listing-detail', kwargs={'pk': listing.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_partial_update(self, seller_client, listing):
        url = reverse('marketplace:listing-detail', kwargs={'pk': listing.id})
        response = seller_client.patch(url, {'love_gift_amount': '150.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        listing.refresh_from_db()
        assert listing.love_gift_amount == Decimal('150.00')
        assert listing.title == 'Acoustic Guitar'

    def test_remove_then_reactivate(self, seller_client, api_client, listing):
        detail = reverse('marketplace:listing-detail', kwargs={'pk': listing.id})

        assert seller_client.delete(detail).status_code == status.HTTP_204_NO_CONTENT
        assert api_client.get(public_url(listing)).status_code == status.HTTP_404_NOT_FOUND

        response = seller_client.post(reverse('marketplace:listing-reactivate', kwargs={'pk': listing.id}))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == ListingStatus.ACTIVE

    def test_my_listings(self, seller_client, listing, plain_listing, referred_prospect):
        response = seller_client.get(reverse('marketplace:listing-mine'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        guitar = next(item for item in response.data['results'] if item['id'] == str(listing.id))
        assert guitar['prospect_count'] == 1
        assert guitar['share_count'] == 1


# =============================================================================
# Share Endpoints
# =============================================================================

@pytest.mark.django_db
class TestShareEndpoints:
    """Tests for /api/marketplace/listings/{id}/share/"""

    def test_create_share_then_fetch_same(self, sharer_client, listing):
        url = reverse('marketplace:listing-share', kwargs={'pk': listing.id})

        first = sharer_client.post(url)
        second = sharer_client.post(url)

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert first.data['share_code'] == second.data['share_code']
        assert len(first.data['share_code']) == 12
        assert first.data['share_url'].endswith(f"/marketplace/{listing.id}?ref={first.data['share_code']}")

    def test_owner_cannot_share(self, seller_client, listing):
        url = reverse('marketplace:listing-share', kwargs={'pk': listing.id})
        response = seller_client.post(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert ListingShare.objects.count() == 0

    def test_share_unknown_listing(self, sharer_client):
        url = reverse('marketplace:listing-share', kwargs={'pk': uuid4()})

        assert sharer_client.post(url).status_code == status.HTTP_404_NOT_FOUND

    def test_share_requires_login(self, api_client, listing):
        url = reverse('marketplace:listing-share', kwargs={'pk': listing.id})

        assert api_client.post(url).status_code == status.HTTP_401_UNAUTHORIZED

    def test_get_share_when_none(self, sharer_client, listing):
        url = reverse('marketplace:listing-share', kwargs={'pk': listing.id})
        response = sharer_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['share_code'] is None

    def test_get_existing_share(self, sharer_client, listing, share):
        url = reverse('marketplace:listing-share', kwargs={'pk': listing.id})
        response = sharer_client.get(url)

        assert response.data['share_code'] == share.share_code
        assert response.data['love_gift_earned'] == '0.00'

    def test_my_shares(self, sharer_client, listing, share, referred_prospect):
        Impression.objects.create(listing=listing, share_code=share.share_code, event=ImpressionEvent.REVEAL_CLICK)

        response = sharer_client.get(reverse('marketplace:my-shares'))

        assert response.status_code == status.HTTP_200_OK
        [item] = response.data
        assert item['listing']['title'] == 'Acoustic Guitar'
        assert item['cta_clicks'] == 1
        assert item['prospect_count'] == 1
        assert 'discounted_price' not in item['listing']

    def test_love_gifts(self, sharer_client, share):
        ListingShare.objects.filter(id=share.id).update(
            love_gift_earned=Decimal('100.00'),
            status=ShareStatus.CREDITED,
        )

        response = sharer_client.get(reverse('marketplace:love-gifts'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_earned'] == '100.00'
        assert response.data['credited_count'] == 1
        assert len(response.data['shares']) == 1


# =============================================================================
# Prospect Endpoints
# =============================================================================

@pytest.mark.django_db
class TestProspectSubmit:
    """Tests for POST /api/marketplace/prospects/"""

    def test_reveal_round_trip(self, api_client, seller):
        listing = Listing.objects.create(
            owner=seller,
            title='Rice Cooker',
            original_price=Decimal('1000.00'),
            discounted_price=Decimal('800.00'),
        )

        public = api_client.get(public_url(listing))
        assert 'discounted_price' not in public.data

        payload = {'listing_id': str(listing.id), 'action_type': 'reveal', 'prospect_name': 'Nina'}
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['discounted_price'] == '800.00'
        assert response.data['original_price'] == '1000.00'
        assert response.data['coupon_code'] is None

    def test_unresolved_code_still_succeeds(self, api_client, listing):
        payload = {
            'listing_id': str(listing.id),
            'action_type': 'contact',
            'share_code': 'nope',
            'prospect_name': 'Jose',
            'prospect_mobile': '09171234567',
            'consented': True,
        }
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        prospect = Prospect.objects.get(id=response.data['prospect_id'])
        assert prospect.sharer is None
        assert prospect.status == ProspectStatus.CONTACTED
        assert prospect.consented is True

    def test_oversized_code_still_succeeds(self, api_client, listing):
        payload = {
            'listing_id': str(listing.id),
            'action_type': 'reveal',
            'share_code': 'x' * 80,
            'prospect_name': 'Nina',
        }
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['discounted_price'] == '700.00'
        assert response.data['coupon_code'] is None
        prospect = Prospect.objects.get(id=response.data['prospect_id'])
        assert prospect.share_code is None
        assert prospect.sharer is None

    def test_bad_listing_id_uses_error_shape(self, api_client):
        payload = {'listing_id': 'not-a-uuid', 'action_type': 'reveal', 'prospect_name': 'Nina'}
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid submission'
        assert 'listing_id' in response.data['details']

    def test_client_ip_is_hashed(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'action_type': 'reveal', 'prospect_name': 'Nina'}
        response = api_client.post(
            reverse('marketplace:prospect-submit'),
            payload,
            format='json',
            HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1',
            HTTP_USER_AGENT='Mozilla/5.0',
        )

        prospect = Prospect.objects.get(id=response.data['prospect_id'])
        assert prospect.ip_hash == hash_ip('203.0.113.7')
        assert prospect.user_agent == 'Mozilla/5.0'

    def test_missing_name(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'action_type': 'reveal', 'prospect_name': '  '}
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid submission'
        assert 'prospect_name' in response.data['details']
        assert Prospect.objects.count() == 0

    def test_invalid_action(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'action_type': 'haggle', 'prospect_name': 'Nina'}
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_listing(self, api_client):
        payload = {'listing_id': str(uuid4()), 'action_type': 'reveal', 'prospect_name': 'Nina'}
        response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unexpected_failure_is_reported(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'action_type': 'reveal', 'prospect_name': 'Nina'}

        with patch('apps.marketplace.views.submit_prospect', side_effect=RuntimeError('db down')):
            response = api_client.post(reverse('marketplace:prospect-submit'), payload, format='json')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Failed to submit'}


@pytest.mark.django_db
class TestSaleEndpoints:
    """Tests for prospect listing, confirm and reject endpoints."""

    def test_listing_prospects(self, seller_client, listing, referred_prospect, direct_prospect):
        url = reverse('marketplace:listing-prospects', kwargs={'pk': listing.id})
        response = seller_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        names = {item['prospect_name']: item['sharer_name'] for item in response.data}
        assert names == {'Maria': 'Ben Cruz', 'Jose': None}
        assert 'ip_hash' not in response.data[0]

    def test_listing_prospects_not_owner(self, sharer_client, listing, referred_prospect):
        url = reverse('marketplace:listing-prospects', kwargs={'pk': listing.id})

        assert sharer_client.get(url).status_code == status.HTTP_404_NOT_FOUND

    def test_confirm_twice(self, seller_client, listing, share, referred_prospect):
        first = seller_client.post(confirm_url(listing, referred_prospect))
        second = seller_client.post(confirm_url(listing, referred_prospect))

        assert first.status_code == status.HTTP_200_OK
        assert first.data['sharer_credited'] is True
        assert second.status_code == status.HTTP_409_CONFLICT
        share.refresh_from_db()
        assert share.love_gift_earned == Decimal('100.00')

    def test_confirm_not_owner(self, sharer_client, listing, referred_prospect):
        response = sharer_client.post(confirm_url(listing, referred_prospect))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_confirm_unauthenticated(self, api_client, listing, referred_prospect):
        response = api_client.post(confirm_url(listing, referred_prospect))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_reject_then_confirm(self, seller_client, listing, direct_prospect):
        url = reverse(
            'marketplace:prospect-reject',
            kwargs={'listing_id': listing.id, 'prospect_id': direct_prospect.id}
        )

        response = seller_client.post(url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == ProspectStatus.REJECTED

        assert seller_client.post(confirm_url(listing, direct_prospect)).status_code == status.HTTP_409_CONFLICT


# =============================================================================
# Impression Endpoint
# =============================================================================

@pytest.mark.django_db
class TestImpressionEndpoint:
    """Tests for POST /api/marketplace/impressions/"""

    def test_log_click(self, api_client, listing, share):
        payload = {'listing_id': str(listing.id), 'event': 'reveal_click', 'share_code': share.share_code}
        response = api_client.post(reverse('marketplace:impression-log'), payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'ok': True}
        assert Impression.objects.filter(event=ImpressionEvent.REVEAL_CLICK).count() == 1

    def test_unknown_event(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'event': 'hover'}
        response = api_client.post(reverse('marketplace:impression-log'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Invalid impression event'}

    def test_oversized_code_still_ok(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'event': 'impression', 'share_code': 'x' * 80}
        response = api_client.post(reverse('marketplace:impression-log'), payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'ok': True}
        assert Impression.objects.get(listing=listing).share_code is None

    def test_malformed_listing_id_still_ok(self, api_client):
        payload = {'listing_id': 'not-a-uuid', 'event': 'impression'}
        response = api_client.post(reverse('marketplace:impression-log'), payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'ok': True}
        assert Impression.objects.count() == 0

    def test_unknown_listing_still_ok(self, api_client):
        payload = {'listing_id': str(uuid4()), 'event': 'impression'}
        response = api_client.post(reverse('marketplace:impression-log'), payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert Impression.objects.count() == 0

    def test_storage_failure_still_ok(self, api_client, listing):
        payload = {'listing_id': str(listing.id), 'event': 'impression'}

        with patch.object(Impression.objects, 'create', side_effect=RuntimeError('disk full')):
            response = api_client.post(reverse('marketplace:impression-log'), payload, format='json')

        assert response.status_code == status.HTTP_200_OK


# =============================================================================
# End-to-end referral flow
# =============================================================================

@pytest.mark.django_db
class TestReferralFlow:
    """Listing 1000/700 with a 100 Love Gift, shared by B, bought by Maria."""

    def test_full_flow(self, api_client, seller_client, sharer_client, listing, sharer,
                       django_capture_on_commit_callbacks):
        # B requests a share link
        share_response = sharer_client.post(reverse('marketplace:listing-share', kwargs={'pk': listing.id}))
        code = share_response.data['share_code']
        assert len(code) == 12

        # Anonymous visitor opens the link and reveals the price
        public = api_client.get(public_url(listing, ref=code))
        assert public.data['share_code'] == code
        assert 'discounted_price' not in public.data

        reveal = api_client.post(
            reverse('marketplace:prospect-submit'),
            {
                'listing_id': str(listing.id),
                'action_type': 'reveal',
                'share_code': code,
                'prospect_name': 'Maria',
            },
            format='json',
        )
        assert reveal.data['discounted_price'] == '700.00'
        assert reveal.data['original_price'] == '1000.00'
        assert reveal.data['love_gift_amount'] == '100.00'
        assert reveal.data['coupon_code'] == code

        prospect = Prospect.objects.get(id=reveal.data['prospect_id'])
        assert prospect.status == ProspectStatus.REVEALED
        assert prospect.sharer == sharer

        # Seller sees Maria via B
        prospects = seller_client.get(reverse('marketplace:listing-prospects', kwargs={'pk': listing.id}))
        assert prospects.data[0]['sharer_name'] == 'Ben Cruz'

        # Seller confirms the sale
        with django_capture_on_commit_callbacks(execute=True):
            confirmed = seller_client.post(confirm_url(listing, prospect))
        assert confirmed.status_code == status.HTTP_200_OK
        assert confirmed.data['message'] == 'Sale confirmed. Love Gift of ₱100 credited to Ben Cruz.'

        share = ListingShare.objects.get(listing=listing, sharer=sharer)
        listing.refresh_from_db()
        assert share.love_gift_earned == Decimal('100.00')
        assert share.status == ShareStatus.CREDITED
        assert listing.status == ListingStatus.SOLD
        assert Notification.objects.filter(recipient=sharer, kind='marketplace_sale').exists()

        # Duplicate click
        again = seller_client.post(confirm_url(listing, prospect))
        assert again.status_code == status.HTTP_409_CONFLICT
        share.refresh_from_db()
        assert share.love_gift_earned == Decimal('100.00')

    def test_other_member_keeps_sharers_code(self, listing, share, other_member):
        response = client_for(other_member).get(public_url(listing, ref=share.share_code))

        assert response.data['share_code'] == share.share_code
