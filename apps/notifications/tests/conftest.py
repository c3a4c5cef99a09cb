import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.notifications.models import Notification, NotificationKind


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def member(db):
    """Create and return a member who receives notifications."""
    return User.objects.create_user(
        email='naomi@example.com',
        password='TestPass123!',
        first_name='Naomi',
        last_name='Reyes',
    )


@pytest.fixture
def other_member(db):
    """Create and return another member."""
    return User.objects.create_user(
        email='boaz@example.com',
        password='TestPass123!',
        first_name='Boaz',
        last_name='Cruz',
    )


@pytest.fixture
def member_client(api_client, member):
    """Return API client authenticated as member."""
    refresh = RefreshToken.for_user(member)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def unread_notification(db, member):
    return Notification.objects.create(
        recipient=member,
        kind=NotificationKind.MARKETPLACE_SALE,
        title='Your share led to a sale!',
        body='You have been credited.',
        link='/marketplace/my-shares',
    )


@pytest.fixture
def other_notification(db, other_member):
    return Notification.objects.create(
        recipient=other_member,
        title='Not yours',
    )
