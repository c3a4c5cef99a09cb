import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test member."""
    return User.objects.create_user(
        email='ruth@example.com',
        password='TestPass123!',
        first_name='Ruth',
        last_name='Santos',
    )


@pytest.fixture
def nameless_user(db):
    """Member with no names set (display falls back to email prefix)."""
    return User.objects.create_user(
        email='anon.member@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return API client authenticated as member."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
