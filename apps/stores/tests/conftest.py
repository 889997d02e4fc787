import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.stores.models import Store


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def store_owner(db):
    """Create and return the ledger owner."""
    return get_user_model().objects.create_user(
        username='owner',
        password='TestPass123!',
    )


@pytest.fixture
def owner_client(api_client, store_owner):
    """Return API client authenticated as the owner."""
    refresh = RefreshToken.for_user(store_owner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def store_a(db):
    return Store.objects.create(name='Store A', code='STA')


@pytest.fixture
def store_b(db):
    return Store.objects.create(name='Store B', code='STB', is_active=False)
