import pytest
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.suppliers.services import create_supplier, TierRule


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def ledger_owner(db):
    """Create and return the ledger owner."""
    return get_user_model().objects.create_user(
        username='owner',
        password='TestPass123!',
    )


@pytest.fixture
def owner_client(api_client, ledger_owner):
    """Return API client authenticated as the owner."""
    refresh = RefreshToken.for_user(ledger_owner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def eg18_tiers():
    return [
        TierRule('low', 0, Decimal('20')),
        TierRule('medium', 500, Decimal('26')),
        TierRule('high', 1000, Decimal('34')),
    ]


@pytest.fixture
def eg18(db):
    """EG18 with both karat configurations and explicit tiers."""
    tiers = [
        {'name': 'low', 'threshold': 0, 'discount_percentage': Decimal('20'), 'is_protected': True},
        {'name': 'medium', 'threshold': 500, 'discount_percentage': Decimal('26')},
        {'name': 'high', 'threshold': 1000, 'discount_percentage': Decimal('34')},
    ]
    return create_supplier(
        name='Egypt 18',
        code='EG18',
        karat_18_active=True,
        karat_21_active=True,
        tiers={'18': tiers, '21': tiers},
    )


@pytest.fixture
def es18(db):
    """ES18 seeded with the configured default bands (21k only)."""
    return create_supplier(name='Spain 18', code='es18')
