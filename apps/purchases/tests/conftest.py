import pytest
from datetime import date
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.stores.models import Store
from apps.suppliers.services import create_supplier, TierRule
from apps.purchases.services import (
    PaymentTotals,
    PurchaseSnapshot,
    build_receipt_line,
    total_grams_for,
    due_date_for,
)


# =============================================================================
# Engine fixtures (no database)
# =============================================================================

@pytest.fixture
def eg_schedule():
    """21k schedules used on the fee path, keyed (supplier_code, karat)."""
    return {
        ('EG18', '21'): [
            TierRule('low', 0, Decimal('20')),
            TierRule('medium', 500, Decimal('26')),
            TierRule('high', 1000, Decimal('34')),
        ],
        ('EG21', '21'): [
            TierRule('low', 0, Decimal('15')),
            TierRule('medium', 750, Decimal('20')),
            TierRule('high', 1000, Decimal('23')),
        ],
    }


@pytest.fixture
def make_snapshot():
    """Build an unpriced PurchaseSnapshot from ``{code: (grams_18k, grams_21k)}``."""
    counter = {'n': 0}

    def _make(purchase_date=date(2025, 5, 10), receipts=None, store_id='store-1', **overrides):
        counter['n'] += 1
        receipts = receipts or {'EG21': (0, 100)}
        lines = {
            code: build_receipt_line(code, grams_18k, grams_21k)
            for code, (grams_18k, grams_21k) in receipts.items()
        }
        values = {
            'id': f'purchase-{counter["n"]}',
            'date': purchase_date,
            'store_id': store_id,
            'due_date': due_date_for(purchase_date, 30),
            'suppliers': lines,
            'total_grams': total_grams_for(lines),
            'payments': PaymentTotals(),
        }
        values.update(overrides)
        return PurchaseSnapshot(**values)

    return _make


# =============================================================================
# Database / API fixtures
# =============================================================================

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
def store(db):
    return Store.objects.create(name='Main Street', code='MS1')


@pytest.fixture
def inactive_store(db):
    return Store.objects.create(name='Closed', code='CL1', is_active=False)


@pytest.fixture
def suppliers(db):
    """EG18 and EG21 with the configured default 21k bands (0/750/1000)."""
    return {
        'EG18': create_supplier(name='Egypt 18', code='EG18'),
        'EG21': create_supplier(name='Egypt 21', code='EG21'),
    }
