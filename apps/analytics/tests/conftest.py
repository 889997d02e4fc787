import pytest
from datetime import date
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.stores.models import Store
from apps.suppliers.services import create_supplier
from apps.purchases.services import create_purchase, add_payment


TODAY = date(2025, 5, 20)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def analytics_user(db):
    return get_user_model().objects.create_user(
        username='analyst',
        password='TestPass123!',
    )


@pytest.fixture
def analytics_client(api_client, analytics_user):
    """Return API client authenticated as the analytics user."""
    refresh = RefreshToken.for_user(analytics_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def stores(db):
    return {
        'A': Store.objects.create(name='Store A', code='STA'),
        'B': Store.objects.create(name='Store B', code='STB'),
    }


@pytest.fixture
def analytics_purchases(stores):
    """
    April: 300 g (A). May: 400 g (A) + 400 g (B), the B purchase settled.

    EG21 default bands: May at 800 g prices at 20%.
    """
    create_supplier(name='Egypt 21', code='EG21')

    def _buy(store, day, grams):
        return create_purchase(
            date=day,
            store_id=store.id,
            suppliers={'EG21': {'grams_21k': Decimal(grams)}},
            today=TODAY,
        )

    april = _buy(stores['A'], date(2025, 4, 10), '300')
    may_a = _buy(stores['A'], date(2025, 5, 5), '400')
    may_b = _buy(stores['B'], date(2025, 5, 6), '400')
    add_payment(
        purchase_id=may_b.id,
        date=date(2025, 5, 7),
        grams_paid=Decimal('400'),
        fees_paid=Decimal('1920'),
        today=TODAY,
    )
    return {'april': april, 'may_a': may_a, 'may_b': may_b}
