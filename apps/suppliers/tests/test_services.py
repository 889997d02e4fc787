"""Tests for supplier and tier management services."""

import pytest
from decimal import Decimal
from uuid import uuid4

from apps.suppliers.models import Supplier, DiscountTier
from apps.suppliers.services import (
    validate_tier_set,
    create_supplier,
    update_supplier,
    delete_supplier,
    create_tier,
    update_tier,
    delete_tier,
    load_discount_schedule,
    SupplierNotFoundError,
    DuplicateSupplierCodeError,
    TierNotFoundError,
    InvalidTierError,
    ProtectedTierError,
)


class TestValidateTierSet:

    def test_valid_set(self):
        result = validate_tier_set([
            {'name': 'low', 'threshold': 0, 'discount_percentage': 5},
            {'name': 'high', 'threshold': 1000, 'discount_percentage': '10.5'},
        ])

        assert result.valid
        assert result.error is None

    @pytest.mark.parametrize('tiers,message', [
        ([], 'At least one discount tier is required.'),
        ([{'name': ' ', 'threshold': 0, 'discount_percentage': 5}], 'Tier names cannot be empty.'),
        ([{'name': 'a', 'threshold': -1, 'discount_percentage': 5}], "Tier 'a' threshold must be a non-negative integer."),
        ([{'name': 'a', 'threshold': 0, 'discount_percentage': 101}], "Tier 'a' discount must be between 0 and 100."),
        (
            [
                {'name': 'a', 'threshold': 0, 'discount_percentage': 5},
                {'name': 'A', 'threshold': 10, 'discount_percentage': 5},
            ],
            'Tier names must be unique.',
        ),
        (
            [
                {'name': 'a', 'threshold': 0, 'discount_percentage': 5},
                {'name': 'b', 'threshold': 0, 'discount_percentage': 5},
            ],
            'Tier thresholds must be unique.',
        ),
    ])
    def test_invalid_sets(self, tiers, message):
        result = validate_tier_set(tiers)

        assert not result.valid
        assert result.error == message


@pytest.mark.django_db
class TestSupplierManagement:

    def test_create_seeds_default_bands(self, es18):
        tiers = list(es18.discount_tiers.order_by('threshold'))

        assert es18.code == 'ES18'
        assert [(t.karat_type, t.threshold, t.discount_percentage) for t in tiers] == [
            ('21', 0, Decimal('5')),
            ('21', 750, Decimal('8')),
            ('21', 1000, Decimal('10')),
        ]
        assert all(t.is_protected for t in tiers)

    def test_create_with_explicit_tiers(self, eg18):
        assert eg18.discount_tiers.filter(karat_type='18').count() == 3
        assert eg18.discount_tiers.filter(karat_type='21').count() == 3

    def test_duplicate_code(self, es18):
        with pytest.raises(DuplicateSupplierCodeError):
            create_supplier(name='Other', code='ES18')

    def test_needs_an_active_karat(self, db):
        with pytest.raises(InvalidTierError):
            create_supplier(name='None', code='NN00', karat_18_active=False, karat_21_active=False)

    def test_invalid_tier_set_is_rejected(self, db):
        with pytest.raises(InvalidTierError, match='21k tiers'):
            create_supplier(
                name='Bad',
                code='BAD1',
                tiers={'21': [{'name': 'x', 'threshold': 0, 'discount_percentage': 200}]},
            )
        assert not Supplier.objects.exists()

    def test_activating_karat_seeds_tiers(self, es18):
        update_supplier(supplier_id=es18.id, karat_18_active=True)

        assert es18.discount_tiers.filter(karat_type='18').count() == 3

    def test_cannot_deactivate_both_karats(self, es18):
        with pytest.raises(InvalidTierError):
            update_supplier(supplier_id=es18.id, karat_21_active=False)

    def test_delete_supplier(self, es18):
        delete_supplier(supplier_id=es18.id)

        assert not Supplier.objects.exists()
        assert not DiscountTier.objects.exists()

    def test_missing_supplier(self, db):
        with pytest.raises(SupplierNotFoundError):
            delete_supplier(supplier_id=uuid4())


@pytest.mark.django_db
class TestTierManagement:

    def test_add_tier(self, es18):
        tier = create_tier(
            supplier_id=es18.id,
            karat_type='21',
            name='bulk',
            threshold=2000,
            discount_percentage=Decimal('12.5'),
        )

        assert tier.is_protected is False
        assert es18.discount_tiers.filter(karat_type='21').count() == 4

    def test_duplicate_threshold_is_rejected(self, es18):
        with pytest.raises(InvalidTierError, match='thresholds must be unique'):
            create_tier(supplier_id=es18.id, karat_type='21', name='again', threshold=750, discount_percentage=1)

    def test_protected_tier_can_be_edited(self, es18):
        tier = es18.discount_tiers.get(threshold=750)

        updated = update_tier(tier_id=tier.id, discount_percentage=Decimal('9'))

        assert updated.discount_percentage == Decimal('9')

    def test_protected_tier_cannot_be_deleted(self, es18):
        tier = es18.discount_tiers.get(threshold=0)

        with pytest.raises(ProtectedTierError):
            delete_tier(tier_id=tier.id)
        assert DiscountTier.objects.filter(id=tier.id).exists()

    def test_unprotected_tier_can_be_deleted(self, es18):
        tier = create_tier(supplier_id=es18.id, karat_type='21', name='bulk', threshold=2000, discount_percentage=12)

        delete_tier(tier_id=tier.id)

        assert not DiscountTier.objects.filter(id=tier.id).exists()

    def test_missing_tier(self, db):
        with pytest.raises(TierNotFoundError):
            update_tier(tier_id=uuid4(), name='x')


@pytest.mark.django_db
class TestLoadDiscountSchedule:

    def test_schedule_contains_active_configurations(self, eg18, es18):
        schedule = load_discount_schedule()

        assert set(schedule) == {('EG18', '18'), ('EG18', '21'), ('ES18', '21')}
        assert [t.threshold for t in schedule[('EG18', '21')]] == [0, 500, 1000]

    def test_inactive_karat_and_supplier_are_skipped(self, eg18, es18):
        update_supplier(supplier_id=eg18.id, karat_18_active=False)
        update_supplier(supplier_id=es18.id, is_active=False)

        assert set(load_discount_schedule()) == {('EG18', '21')}
