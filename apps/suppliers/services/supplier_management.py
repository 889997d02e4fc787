"""
Supplier and discount tier management service.

Keeps every (supplier, karat) tier set well formed: unique non-empty
names, unique non-negative thresholds, percentages within [0, 100].
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.common.results import ValidationResult, to_decimal
from apps.suppliers.models import Supplier, DiscountTier, KaratType

from . import pricing_config
from .exceptions import (
    SupplierNotFoundError,
    DuplicateSupplierCodeError,
    TierNotFoundError,
    InvalidTierError,
    ProtectedTierError,
)
from .tier_resolution import TierRule

logger = logging.getLogger(__name__)


def validate_tier_set(tiers: Iterable[dict]) -> ValidationResult:
    """
    Check a tier set for one supplier and karat type.

    Args:
        tiers: Iterable of dicts with ``name``, ``threshold`` and
            ``discount_percentage`` keys

    Returns:
        ValidationResult with the first problem found
    """
    tiers = list(tiers)
    if not tiers:
        return ValidationResult.fail('At least one discount tier is required.')

    names = []
    thresholds = []
    for tier in tiers:
        name = (tier.get('name') or '').strip()
        if not name:
            return ValidationResult.fail('Tier names cannot be empty.')

        threshold = tier.get('threshold')
        if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 0:
            return ValidationResult.fail(f"Tier '{name}' threshold must be a non-negative integer.")

        percentage = to_decimal(tier.get('discount_percentage'))
        if percentage is None or not percentage.is_finite() or not (0 <= percentage <= 100):
            return ValidationResult.fail(f"Tier '{name}' discount must be between 0 and 100.")

        names.append(name.lower())
        thresholds.append(threshold)

    if len(set(names)) != len(names):
        return ValidationResult.fail('Tier names must be unique.')
    if len(set(thresholds)) != len(thresholds):
        return ValidationResult.fail('Tier thresholds must be unique.')

    return ValidationResult.ok()


def default_tier_data(supplier_code: str) -> List[dict]:
    """Protected low/medium/high tiers seeded from the configured band rates."""
    thresholds = pricing_config.discount_thresholds()
    rates = pricing_config.default_band_rates(supplier_code)
    return [
        {
            'name': band,
            'threshold': thresholds[band.upper()],
            'discount_percentage': rates[band],
            'is_protected': True,
        }
        for band in pricing_config.BAND_NAMES
    ]


def _get_supplier(supplier_id: UUID, lock: bool = False) -> Supplier:
    queryset = Supplier.objects.select_for_update() if lock else Supplier.objects
    try:
        return queryset.get(id=supplier_id)
    except Supplier.DoesNotExist:
        raise SupplierNotFoundError(f"Supplier with ID {supplier_id} not found")


def _get_tier(tier_id: UUID, lock: bool = False) -> DiscountTier:
    queryset = DiscountTier.objects.select_for_update() if lock else DiscountTier.objects
    try:
        return queryset.select_related('supplier').get(id=tier_id)
    except DiscountTier.DoesNotExist:
        raise TierNotFoundError(f"Discount tier with ID {tier_id} not found")


@transaction.atomic
def create_supplier(
    *,
    name: str,
    code: str,
    karat_18_active: bool = False,
    karat_21_active: bool = True,
    is_active: bool = True,
    tiers: Optional[dict] = None
) -> Supplier:
    """
    Create a supplier together with its tier sets.

    Args:
        name: Display name
        code: Unique supplier code (e.g. ``EG18``), stored upper-case
        karat_18_active: Whether the 18k tier set is in use
        karat_21_active: Whether the 21k tier set is in use
        is_active: Whether the supplier can be used on purchases
        tiers: Optional ``{karat_type: [tier dicts]}``. Active karats
            without an entry are seeded with the default protected bands.

    Returns:
        Created Supplier instance

    Raises:
        InvalidTierError: If no karat is active or a tier set is invalid
        DuplicateSupplierCodeError: If the code is already in use
    """
    code = code.strip().upper()
    if not (karat_18_active or karat_21_active):
        raise InvalidTierError('A supplier needs at least one active karat configuration.')

    tiers = tiers or {}
    active = [k for k, on in ((KaratType.K18, karat_18_active), (KaratType.K21, karat_21_active)) if on]

    tier_sets = {}
    for karat in active:
        tier_data = tiers.get(karat) or tiers.get(str(karat)) or default_tier_data(code)
        result = validate_tier_set(tier_data)
        if not result.valid:
            raise InvalidTierError(f"{karat}k tiers: {result.error}")
        tier_sets[karat] = tier_data

    if Supplier.objects.filter(code=code).exists():
        raise DuplicateSupplierCodeError(f"Supplier code {code} is already in use")

    try:
        supplier = Supplier.objects.create(
            name=name.strip(),
            code=code,
            is_active=is_active,
            karat_18_active=karat_18_active,
            karat_21_active=karat_21_active,
        )
    except IntegrityError:
        raise DuplicateSupplierCodeError(f"Supplier code {code} is already in use")

    for karat, tier_data in tier_sets.items():
        DiscountTier.objects.bulk_create([
            DiscountTier(
                supplier=supplier,
                karat_type=karat,
                name=tier['name'].strip(),
                threshold=tier['threshold'],
                discount_percentage=to_decimal(tier['discount_percentage']),
                is_protected=bool(tier.get('is_protected', False)),
            )
            for tier in tier_data
        ])

    logger.info("Created supplier %s with tier sets for %s", code, ', '.join(tier_sets))
    return supplier


@transaction.atomic
def update_supplier(*, supplier_id: UUID, **fields) -> Supplier:
    """
    Update supplier attributes.

    Turning on a karat configuration that has no tiers yet seeds it with
    the default bands.

    Raises:
        SupplierNotFoundError: If supplier doesn't exist
        InvalidTierError: If the update would deactivate both karats
        DuplicateSupplierCodeError: If the new code is taken
    """
    supplier = _get_supplier(supplier_id, lock=True)

    allowed = {'name', 'code', 'is_active', 'karat_18_active', 'karat_21_active'}
    for field, value in fields.items():
        if field not in allowed:
            continue
        if field == 'code':
            value = value.strip().upper()
        setattr(supplier, field, value)

    if not (supplier.karat_18_active or supplier.karat_21_active):
        raise InvalidTierError('A supplier needs at least one active karat configuration.')

    try:
        supplier.save()
    except IntegrityError:
        raise DuplicateSupplierCodeError(f"Supplier code {supplier.code} is already in use")

    for karat in supplier.active_karats:
        if not supplier.discount_tiers.filter(karat_type=karat).exists():
            DiscountTier.objects.bulk_create([
                DiscountTier(supplier=supplier, karat_type=karat, **tier)
                for tier in default_tier_data(supplier.code)
            ])

    return supplier


@transaction.atomic
def delete_supplier(*, supplier_id: UUID) -> None:
    """Delete a supplier and its tiers."""
    supplier = _get_supplier(supplier_id, lock=True)
    code = supplier.code
    supplier.delete()
    logger.info("Deleted supplier %s", code)


@transaction.atomic
def create_tier(
    *,
    supplier_id: UUID,
    karat_type: str,
    name: str,
    threshold: int,
    discount_percentage,
    is_protected: bool = False
) -> DiscountTier:
    """
    Add a tier to a supplier's schedule.

    Raises:
        SupplierNotFoundError: If supplier doesn't exist
        InvalidTierError: If the resulting tier set is invalid
    """
    supplier = _get_supplier(supplier_id, lock=True)
    if karat_type not in KaratType.values:
        raise InvalidTierError(f"Unsupported karat type {karat_type}")

    existing = [
        {'name': t.name, 'threshold': t.threshold, 'discount_percentage': t.discount_percentage}
        for t in supplier.discount_tiers.filter(karat_type=karat_type)
    ]
    candidate = {'name': name, 'threshold': threshold, 'discount_percentage': discount_percentage}
    result = validate_tier_set(existing + [candidate])
    if not result.valid:
        raise InvalidTierError(result.error)

    return DiscountTier.objects.create(
        supplier=supplier,
        karat_type=karat_type,
        name=name.strip(),
        threshold=threshold,
        discount_percentage=to_decimal(discount_percentage),
        is_protected=is_protected,
    )


@transaction.atomic
def update_tier(*, tier_id: UUID, **fields) -> DiscountTier:
    """
    Edit a tier; protected tiers may be edited too.

    Raises:
        TierNotFoundError: If tier doesn't exist
        InvalidTierError: If the resulting tier set is invalid
    """
    tier = _get_tier(tier_id, lock=True)

    for field in ('name', 'threshold', 'discount_percentage', 'is_protected'):
        if field in fields:
            setattr(tier, field, fields[field])
    if isinstance(tier.name, str):
        tier.name = tier.name.strip()

    siblings = [
        {'name': t.name, 'threshold': t.threshold, 'discount_percentage': t.discount_percentage}
        for t in DiscountTier.objects.filter(
            supplier_id=tier.supplier_id,
            karat_type=tier.karat_type,
        ).exclude(id=tier.id)
    ]
    current = {'name': tier.name, 'threshold': tier.threshold, 'discount_percentage': tier.discount_percentage}
    result = validate_tier_set(siblings + [current])
    if not result.valid:
        raise InvalidTierError(result.error)

    tier.discount_percentage = to_decimal(tier.discount_percentage)
    tier.save()
    return tier


@transaction.atomic
def delete_tier(*, tier_id: UUID) -> None:
    """
    Delete an unprotected tier.

    Raises:
        TierNotFoundError: If tier doesn't exist
        ProtectedTierError: If the tier is protected
    """
    tier = _get_tier(tier_id, lock=True)
    if tier.is_protected:
        raise ProtectedTierError(f"Tier '{tier.name}' is protected and cannot be deleted")
    tier.delete()


def get_supplier_tiers(*, supplier_id: UUID, karat_type: Optional[str] = None):
    """Tiers of a supplier ordered by karat and threshold."""
    supplier = _get_supplier(supplier_id)
    queryset = supplier.discount_tiers.all()
    if karat_type:
        queryset = queryset.filter(karat_type=karat_type)
    return queryset.order_by('karat_type', 'threshold')


def load_discount_schedule() -> dict:
    """
    Build the resolver schedule from the database.

    Only active suppliers and their active karat configurations are
    included, so an inactive configuration resolves to no discount.

    Returns:
        ``{(supplier_code, karat_type): [TierRule, ...]}`` sorted by threshold
    """
    schedule = {}
    tiers = (
        DiscountTier.objects
        .filter(supplier__is_active=True)
        .select_related('supplier')
        .order_by('threshold')
    )
    for tier in tiers:
        if not tier.supplier.is_karat_active(tier.karat_type):
            continue
        key = (tier.supplier.code, tier.karat_type)
        schedule.setdefault(key, []).append(TierRule.from_model(tier))
    return schedule
