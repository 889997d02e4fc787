"""
Discount schedule resolution.

A supplier's tier set for one karat is an ordered step function over the
month's cumulative 21k-equivalent grams. The applicable tier is the one
with the highest threshold that does not exceed the monthly total.

A *schedule* is a mapping ``{(supplier_code, karat_type): [tier, ...]}``.
Tiers may be ``TierRule`` instances or ``DiscountTier`` model rows; anything
with ``name``, ``threshold`` and ``discount_percentage`` attributes works.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from apps.common.results import to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierRule:
    """Immutable (threshold, percentage) rule used by the pricing engine."""

    name: str
    threshold: int
    discount_percentage: Decimal
    is_protected: bool = False

    @classmethod
    def from_model(cls, tier) -> 'TierRule':
        return cls(
            name=tier.name,
            threshold=int(tier.threshold),
            discount_percentage=Decimal(str(tier.discount_percentage)),
            is_protected=bool(tier.is_protected),
        )


# Returned when no tier qualifies; callers decide whether that is an error.
NO_DISCOUNT_TIER = TierRule(name='none', threshold=0, discount_percentage=Decimal('0'))

ScheduleKey = Tuple[str, str]
DiscountSchedule = Mapping[ScheduleKey, Sequence[TierRule]]


def resolve_tier(tiers: Iterable, monthly_total_grams) -> TierRule:
    """
    Pick the tier that applies to ``monthly_total_grams``.

    Args:
        tiers: Tier set of one supplier and karat type
        monthly_total_grams: Month's cumulative 21k-equivalent grams

    Returns:
        The qualifying tier with the highest threshold, or
        ``NO_DISCOUNT_TIER`` when the set is empty or every threshold
        is above the total.

    Example:
        >>> tiers = [TierRule('low', 0, Decimal('20')), TierRule('mid', 500, Decimal('26'))]
        >>> resolve_tier(tiers, 600).name
        'mid'
    """
    total = to_decimal(monthly_total_grams, default=Decimal('0'))
    if not total.is_finite():
        return NO_DISCOUNT_TIER
    qualifying = [tier for tier in (tiers or []) if tier.threshold <= total]
    if not qualifying:
        return NO_DISCOUNT_TIER
    return max(qualifying, key=lambda tier: tier.threshold)


def discount_rate(
    schedule: Optional[DiscountSchedule],
    supplier_code: str,
    karat_type: str,
    monthly_total_grams,
) -> Decimal:
    """
    Discount percentage for a supplier/karat at a monthly volume.

    Never raises: a missing or malformed schedule degrades to ``0`` with a
    warning, so a purchase flow is priced without discount instead of
    failing.

    Returns:
        Percentage in [0, 100] as ``Decimal`` (``26`` means 26%).
    """
    key = (supplier_code, str(karat_type))
    try:
        tiers = schedule.get(key) if schedule is not None else None
    except (AttributeError, TypeError):
        logger.warning("Discount schedule is not a mapping; no discount for %s/%sk", *key)
        return Decimal('0')

    if not tiers:
        logger.warning("No discount tiers configured for supplier %s (%sk); applying 0%%", *key)
        return Decimal('0')

    try:
        tier = resolve_tier(tiers, monthly_total_grams)
        percentage = Decimal(str(tier.discount_percentage))
    except (AttributeError, TypeError, ValueError, InvalidOperation):
        logger.warning("Malformed discount tiers for supplier %s (%sk); applying 0%%", *key)
        return Decimal('0')

    if not percentage.is_finite() or percentage < 0 or percentage > 100:
        logger.warning(
            "Discount percentage %s out of range for supplier %s (%sk); applying 0%%",
            percentage, *key
        )
        return Decimal('0')

    return percentage
