"""
Month-level recalculation.

Discount tiers are resolved on the month's cumulative grams, so adding,
editing or deleting one purchase can move every other purchase of that
month across a tier boundary. ``recalculate_month`` re-prices the whole
month; payments only ever change status.

All functions take the purchase collection explicitly and return new
snapshots. Nothing here reads ambient state except ``today`` defaulting
to the local date.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from django.utils import timezone

from apps.suppliers.services import pricing_config

from .fee_calculation import calculate_purchase_fees
from .snapshots import PurchaseSnapshot
from .status_engine import derive_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthAggregate:
    year: int
    month: int
    purchases: Tuple[PurchaseSnapshot, ...]
    monthly_total_grams: Decimal
    discount_eligible: bool


@dataclass(frozen=True)
class RecalculationResult:
    updated_purchases: List[PurchaseSnapshot]
    monthly_total_grams: Decimal
    discount_eligible: bool


def in_month(purchase, month: int, year: int) -> bool:
    return purchase.date.year == year and purchase.date.month == month


def month_aggregate(purchases: Sequence, month: int, year: int, *, medium_threshold=None) -> MonthAggregate:
    """
    Sum the 21k-equivalent grams of the purchases dated in ``month``/``year``.

    Months are 1-12.
    """
    if medium_threshold is None:
        medium_threshold = pricing_config.medium_threshold()
    selected = tuple(p for p in purchases if in_month(p, month, year))
    total = sum((p.total_grams for p in selected), Decimal('0'))
    return MonthAggregate(
        year=year,
        month=month,
        purchases=selected,
        monthly_total_grams=total,
        discount_eligible=total >= medium_threshold,
    )


def recalculate_purchase(
    purchase: PurchaseSnapshot,
    monthly_total_grams,
    *,
    schedule=None,
    today: Optional[date] = None,
) -> PurchaseSnapshot:
    """Re-price one purchase at ``monthly_total_grams`` and refresh its status."""
    fees = calculate_purchase_fees(
        purchase.suppliers,
        purchase.date,
        monthly_total_grams,
        schedule=schedule,
    )
    priced = replace(
        purchase,
        base_fees=fees.base_fees,
        total_discount=fees.total_discount,
        total_fees=fees.total_fees,
    )
    return replace(priced, status=derive_status(priced, today))


def recalculate_month(
    purchases: Sequence[PurchaseSnapshot],
    target_month: Optional[int] = None,
    target_year: Optional[int] = None,
    *,
    schedule=None,
    today: Optional[date] = None,
) -> RecalculationResult:
    """
    Re-price every purchase of the target month.

    Purchases outside the month are returned unchanged, in their original
    positions. Defaults to the current month.

    Args:
        purchases: Every known purchase
        target_month: 1-12
        target_year: Four-digit year
        schedule: Discount schedule; the configured bands when omitted
        today: Reference date for Overdue

    Returns:
        RecalculationResult with the updated list, the month's total grams
        and whether it reached the MEDIUM threshold
    """
    if target_month is None or target_year is None:
        current = timezone.localdate()
        target_month = target_month or current.month
        target_year = target_year or current.year

    aggregate = month_aggregate(purchases, target_month, target_year)

    updated = [
        recalculate_purchase(p, aggregate.monthly_total_grams, schedule=schedule, today=today)
        if in_month(p, target_month, target_year) else p
        for p in purchases
    ]

    logger.info(
        "Recalculated %d purchase(s) for %04d-%02d at %s g (discount eligible: %s)",
        len(aggregate.purchases), target_year, target_month,
        aggregate.monthly_total_grams, aggregate.discount_eligible
    )
    return RecalculationResult(
        updated_purchases=updated,
        monthly_total_grams=aggregate.monthly_total_grams,
        discount_eligible=aggregate.discount_eligible,
    )


def recalculate_after_purchase_change(
    purchases: Sequence[PurchaseSnapshot],
    purchase_date: date,
    *,
    schedule=None,
    today: Optional[date] = None,
) -> RecalculationResult:
    """Run after a purchase is created, edited or deleted, for its month."""
    return recalculate_month(
        purchases,
        purchase_date.month,
        purchase_date.year,
        schedule=schedule,
        today=today,
    )


def recalculate_after_payment_change(
    purchases: Sequence[PurchaseSnapshot],
    affected_purchase_id,
    *,
    today: Optional[date] = None,
) -> List[PurchaseSnapshot]:
    """Refresh only the affected purchase's status; fees stay as agreed."""
    affected_purchase_id = str(affected_purchase_id)
    return [
        replace(p, status=derive_status(p, today)) if str(p.id) == affected_purchase_id else p
        for p in purchases
    ]
