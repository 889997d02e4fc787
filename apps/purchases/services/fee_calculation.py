"""
Purchase fee calculation.

Base fees are charged per 21k-equivalent gram. The discount is taken from
each supplier's tier schedule for the fee karat, at the month's cumulative
volume. Net fees are never clamped and go negative when the discount
exceeds the base fee.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from apps.common.results import to_decimal
from apps.suppliers.services import pricing_config
from apps.suppliers.services.tier_resolution import discount_rate

from .snapshots import due_date_for

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class FeeBreakdown:
    base_fees: Decimal
    total_discount: Decimal
    total_fees: Decimal


def should_apply_discount(purchase_date: date, monthly_total_grams=None, *, enforce_gate: Optional[bool] = None) -> bool:
    """
    Whether a purchase dated ``purchase_date`` is discount-eligible.

    Every date is eligible unless ``ENFORCE_MONTHLY_DISCOUNT_GATE`` is set,
    in which case the month's total must reach the MEDIUM threshold.
    """
    if enforce_gate is None:
        enforce_gate = pricing_config.monthly_discount_gate_enforced()
    if not enforce_gate:
        return True
    total = to_decimal(monthly_total_grams, default=Decimal('0'))
    return total.is_finite() and total >= pricing_config.medium_threshold()


def calculate_purchase_fees(
    receipt_lines: Mapping,
    purchase_date: date,
    monthly_total_grams,
    *,
    schedule=None,
    base_fee_per_gram=None,
    schedule_karat: Optional[str] = None,
    enforce_gate: Optional[bool] = None,
) -> FeeBreakdown:
    """
    Compute base fees, discount and net fees for one purchase.

    Args:
        receipt_lines: Mapping supplier code -> ReceiptLine
        purchase_date: Purchase date, used for the eligibility gate
        monthly_total_grams: Cumulative 21k-equivalent grams of the
            purchase's month
        schedule: ``{(supplier_code, karat): [tier, ...]}``; defaults to
            the configured band schedule
        base_fee_per_gram: Override for ``BASE_FEE_PER_GRAM``
        schedule_karat: Karat whose tiers price the discount (``'21'``)

    Returns:
        FeeBreakdown with ``total_fees == base_fees - total_discount``
    """
    if base_fee_per_gram is None:
        base_fee_per_gram = pricing_config.base_fee_per_gram()
    if schedule_karat is None:
        schedule_karat = pricing_config.fee_schedule_karat()
    if schedule is None:
        schedule = pricing_config.default_band_schedule(schedule_karat)

    lines = list(receipt_lines.values()) if isinstance(receipt_lines, Mapping) else list(receipt_lines)
    eligible = should_apply_discount(purchase_date, monthly_total_grams, enforce_gate=enforce_gate)

    base_fees = Decimal('0')
    total_discount = Decimal('0')
    for line in lines:
        grams = line.total_grams_21k
        base_fees += grams * base_fee_per_gram
        if eligible:
            rate = discount_rate(schedule, line.supplier_code, schedule_karat, monthly_total_grams)
            total_discount += grams * rate / HUNDRED

    breakdown = FeeBreakdown(
        base_fees=base_fees,
        total_discount=total_discount,
        total_fees=base_fees - total_discount,
    )
    logger.debug(
        "Fees for purchase dated %s at %s g/month: base=%s discount=%s net=%s",
        purchase_date, monthly_total_grams,
        breakdown.base_fees, breakdown.total_discount, breakdown.total_fees
    )
    return breakdown


def calculate_due_date(purchase_date: date, terms_days: Optional[int] = None) -> date:
    """Due date is the purchase date plus the payment terms."""
    return due_date_for(purchase_date, terms_days)
