"""
Purchase lifecycle status.

Status is never stored as a transition history: it is re-derived from the
current totals every time something changes, so a Paid purchase goes back
to Partial or Overdue when a payment is reversed.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from apps.purchases.models import PurchaseStatus


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


def days_left(due_date, today: Optional[date] = None) -> int:
    """Whole days until ``due_date``; negative once it has passed."""
    today = _as_date(today) if today is not None else timezone.localdate()
    return (_as_date(due_date) - today).days


def status_for(
    total_grams: Decimal,
    total_fees: Decimal,
    grams_paid: Decimal,
    fees_paid: Decimal,
    due_date,
    today: Optional[date] = None,
) -> str:
    """
    Status from raw totals, in priority order.

    1. Paid when nothing is due, even past the due date
    2. Overdue when the due date has passed
    3. Partial when anything has been paid
    4. Pending otherwise
    """
    grams_due = total_grams - grams_paid
    fees_due = total_fees - fees_paid

    if grams_due <= 0 and fees_due <= 0:
        return PurchaseStatus.PAID
    if days_left(due_date, today) < 0:
        return PurchaseStatus.OVERDUE
    if grams_paid > 0 or fees_paid > 0:
        return PurchaseStatus.PARTIAL
    return PurchaseStatus.PENDING


def derive_status(purchase, today: Optional[date] = None) -> str:
    """Status of a ``PurchaseSnapshot``."""
    return status_for(
        purchase.total_grams,
        purchase.total_fees,
        purchase.payments.grams_paid,
        purchase.payments.fees_paid,
        purchase.due_date,
        today,
    )


def remaining_amounts(purchase) -> dict:
    """Grams and fees still owed; negative means overpaid."""
    return {
        'grams_due': purchase.total_grams - purchase.payments.grams_paid,
        'fees_due': purchase.total_fees - purchase.payments.fees_paid,
    }
