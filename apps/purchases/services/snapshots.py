"""
Immutable values the pricing engine works on.

The engine never touches the ORM: purchase_management turns model rows
into ``PurchaseSnapshot`` values, runs the pure functions, and writes the
returned snapshots back.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from apps.common.results import ValidationResult, to_decimal
from apps.purchases.models import PurchaseStatus
from apps.suppliers.services import pricing_config

from .karat_conversion import (
    KARAT_18,
    KARAT_21,
    convert_to_21k,
    quantize_grams,
    round_grams,
)


ZERO = Decimal('0')


@dataclass(frozen=True)
class ReceiptLine:
    """Grams received from one supplier on one purchase."""

    supplier_code: str
    grams_18k: Decimal = ZERO
    grams_21k: Decimal = ZERO
    total_grams_21k: Decimal = ZERO


@dataclass(frozen=True)
class PaymentEntry:
    id: str
    date: date
    grams_paid: Decimal = ZERO
    fees_paid: Decimal = ZERO
    karat_type: str = KARAT_21
    note: str = ''


@dataclass(frozen=True)
class PaymentTotals:
    """Running totals: 21k-equivalent grams and currency."""

    grams_paid: Decimal = ZERO
    fees_paid: Decimal = ZERO


@dataclass(frozen=True)
class PurchaseSnapshot:
    id: str
    date: date
    store_id: str
    due_date: date
    suppliers: Mapping[str, ReceiptLine] = field(default_factory=dict)
    total_grams: Decimal = ZERO
    base_fees: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_fees: Decimal = ZERO
    payments: PaymentTotals = PaymentTotals()
    payment_history: Tuple[PaymentEntry, ...] = ()
    status: str = PurchaseStatus.PENDING

    @property
    def grams_due(self) -> Decimal:
        return self.total_grams - self.payments.grams_paid

    @property
    def fees_due(self) -> Decimal:
        return self.total_fees - self.payments.fees_paid


# =============================================================================
# Receipt lines
# =============================================================================

def line_total_21k(grams_18k, grams_21k) -> Decimal:
    """21k-native grams plus the 21k equivalent of the 18k grams (4 dp)."""
    return quantize_grams(convert_to_21k(grams_21k, KARAT_21) + convert_to_21k(grams_18k, KARAT_18))


def validate_receipt_line(supplier_code, grams_18k=None, grams_21k=None, total_grams_21k=None) -> ValidationResult:
    """
    Check one supplier's receipt before it is priced.

    A submitted ``total_grams_21k`` must agree with the derived total
    at one decimal place.
    """
    if not supplier_code or not str(supplier_code).strip():
        return ValidationResult.fail('Supplier code is required.')

    values = {}
    for label, raw in (('18k', grams_18k), ('21k', grams_21k)):
        value = ZERO if raw in (None, '') else to_decimal(raw)
        if value is None or not value.is_finite() or value < 0:
            return ValidationResult.fail(f'{supplier_code}: {label} grams must be a non-negative number.')
        values[label] = value

    if total_grams_21k is not None and total_grams_21k != '':
        submitted = to_decimal(total_grams_21k)
        if submitted is None or not submitted.is_finite():
            return ValidationResult.fail(f'{supplier_code}: total 21k grams must be a number.')
        expected = line_total_21k(values['18k'], values['21k'])
        if round_grams(submitted) != round_grams(expected):
            return ValidationResult.fail(
                f'{supplier_code}: total 21k grams {round_grams(submitted)} '
                f'does not match {round_grams(expected)}.'
            )

    return ValidationResult.ok()


def build_receipt_line(supplier_code, grams_18k=None, grams_21k=None) -> ReceiptLine:
    """Receipt line with its derived 21k-equivalent total."""
    grams_18k = to_decimal(grams_18k, default=ZERO)
    grams_21k = to_decimal(grams_21k, default=ZERO)
    return ReceiptLine(
        supplier_code=str(supplier_code).strip(),
        grams_18k=grams_18k,
        grams_21k=grams_21k,
        total_grams_21k=line_total_21k(grams_18k, grams_21k),
    )


def total_grams_for(lines) -> Decimal:
    """Purchase total: sum of line totals, rounded to one decimal place."""
    if isinstance(lines, Mapping):
        lines = lines.values()
    return round_grams(sum((line.total_grams_21k for line in lines), ZERO))


def due_date_for(purchase_date: date, terms_days: Optional[int] = None) -> date:
    if terms_days is None:
        terms_days = pricing_config.payment_terms_days()
    return purchase_date + timedelta(days=terms_days)


def validate_purchase_request(purchase_date, store_id, suppliers) -> ValidationResult:
    """
    Validate a purchase-creation request before any pricing happens.

    Args:
        purchase_date: Purchase date
        store_id: Purchasing store id
        suppliers: Mapping supplier code -> dict with ``grams_18k``,
            ``grams_21k`` and optional ``total_grams_21k``
    """
    if not purchase_date:
        return ValidationResult.fail('Purchase date is required.')
    if not store_id:
        return ValidationResult.fail('Please select a store.')
    if not suppliers:
        return ValidationResult.fail('Enter grams for at least one supplier.')

    total = ZERO
    for code, line in suppliers.items():
        result = validate_receipt_line(
            code,
            line.get('grams_18k'),
            line.get('grams_21k'),
            line.get('total_grams_21k'),
        )
        if not result:
            return result
        total += line_total_21k(
            to_decimal(line.get('grams_18k'), default=ZERO),
            to_decimal(line.get('grams_21k'), default=ZERO),
        )

    if total <= 0:
        return ValidationResult.fail('Enter grams for at least one supplier.')
    return ValidationResult.ok()


def new_purchase(purchase_id, purchase_date: date, store_id, suppliers, *, terms_days=None) -> PurchaseSnapshot:
    """
    Unpriced snapshot for a validated creation request.

    Fees and status are filled in by the month recalculation that follows.
    """
    lines = {
        str(code).strip(): build_receipt_line(code, line.get('grams_18k'), line.get('grams_21k'))
        for code, line in suppliers.items()
    }
    return PurchaseSnapshot(
        id=str(purchase_id),
        date=purchase_date,
        store_id=str(store_id),
        due_date=due_date_for(purchase_date, terms_days),
        suppliers=lines,
        total_grams=total_grams_for(lines),
    )
