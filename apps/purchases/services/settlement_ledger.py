"""
Payment application.

Keeps a purchase's running ``payments`` totals equal to the sum of its
``payment_history``. Grams are added in 21k-equivalent units at the
stored gram precision, so reversing a payment subtracts exactly what
applying it added.

Failures are returned as ``ValidationResult`` / ``LedgerResult`` values,
never raised.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from apps.common.results import ValidationResult, to_decimal

from .karat_conversion import convert_to_21k, is_supported_karat, quantize_grams, round_grams
from .snapshots import PaymentEntry, PaymentTotals, PurchaseSnapshot
from .status_engine import derive_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    success: bool
    purchase: Optional[PurchaseSnapshot] = None
    payment: Optional[PaymentEntry] = None
    error: Optional[str] = None


def payment_grams_21k(payment: PaymentEntry) -> Decimal:
    """21k-equivalent grams a payment settles."""
    return quantize_grams(convert_to_21k(payment.grams_paid, payment.karat_type))


def totals_from_history(history) -> PaymentTotals:
    return PaymentTotals(
        grams_paid=sum((payment_grams_21k(p) for p in history), Decimal('0')),
        fees_paid=sum((Decimal(p.fees_paid) for p in history), Decimal('0')),
    )


def validate_payment(purchase: PurchaseSnapshot, grams_paid=None, fees_paid=None, karat_type='21') -> ValidationResult:
    """
    Check a payment before it touches the purchase.

    Fees may exceed what is due (credit); grams may not.
    """
    grams = Decimal('0') if grams_paid in (None, '') else to_decimal(grams_paid)
    fees = Decimal('0') if fees_paid in (None, '') else to_decimal(fees_paid)

    if grams is None or fees is None or not grams.is_finite() or not fees.is_finite():
        return ValidationResult.fail('Payment amounts must be numbers.')
    if grams < 0 or fees < 0:
        return ValidationResult.fail('Payment amounts cannot be negative.')
    if grams == 0 and fees == 0:
        return ValidationResult.fail('Please enter at least one payment amount (fees or grams).')
    if not is_supported_karat(karat_type):
        return ValidationResult.fail(f'Unsupported karat type: {karat_type}.')

    if grams > 0:
        grams_21k = quantize_grams(convert_to_21k(grams, karat_type))
        if round_grams(grams_21k) > round_grams(purchase.grams_due):
            return ValidationResult.fail(
                f'Grams paid ({round_grams(grams_21k)} g 21k) cannot exceed '
                f'grams due ({round_grams(purchase.grams_due)} g).'
            )

    return ValidationResult.ok()


def apply_payment(purchase: PurchaseSnapshot, payment: PaymentEntry, today: Optional[date] = None) -> LedgerResult:
    """
    Record ``payment`` on ``purchase``.

    Returns:
        LedgerResult with the updated snapshot, or the validation error
    """
    if any(str(p.id) == str(payment.id) for p in purchase.payment_history):
        return LedgerResult(success=False, error=f'Payment {payment.id} is already recorded.')

    validation = validate_payment(purchase, payment.grams_paid, payment.fees_paid, payment.karat_type)
    if not validation:
        return LedgerResult(success=False, error=validation.error)

    payment = replace(
        payment,
        grams_paid=to_decimal(payment.grams_paid, default=Decimal('0')),
        fees_paid=to_decimal(payment.fees_paid, default=Decimal('0')),
    )
    totals = PaymentTotals(
        grams_paid=purchase.payments.grams_paid + payment_grams_21k(payment),
        fees_paid=purchase.payments.fees_paid + payment.fees_paid,
    )
    updated = replace(
        purchase,
        payments=totals,
        payment_history=purchase.payment_history + (payment,),
    )
    updated = replace(updated, status=derive_status(updated, today))

    logger.info(
        "Applied payment %s to purchase %s: %s g (%sk) + %s fees; status %s",
        payment.id, purchase.id, payment.grams_paid, payment.karat_type,
        payment.fees_paid, updated.status
    )
    return LedgerResult(success=True, purchase=updated, payment=payment)


def reverse_payment(purchase: PurchaseSnapshot, payment_id, today: Optional[date] = None) -> LedgerResult:
    """Remove a payment and subtract what it added to the running totals."""
    payment = next((p for p in purchase.payment_history if str(p.id) == str(payment_id)), None)
    if payment is None:
        return LedgerResult(success=False, error=f'Payment {payment_id} not found.')

    totals = PaymentTotals(
        grams_paid=purchase.payments.grams_paid - payment_grams_21k(payment),
        fees_paid=purchase.payments.fees_paid - payment.fees_paid,
    )
    updated = replace(
        purchase,
        payments=totals,
        payment_history=tuple(p for p in purchase.payment_history if p is not payment),
    )
    updated = replace(updated, status=derive_status(updated, today))

    logger.info(
        "Reversed payment %s on purchase %s; status %s",
        payment.id, purchase.id, updated.status
    )
    return LedgerResult(success=True, purchase=updated, payment=payment)
