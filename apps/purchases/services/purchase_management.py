"""
Purchase persistence service.

Loads purchases into engine snapshots, runs the pricing engine and writes
the results back. Every write runs in one transaction and locks the
purchase rows of the affected month, so two writers cannot interleave a
month recalculation.
"""

import logging
from datetime import date as date_type
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from uuid import UUID, uuid4

from django.db import transaction
from django.db.models import Max, Q

from apps.purchases.models import Purchase, PurchaseSupplierReceipt, Payment, PurchaseStatus
from apps.stores.models import Store
from apps.suppliers.models import Supplier
from apps.suppliers.services import load_discount_schedule

from .exceptions import (
    PurchaseNotFoundError,
    PaymentNotFoundError,
    StoreNotFoundError,
    InvalidPurchaseError,
    InvalidPaymentError,
)
from .recalculation import RecalculationResult, recalculate_after_payment_change, recalculate_month
from .settlement_ledger import apply_payment, payment_grams_21k, reverse_payment
from .snapshots import (
    PaymentEntry,
    PaymentTotals,
    PurchaseSnapshot,
    ReceiptLine,
    due_date_for,
    new_purchase,
    validate_purchase_request,
)
from .status_engine import days_left, status_for

logger = logging.getLogger(__name__)

STORED_PRECISION = Decimal('0.0001')

PRICED_FIELDS = ['base_fees', 'total_discount', 'total_fees', 'status', 'updated_at']
PAYMENT_FIELDS = ['grams_paid', 'fees_paid', 'status', 'updated_at']


def _stored(value) -> Decimal:
    return Decimal(value).quantize(STORED_PRECISION, rounding=ROUND_HALF_UP)


# =============================================================================
# Snapshot conversion
# =============================================================================

def to_snapshot(purchase: Purchase) -> PurchaseSnapshot:
    """Engine view of a purchase row with its receipts and payments."""
    return PurchaseSnapshot(
        id=str(purchase.id),
        date=purchase.date,
        store_id=str(purchase.store_id),
        due_date=purchase.due_date,
        suppliers={
            receipt.supplier_code: ReceiptLine(
                supplier_code=receipt.supplier_code,
                grams_18k=receipt.grams_18k,
                grams_21k=receipt.grams_21k,
                total_grams_21k=receipt.total_grams_21k,
            )
            for receipt in purchase.receipts.all()
        },
        total_grams=purchase.total_grams,
        base_fees=purchase.base_fees,
        total_discount=purchase.total_discount,
        total_fees=purchase.total_fees,
        payments=PaymentTotals(grams_paid=purchase.grams_paid, fees_paid=purchase.fees_paid),
        payment_history=tuple(
            PaymentEntry(
                id=str(payment.id),
                date=payment.date,
                grams_paid=payment.grams_paid,
                fees_paid=payment.fees_paid,
                karat_type=payment.karat_type,
                note=payment.note,
            )
            for payment in purchase.payment_history.all()
        ),
        status=purchase.status,
    )


def apply_snapshot(purchase: Purchase, snapshot: PurchaseSnapshot) -> List[str]:
    """
    Copy computed totals and status from ``snapshot`` onto ``purchase``.

    Returns:
        Names of the fields whose stored value changed
    """
    values = {
        'base_fees': _stored(snapshot.base_fees),
        'total_discount': _stored(snapshot.total_discount),
        'total_fees': _stored(snapshot.total_fees),
        'grams_paid': _stored(snapshot.payments.grams_paid),
        'fees_paid': _stored(snapshot.payments.fees_paid),
        'status': str(snapshot.status),
    }
    changed = []
    for field, value in values.items():
        if getattr(purchase, field) != value:
            setattr(purchase, field, value)
            changed.append(field)
    return changed


# =============================================================================
# Lookups
# =============================================================================

def _get_purchase(purchase_id: UUID, lock: bool = False) -> Purchase:
    queryset = Purchase.objects.select_for_update() if lock else Purchase.objects
    try:
        return queryset.get(id=purchase_id)
    except Purchase.DoesNotExist:
        raise PurchaseNotFoundError(f"Purchase with ID {purchase_id} not found")


def _get_store(store_id: UUID) -> Store:
    try:
        store = Store.objects.get(id=store_id)
    except Store.DoesNotExist:
        raise StoreNotFoundError(f"Store with ID {store_id} not found")
    if not store.is_active:
        raise InvalidPurchaseError(f"Store {store.code} is inactive")
    return store


def _normalize_suppliers(suppliers: dict) -> dict:
    """Upper-case supplier codes and check each is an active supplier."""
    normalized = {str(code).strip().upper(): line for code, line in (suppliers or {}).items()}
    known = set(
        Supplier.objects.filter(code__in=normalized.keys(), is_active=True)
        .values_list('code', flat=True)
    )
    unknown = sorted(set(normalized) - known)
    if unknown:
        raise InvalidPurchaseError(f"Unknown or inactive supplier: {', '.join(unknown)}")
    return normalized


def _validated_snapshot(purchase_id, purchase_date, store_id, suppliers) -> PurchaseSnapshot:
    result = validate_purchase_request(purchase_date, store_id, suppliers)
    if not result:
        raise InvalidPurchaseError(result.error)
    return new_purchase(purchase_id, purchase_date, store_id, suppliers)


def _save_receipts(purchase: Purchase, snapshot: PurchaseSnapshot) -> None:
    purchase.receipts.all().delete()
    PurchaseSupplierReceipt.objects.bulk_create([
        PurchaseSupplierReceipt(
            purchase=purchase,
            supplier_code=line.supplier_code,
            grams_18k=line.grams_18k,
            grams_21k=line.grams_21k,
            total_grams_21k=line.total_grams_21k,
        )
        for line in snapshot.suppliers.values()
    ])


# =============================================================================
# Month recalculation
# =============================================================================

def _recalculate_stored_month(year: int, month: int, *, today: Optional[date_type] = None) -> RecalculationResult:
    """Re-price every stored purchase of a month and save what changed."""
    purchases = list(
        Purchase.objects.select_for_update()
        .filter(date__year=year, date__month=month)
        .order_by('date', 'created_at')
    )
    snapshots = [to_snapshot(purchase) for purchase in purchases]
    result = recalculate_month(snapshots, month, year, schedule=load_discount_schedule(), today=today)

    by_id = {str(purchase.id): purchase for purchase in purchases}
    for snapshot in result.updated_purchases:
        purchase = by_id[snapshot.id]
        changed = apply_snapshot(purchase, snapshot)
        if changed:
            purchase.save(update_fields=changed + ['updated_at'])
    return result


@transaction.atomic
def recalculate_stored_month(*, year: int, month: int, today: Optional[date_type] = None) -> RecalculationResult:
    """Public entry point for an on-demand month recalculation."""
    return _recalculate_stored_month(year, month, today=today)


# =============================================================================
# Purchases
# =============================================================================

@transaction.atomic
def create_purchase(
    *,
    date: date_type,
    store_id: UUID,
    suppliers: dict,
    today: Optional[date_type] = None
) -> Purchase:
    """
    Create a purchase and re-price its month.

    Args:
        date: Purchase date
        store_id: UUID of the purchasing store
        suppliers: ``{supplier_code: {grams_18k, grams_21k, total_grams_21k}}``
        today: Reference date for status (defaults to the local date)

    Returns:
        The saved Purchase with fees and status filled in

    Raises:
        StoreNotFoundError: If the store does not exist
        InvalidPurchaseError: If the receipts are invalid or a supplier is unknown
    """
    store = _get_store(store_id)
    suppliers = _normalize_suppliers(suppliers)
    purchase_id = uuid4()
    snapshot = _validated_snapshot(purchase_id, date, store.id, suppliers)

    # Lock the month before adding to it
    list(Purchase.objects.select_for_update().filter(date__year=date.year, date__month=date.month))

    purchase = Purchase.objects.create(
        id=purchase_id,
        date=snapshot.date,
        store=store,
        total_grams=snapshot.total_grams,
        due_date=snapshot.due_date,
    )
    _save_receipts(purchase, snapshot)

    result = _recalculate_stored_month(date.year, date.month, today=today)
    logger.info(
        "Created purchase %s for store %s: %s g; month total now %s g",
        purchase.id, store.code, snapshot.total_grams, result.monthly_total_grams
    )
    return Purchase.objects.get(id=purchase.id)


@transaction.atomic
def update_purchase(
    *,
    purchase_id: UUID,
    date: Optional[date_type] = None,
    store_id: Optional[UUID] = None,
    suppliers: Optional[dict] = None,
    today: Optional[date_type] = None
) -> Purchase:
    """
    Edit a purchase and re-price the months it left and joined.

    Payments already recorded are kept. The due date follows the
    purchase date.
    """
    purchase = _get_purchase(purchase_id, lock=True)
    old_date = purchase.date
    new_date = date or old_date

    if store_id is not None:
        purchase.store = _get_store(store_id)

    if suppliers is not None:
        suppliers = _normalize_suppliers(suppliers)
        snapshot = _validated_snapshot(purchase.id, new_date, purchase.store_id, suppliers)
        _save_receipts(purchase, snapshot)
        purchase.total_grams = snapshot.total_grams

    purchase.date = new_date
    purchase.due_date = due_date_for(new_date)
    purchase.save()

    months = {(old_date.year, old_date.month), (new_date.year, new_date.month)}
    for year, month in sorted(months):
        _recalculate_stored_month(year, month, today=today)

    logger.info("Updated purchase %s", purchase.id)
    return Purchase.objects.get(id=purchase.id)


@transaction.atomic
def delete_purchase(*, purchase_id: UUID, today: Optional[date_type] = None) -> None:
    """Delete a purchase with its receipts and payments, then re-price its month."""
    purchase = _get_purchase(purchase_id, lock=True)
    purchase_date = purchase.date
    purchase.delete()
    result = _recalculate_stored_month(purchase_date.year, purchase_date.month, today=today)
    logger.info(
        "Deleted purchase %s; month %04d-%02d total now %s g",
        purchase_id, purchase_date.year, purchase_date.month, result.monthly_total_grams
    )


# =============================================================================
# Payments
# =============================================================================

def _save_payment_totals(purchase: Purchase, snapshot: PurchaseSnapshot, today) -> None:
    snapshot = recalculate_after_payment_change([snapshot], snapshot.id, today=today)[0]
    changed = apply_snapshot(purchase, snapshot)
    if changed:
        purchase.save(update_fields=changed + ['updated_at'])


@transaction.atomic
def add_payment(
    *,
    purchase_id: UUID,
    date: date_type,
    grams_paid=Decimal('0'),
    fees_paid=Decimal('0'),
    karat_type: str = '21',
    note: str = '',
    today: Optional[date_type] = None
) -> Payment:
    """
    Record a payment against a purchase.

    Raises:
        PurchaseNotFoundError: If the purchase does not exist
        InvalidPaymentError: If the ledger rejects the payment
    """
    purchase = _get_purchase(purchase_id, lock=True)
    entry = PaymentEntry(
        id=str(uuid4()),
        date=date,
        grams_paid=grams_paid,
        fees_paid=fees_paid,
        karat_type=str(karat_type),
        note=note or '',
    )
    result = apply_payment(to_snapshot(purchase), entry, today=today)
    if not result.success:
        raise InvalidPaymentError(result.error)

    position = (purchase.payment_history.aggregate(last=Max('position'))['last'] or 0) + 1
    payment = Payment.objects.create(
        id=UUID(result.payment.id),
        purchase=purchase,
        position=position,
        date=result.payment.date,
        grams_paid=result.payment.grams_paid,
        fees_paid=result.payment.fees_paid,
        karat_type=result.payment.karat_type,
        grams_paid_21k=payment_grams_21k(result.payment),
        note=result.payment.note,
    )
    _save_payment_totals(purchase, result.purchase, today)
    return payment


@transaction.atomic
def delete_payment(*, purchase_id: UUID, payment_id: UUID, today: Optional[date_type] = None) -> Purchase:
    """
    Remove a payment and roll back the running totals.

    Raises:
        PurchaseNotFoundError: If the purchase does not exist
        PaymentNotFoundError: If the payment is not on this purchase
    """
    purchase = _get_purchase(purchase_id, lock=True)
    result = reverse_payment(to_snapshot(purchase), payment_id, today=today)
    if not result.success:
        raise PaymentNotFoundError(result.error)

    purchase.payment_history.filter(id=payment_id).delete()
    _save_payment_totals(purchase, result.purchase, today)
    return purchase


def get_remaining_amounts(*, purchase_id: UUID) -> dict:
    """Grams and fees still owed on a purchase (negative when overpaid)."""
    purchase = _get_purchase(purchase_id)
    return {
        'grams_due': purchase.grams_due,
        'fees_due': purchase.fees_due,
    }


# =============================================================================
# Status and listing
# =============================================================================

@transaction.atomic
def refresh_statuses(*, today: Optional[date_type] = None, dry_run: bool = False) -> int:
    """
    Re-derive the status of every unpaid purchase.

    Status depends on the date, so Pending and Partial purchases turn
    Overdue without any write to them. With ``dry_run`` nothing is saved.

    Returns:
        Number of purchases whose status changed
    """
    updated = 0
    purchases = Purchase.objects.select_for_update().exclude(status=PurchaseStatus.PAID)
    for purchase in purchases:
        new_status = status_for(
            purchase.total_grams,
            purchase.total_fees,
            purchase.grams_paid,
            purchase.fees_paid,
            purchase.due_date,
            today,
        )
        if new_status != purchase.status:
            updated += 1
            if not dry_run:
                purchase.status = new_status
                purchase.save(update_fields=['status', 'updated_at'])
    logger.info("Refreshed purchase statuses: %d changed%s", updated, " (dry run)" if dry_run else "")
    return updated


def filter_purchases(
    *,
    store_id: Optional[UUID] = None,
    status: Optional[str] = None,
    date_from: Optional[date_type] = None,
    date_to: Optional[date_type] = None,
    search: Optional[str] = None,
    today: Optional[date_type] = None
) -> List[Purchase]:
    """
    Filter purchases, most urgent first.

    Unpaid purchases come first ordered by days left (overdue ones at the
    top), then paid purchases newest first.
    """
    queryset = (
        Purchase.objects
        .select_related('store')
        .prefetch_related('receipts', 'payment_history')
    )
    if store_id:
        queryset = queryset.filter(store_id=store_id)
    if status:
        queryset = queryset.filter(status=status)
    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)
    if search:
        queryset = queryset.filter(
            Q(store__name__icontains=search) |
            Q(store__code__icontains=search) |
            Q(receipts__supplier_code__icontains=search)
        ).distinct()

    purchases = list(queryset)
    unpaid = [p for p in purchases if p.status != PurchaseStatus.PAID]
    paid = [p for p in purchases if p.status == PurchaseStatus.PAID]
    unpaid.sort(key=lambda p: (days_left(p.due_date, today), p.date))
    paid.sort(key=lambda p: p.date, reverse=True)
    return unpaid + paid
