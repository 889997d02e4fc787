"""
Purchases services - Business logic layer.

Pure pricing engine:
- Karat conversion to 21k-equivalent grams
- Fee calculation against supplier discount schedules
- Status derivation
- Month recalculation
- Settlement ledger (payment apply/reverse)

Persistence:
- Purchase and payment management over the ORM
"""

from .karat_conversion import (
    KARAT_18,
    KARAT_21,
    GRAM_PRECISION,
    convert_to_21k,
    normalize_karat,
    is_supported_karat,
    quantize_grams,
    round_grams,
)

from .snapshots import (
    ReceiptLine,
    PaymentEntry,
    PaymentTotals,
    PurchaseSnapshot,
    build_receipt_line,
    validate_receipt_line,
    validate_purchase_request,
    total_grams_for,
    due_date_for,
    new_purchase,
)

from .fee_calculation import (
    FeeBreakdown,
    should_apply_discount,
    calculate_purchase_fees,
    calculate_due_date,
)

from .status_engine import (
    days_left,
    status_for,
    derive_status,
    remaining_amounts,
)

from .recalculation import (
    MonthAggregate,
    RecalculationResult,
    month_aggregate,
    recalculate_purchase,
    recalculate_month,
    recalculate_after_purchase_change,
    recalculate_after_payment_change,
)

from .settlement_ledger import (
    LedgerResult,
    validate_payment,
    apply_payment,
    reverse_payment,
    totals_from_history,
)

from .purchase_management import (
    to_snapshot,
    apply_snapshot,
    create_purchase,
    update_purchase,
    delete_purchase,
    add_payment,
    delete_payment,
    get_remaining_amounts,
    recalculate_stored_month,
    refresh_statuses,
    filter_purchases,
)

from .exceptions import (
    PurchaseServiceError,
    PurchaseNotFoundError,
    PaymentNotFoundError,
    StoreNotFoundError,
    InvalidPurchaseError,
    InvalidPaymentError,
)

__all__ = [
    # Karat conversion
    'KARAT_18',
    'KARAT_21',
    'GRAM_PRECISION',
    'convert_to_21k',
    'normalize_karat',
    'is_supported_karat',
    'quantize_grams',
    'round_grams',
    # Snapshots
    'ReceiptLine',
    'PaymentEntry',
    'PaymentTotals',
    'PurchaseSnapshot',
    'build_receipt_line',
    'validate_receipt_line',
    'validate_purchase_request',
    'total_grams_for',
    'due_date_for',
    'new_purchase',
    # Fees
    'FeeBreakdown',
    'should_apply_discount',
    'calculate_purchase_fees',
    'calculate_due_date',
    # Status
    'days_left',
    'status_for',
    'derive_status',
    'remaining_amounts',
    # Recalculation
    'MonthAggregate',
    'RecalculationResult',
    'month_aggregate',
    'recalculate_purchase',
    'recalculate_month',
    'recalculate_after_purchase_change',
    'recalculate_after_payment_change',
    # Ledger
    'LedgerResult',
    'validate_payment',
    'apply_payment',
    'reverse_payment',
    'totals_from_history',
    # Persistence
    'to_snapshot',
    'apply_snapshot',
    'create_purchase',
    'update_purchase',
    'delete_purchase',
    'add_payment',
    'delete_payment',
    'get_remaining_amounts',
    'recalculate_stored_month',
    'refresh_statuses',
    'filter_purchases',
    # Exceptions
    'PurchaseServiceError',
    'PurchaseNotFoundError',
    'PaymentNotFoundError',
    'StoreNotFoundError',
    'InvalidPurchaseError',
    'InvalidPaymentError',
]
