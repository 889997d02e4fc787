from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


GRAMS_FIELD = {'max_digits': 14, 'decimal_places': 4}
MONEY_FIELD = {'max_digits': 16, 'decimal_places': 4}


class PurchaseStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    PARTIAL = 'Partial', 'Partial'
    PAID = 'Paid', 'Paid'
    OVERDUE = 'Overdue', 'Overdue'


class Purchase(models.Model):
    """Gold purchase booked by a store, priced in 21k-equivalent grams."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    date = models.DateField()
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.PROTECT,
        related_name='purchases'
    )
    status = models.CharField(
        max_length=10,
        choices=PurchaseStatus.choices,
        default=PurchaseStatus.PENDING
    )

    # Totals (21k-equivalent grams, currency)
    total_grams = models.DecimalField(default=Decimal('0'), **GRAMS_FIELD)
    base_fees = models.DecimalField(default=Decimal('0'), **MONEY_FIELD)
    total_discount = models.DecimalField(default=Decimal('0'), **MONEY_FIELD)
    # Net fees; negative when the discount exceeds the base fee
    total_fees = models.DecimalField(default=Decimal('0'), **MONEY_FIELD)

    due_date = models.DateField()

    # Running payment totals, kept equal to the sum of payment_history
    grams_paid = models.DecimalField(default=Decimal('0'), **GRAMS_FIELD)
    fees_paid = models.DecimalField(default=Decimal('0'), **MONEY_FIELD)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'purchases'
        indexes = [
            models.Index(fields=['date'], name='purchases_date_idx'),
            models.Index(fields=['store', 'date'], name='purchases_store_date_idx'),
            models.Index(fields=['status'], name='purchases_status_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.store.name} {self.date} - {self.total_grams} g ({self.status})"

    @property
    def grams_due(self):
        return self.total_grams - self.grams_paid

    @property
    def fees_due(self):
        return self.total_fees - self.fees_paid


class PurchaseSupplierReceipt(models.Model):
    """Grams received from one supplier on one purchase."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name='receipts'
    )
    supplier_code = models.CharField(max_length=32)

    grams_18k = models.DecimalField(
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        **GRAMS_FIELD
    )
    grams_21k = models.DecimalField(
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        **GRAMS_FIELD
    )
    total_grams_21k = models.DecimalField(default=Decimal('0'), **GRAMS_FIELD)

    class Meta:
        db_table = 'purchase_supplier_receipts'
        ordering = ['supplier_code']
        constraints = [
            models.UniqueConstraint(
                fields=['purchase', 'supplier_code'],
                name='unique_receipt_per_purchase_supplier',
            ),
        ]

    def __str__(self):
        return f"{self.supplier_code}: {self.total_grams_21k} g (21k eq.)"


class Payment(models.Model):
    """Payment against a purchase, in grams of a karat and/or currency."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name='payment_history'
    )
    # Insertion order within the purchase
    position = models.PositiveIntegerField()

    date = models.DateField()
    grams_paid = models.DecimalField(
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        **GRAMS_FIELD
    )
    fees_paid = models.DecimalField(
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        **MONEY_FIELD
    )
    karat_type = models.CharField(max_length=2, choices=[('18', '18k'), ('21', '21k')], default='21')
    # grams_paid converted to 21k at the time of payment
    grams_paid_21k = models.DecimalField(default=Decimal('0'), **GRAMS_FIELD)
    note = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        ordering = ['position']
        indexes = [
            models.Index(fields=['purchase', 'position'], name='payments_purchase_pos_idx'),
        ]

    def __str__(self):
        return f"{self.date}: {self.grams_paid} g ({self.karat_type}k) + {self.fees_paid}"
