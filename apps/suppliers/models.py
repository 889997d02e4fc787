from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
import uuid


class KaratType(models.TextChoices):
    K18 = '18', '18k'
    K21 = '21', '21k'


class Supplier(models.Model):
    """Gold supplier with per-karat discount configuration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    code = models.CharField(max_length=32, unique=True)
    is_active = models.BooleanField(default=True)

    # Which karat tier sets are in use
    karat_18_active = models.BooleanField(default=False)
    karat_21_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'suppliers'
        ordering = ['code']
        indexes = [
            models.Index(fields=['is_active'], name='suppliers_is_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def is_karat_active(self, karat_type):
        """Return True if the tier set for ``karat_type`` is in use."""
        if karat_type == KaratType.K18:
            return self.karat_18_active
        if karat_type == KaratType.K21:
            return self.karat_21_active
        return False

    @property
    def active_karats(self):
        return [k for k in (KaratType.K18, KaratType.K21) if self.is_karat_active(k)]


class DiscountTier(models.Model):
    """One step of a supplier's monthly-volume discount schedule."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.CASCADE,
        related_name='discount_tiers'
    )
    karat_type = models.CharField(max_length=2, choices=KaratType.choices)

    name = models.CharField(max_length=60)
    threshold = models.PositiveIntegerField()
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )

    # Protected tiers can be edited but never deleted
    is_protected = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'discount_tiers'
        ordering = ['supplier', 'karat_type', 'threshold']
        constraints = [
            models.UniqueConstraint(
                fields=['supplier', 'karat_type', 'name'],
                name='unique_tier_name_per_supplier_karat',
            ),
            models.UniqueConstraint(
                fields=['supplier', 'karat_type', 'threshold'],
                name='unique_tier_threshold_per_supplier_karat',
            ),
        ]

    def __str__(self):
        return f"{self.supplier.code} {self.karat_type}k {self.name}: {self.threshold}g -> {self.discount_percentage}%"
