from rest_framework import serializers
from .models import Purchase, PurchaseSupplierReceipt, Payment, PurchaseStatus
from .services.status_engine import days_left


GRAMS = {'max_digits': 14, 'decimal_places': 4}
MONEY = {'max_digits': 16, 'decimal_places': 4}
KARAT_CHOICES = [('18', '18k'), ('21', '21k')]


# =============================================================================
# Input Serializers
# =============================================================================

class PurchaseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for purchase filtering.

    Query Parameters:
        store (UUID): Filter by store ID
        status (str): Filter by purchase status
        date_from (date): Filter purchases from this date
        date_to (date): Filter purchases to this date
        search (str): Match store name/code or supplier code
    """

    store = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PurchaseStatus.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to:
            if date_from > date_to:
                raise serializers.ValidationError({
                    'date_to': 'End date must be after start date'
                })

        return attrs


class ReceiptLineInputSerializer(serializers.Serializer):
    """Grams received from one supplier."""

    grams_18k = serializers.DecimalField(min_value=0, default=0, **GRAMS)
    grams_21k = serializers.DecimalField(min_value=0, default=0, **GRAMS)
    total_grams_21k = serializers.DecimalField(required=False, allow_null=True, **GRAMS)


class PurchaseCreateSerializer(serializers.Serializer):
    """
    Purchase creation request.

    ``suppliers`` maps supplier code to its receipt, e.g.
    ``{"EG18": {"grams_18k": "200"}}``.
    """

    date = serializers.DateField()
    store_id = serializers.UUIDField()
    suppliers = serializers.DictField(child=ReceiptLineInputSerializer())

    def validate_suppliers(self, value):
        if not value:
            raise serializers.ValidationError('Enter grams for at least one supplier.')
        return value


class PurchaseUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    store_id = serializers.UUIDField(required=False)
    suppliers = serializers.DictField(child=ReceiptLineInputSerializer(), required=False)


class PaymentCreateSerializer(serializers.Serializer):
    """Payment request; at least one of grams or fees must be positive."""

    date = serializers.DateField()
    grams_paid = serializers.DecimalField(min_value=0, default=0, **GRAMS)
    fees_paid = serializers.DecimalField(min_value=0, default=0, **MONEY)
    karat_type = serializers.ChoiceField(choices=KARAT_CHOICES, default='21')
    note = serializers.CharField(required=False, allow_blank=True, default='')


class RecalculateMonthSerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000, max_value=2100)


# =============================================================================
# Output Serializers
# =============================================================================

class ReceiptSerializer(serializers.ModelSerializer):

    class Meta:
        model = PurchaseSupplierReceipt
        fields = ['supplier_code', 'grams_18k', 'grams_21k', 'total_grams_21k']
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):

    class Meta:
        model = Payment
        fields = [
            'id',
            'date',
            'grams_paid',
            'fees_paid',
            'karat_type',
            'grams_paid_21k',
            'note',
            'created_at',
        ]
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    """Full purchase with receipts, payment history and amounts due."""

    store_name = serializers.CharField(source='store.name', read_only=True)
    store_code = serializers.CharField(source='store.code', read_only=True)
    receipts = ReceiptSerializer(many=True, read_only=True)
    payment_history = PaymentSerializer(many=True, read_only=True)
    grams_due = serializers.DecimalField(read_only=True, **GRAMS)
    fees_due = serializers.DecimalField(read_only=True, **MONEY)
    days_left = serializers.SerializerMethodField()

    class Meta:
        model = Purchase
        fields = [
            'id',
            'date',
            'store',
            'store_name',
            'store_code',
            'status',
            'total_grams',
            'base_fees',
            'total_discount',
            'total_fees',
            'due_date',
            'days_left',
            'grams_paid',
            'fees_paid',
            'grams_due',
            'fees_due',
            'receipts',
            'payment_history',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_days_left(self, obj) -> int:
        return days_left(obj.due_date)


class PurchaseListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for purchase lists."""

    store_name = serializers.CharField(source='store.name', read_only=True)
    days_left = serializers.SerializerMethodField()

    class Meta:
        model = Purchase
        fields = [
            'id',
            'date',
            'store',
            'store_name',
            'status',
            'total_grams',
            'total_fees',
            'due_date',
            'days_left',
            'grams_paid',
            'fees_paid',
        ]
        read_only_fields = fields

    def get_days_left(self, obj) -> int:
        return days_left(obj.due_date)


class RemainingAmountsSerializer(serializers.Serializer):
    grams_due = serializers.DecimalField(**GRAMS)
    fees_due = serializers.DecimalField(**MONEY)


class RecalculationSummarySerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    monthly_total_grams = serializers.DecimalField(**GRAMS)
    discount_eligible = serializers.BooleanField()
    purchase_count = serializers.IntegerField()
