from rest_framework import serializers
from .models import Supplier, DiscountTier, KaratType


# =============================================================================
# Input Serializers
# =============================================================================

class TierInputSerializer(serializers.Serializer):
    """Validate a single tier in create/update payloads."""

    name = serializers.CharField(max_length=60)
    threshold = serializers.IntegerField(min_value=0)
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=0,
        max_value=100
    )
    is_protected = serializers.BooleanField(required=False, default=False)


class TierCreateSerializer(TierInputSerializer):
    karat_type = serializers.ChoiceField(choices=KaratType.choices)


class TierUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=60, required=False)
    threshold = serializers.IntegerField(min_value=0, required=False)
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=0,
        max_value=100,
        required=False
    )
    is_protected = serializers.BooleanField(required=False)


class SupplierCreateSerializer(serializers.Serializer):
    """
    Validate supplier creation.

    Fields:
        tiers_18k / tiers_21k: Optional tier lists; active karats without
            a list are seeded with default protected bands.
    """

    name = serializers.CharField(max_length=120)
    code = serializers.CharField(max_length=32)
    is_active = serializers.BooleanField(required=False, default=True)
    karat_18_active = serializers.BooleanField(required=False, default=False)
    karat_21_active = serializers.BooleanField(required=False, default=True)
    tiers_18k = TierInputSerializer(many=True, required=False)
    tiers_21k = TierInputSerializer(many=True, required=False)

    def validate(self, attrs):
        if not (attrs.get('karat_18_active') or attrs.get('karat_21_active')):
            raise serializers.ValidationError(
                'At least one of karat_18_active or karat_21_active must be true.'
            )
        return attrs


class SupplierUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, required=False)
    code = serializers.CharField(max_length=32, required=False)
    is_active = serializers.BooleanField(required=False)
    karat_18_active = serializers.BooleanField(required=False)
    karat_21_active = serializers.BooleanField(required=False)


class ResolveTierQuerySerializer(serializers.Serializer):
    karat_type = serializers.ChoiceField(choices=KaratType.choices, required=False, default=KaratType.K21)
    monthly_total = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)


# =============================================================================
# Output Serializers
# =============================================================================

class DiscountTierSerializer(serializers.ModelSerializer):
    """Serializer for discount tiers."""

    class Meta:
        model = DiscountTier
        fields = [
            'id',
            'supplier',
            'karat_type',
            'name',
            'threshold',
            'discount_percentage',
            'is_protected',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SupplierSerializer(serializers.ModelSerializer):
    """Main serializer for suppliers with nested tiers."""

    discount_tiers = DiscountTierSerializer(many=True, read_only=True)

    class Meta:
        model = Supplier
        fields = [
            'id',
            'name',
            'code',
            'is_active',
            'karat_18_active',
            'karat_21_active',
            'discount_tiers',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ResolvedTierSerializer(serializers.Serializer):
    supplier = serializers.CharField()
    karat_type = serializers.CharField()
    monthly_total = serializers.DecimalField(max_digits=12, decimal_places=4)
    tier_name = serializers.CharField()
    threshold = serializers.IntegerField()
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
