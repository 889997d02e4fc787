"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting
"""

from rest_framework import serializers
from django.utils import timezone


GRAMS = {'max_digits': 16, 'decimal_places': 4}
MONEY = {'max_digits': 18, 'decimal_places': 4}


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class MonthQuerySerializer(serializers.Serializer):
    """
    Validate the month to aggregate.

    Query Parameters:
        period (str): Month period in YYYY-MM format (e.g., '2025-05')
        year (int), month (int): Alternative to period

    Note:
        Defaults to the current month. 'period' takes precedence.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)

    def validate(self, attrs):
        """Resolve period / year+month into year and month."""
        period = attrs.get('period')
        if period:
            year, month = period.split('-')
            attrs['year'], attrs['month'] = int(year), int(month)
        elif ('year' in attrs) != ('month' in attrs):
            raise serializers.ValidationError('Provide both year and month, or period.')

        if 'year' not in attrs:
            today = timezone.localdate()
            attrs['year'], attrs['month'] = today.year, today.month
        return attrs


class HistoryQuerySerializer(serializers.Serializer):
    store = serializers.UUIDField(required=False)
    limit = serializers.IntegerField(
        min_value=1,
        max_value=60,
        required=False,
        default=12,
        help_text='Number of months (1-60)'
    )


class StoreQuerySerializer(serializers.Serializer):
    store = serializers.UUIDField(required=False)


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class MonthAggregateSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    monthly_total_grams = serializers.DecimalField(**GRAMS)
    discount_eligible = serializers.BooleanField()
    purchase_count = serializers.IntegerField()
    band = serializers.CharField()
    next_band = serializers.CharField(allow_null=True)
    grams_to_next_band = serializers.DecimalField(allow_null=True, **GRAMS)


class StoreMonthSerializer(serializers.Serializer):
    store_id = serializers.UUIDField()
    code = serializers.CharField()
    name = serializers.CharField()
    total_grams = serializers.DecimalField(**GRAMS)
    total_fees = serializers.DecimalField(**MONEY)


class MonthHistorySerializer(serializers.Serializer):
    month = serializers.DateField()
    total_grams = serializers.DecimalField(**GRAMS)
    total_fees = serializers.DecimalField(**MONEY)
    total_discount = serializers.DecimalField(**MONEY)
    purchase_count = serializers.IntegerField()
    discount_eligible = serializers.BooleanField()
    stores = StoreMonthSerializer(many=True)


class PurchaseStatsSerializer(serializers.Serializer):
    purchase_count = serializers.IntegerField()
    total_grams = serializers.DecimalField(**GRAMS)
    total_fees = serializers.DecimalField(**MONEY)
    grams_paid = serializers.DecimalField(**GRAMS)
    fees_paid = serializers.DecimalField(**MONEY)
    grams_due = serializers.DecimalField(**GRAMS)
    fees_due = serializers.DecimalField(**MONEY)
    overdue_count = serializers.IntegerField()
    status_counts = serializers.DictField(child=serializers.IntegerField())


class MonthTotalsSerializer(serializers.Serializer):
    total_grams = serializers.DecimalField(**GRAMS)
    total_fees = serializers.DecimalField(**MONEY)
    purchase_count = serializers.IntegerField()
    paid_count = serializers.IntegerField()


class TrendsSerializer(serializers.Serializer):
    current_month = serializers.DateField()
    previous_month = serializers.DateField()
    current = MonthTotalsSerializer()
    previous = MonthTotalsSerializer()
    grams_change_pct = serializers.FloatField(allow_null=True)
    fees_change_pct = serializers.FloatField(allow_null=True)
    count_change = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
