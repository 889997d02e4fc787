"""
Analytics Module
=================

Read-only aggregations over stored purchases for dashboards: the current
month's discount standing, monthly history, settlement totals and
month-over-month trends.

Classes:
    AnalyticsQueries: Static methods for the analytics queries.

Example:
    Where does this month stand against the discount bands::

        from apps.analytics.analytics import AnalyticsQueries

        month = AnalyticsQueries.month_aggregate(2025, 5)
        print(f"{month['monthly_total_grams']} g, band {month['band']}")

Note:
    All methods return plain dictionaries or lists, suitable for JSON
    serialization in API responses. Grams are 21k-equivalent.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Sum, Count, Q
from django.db.models.functions import TruncMonth, Coalesce
from django.utils import timezone

from apps.purchases.models import Purchase, PurchaseStatus
from apps.purchases.services import month_aggregate
from apps.suppliers.services import pricing_config

from .exceptions import InvalidPeriodError


ZERO = Decimal('0')


def _band_for(total_grams: Decimal) -> dict:
    """Named volume band reached by ``total_grams`` and the gap to the next one."""
    thresholds = sorted(pricing_config.discount_thresholds().items(), key=lambda item: item[1])
    band = thresholds[0][0]
    next_band = None
    for name, threshold in thresholds:
        if total_grams >= threshold:
            band = name
        elif next_band is None:
            next_band = (name, threshold)
    return {
        'band': band,
        'next_band': next_band[0] if next_band else None,
        'grams_to_next_band': (Decimal(next_band[1]) - total_grams) if next_band else None,
    }


def _change_pct(current: Decimal, previous: Decimal) -> Optional[float]:
    if not previous:
        return None
    return round(float((current - previous) / previous * 100), 1)


class AnalyticsQueries:
    """
    Aggregation queries for analytics endpoints.

    Methods:
        month_aggregate: Monthly grams total and discount eligibility.
        monthly_history: Per-month totals with a store breakdown.
        purchase_stats: Settlement totals and status counts.
        monthly_trends: Current month against the previous one.
    """

    @staticmethod
    def month_aggregate(year, month):
        """
        Cumulative 21k-equivalent grams for one calendar month.

        Args:
            year (int): Four-digit year.
            month (int): Month number, 1-12.

        Returns:
            dict: ``year``, ``month``, ``monthly_total_grams``,
            ``discount_eligible`` (total reached the MEDIUM threshold),
            ``purchase_count`` and the volume ``band`` reached with the
            grams still needed for the next one.

        Raises:
            InvalidPeriodError: If month is outside 1-12.
        """
        if not 1 <= int(month) <= 12:
            raise InvalidPeriodError(f"Invalid month: {month}")

        purchases = Purchase.objects.filter(date__year=year, date__month=month).only('date', 'total_grams')
        aggregate = month_aggregate(list(purchases), int(month), int(year))

        return {
            'year': aggregate.year,
            'month': aggregate.month,
            'monthly_total_grams': aggregate.monthly_total_grams,
            'discount_eligible': aggregate.discount_eligible,
            'purchase_count': len(aggregate.purchases),
            **_band_for(aggregate.monthly_total_grams),
        }

    @staticmethod
    def monthly_history(store_id=None, limit=12):
        """
        Per-month totals, newest first.

        Args:
            store_id (UUID, optional): Only this store's purchases.
            limit (int, optional): Maximum number of months. Defaults to 12.

        Returns:
            list[dict]: One entry per month with ``month`` (first day),
            ``total_grams``, ``total_fees``, ``total_discount``,
            ``purchase_count``, ``discount_eligible`` and ``stores``
            (per-store grams and fees).
        """
        purchases = Purchase.objects.all()
        if store_id:
            purchases = purchases.filter(store_id=store_id)

        months = (
            purchases
            .annotate(month=TruncMonth('date'))
            .values('month')
            .annotate(
                total_grams=Coalesce(Sum('total_grams'), ZERO),
                total_fees=Coalesce(Sum('total_fees'), ZERO),
                total_discount=Coalesce(Sum('total_discount'), ZERO),
                purchase_count=Count('id'),
            )
            .order_by('-month')[:limit]
        )

        per_store = (
            purchases
            .annotate(month=TruncMonth('date'))
            .values('month', 'store_id', 'store__code', 'store__name')
            .annotate(
                total_grams=Coalesce(Sum('total_grams'), ZERO),
                total_fees=Coalesce(Sum('total_fees'), ZERO),
            )
            .order_by('store__code')
        )
        stores_by_month = {}
        for row in per_store:
            stores_by_month.setdefault(row['month'], []).append({
                'store_id': row['store_id'],
                'code': row['store__code'],
                'name': row['store__name'],
                'total_grams': row['total_grams'],
                'total_fees': row['total_fees'],
            })

        medium = pricing_config.medium_threshold()
        history = []
        for row in months:
            # Eligibility is judged on the whole month, every store included
            month_total = Purchase.objects.filter(
                date__year=row['month'].year,
                date__month=row['month'].month,
            ).aggregate(total=Coalesce(Sum('total_grams'), ZERO))['total']
            history.append({
                'month': row['month'],
                'total_grams': row['total_grams'],
                'total_fees': row['total_fees'],
                'total_discount': row['total_discount'],
                'purchase_count': row['purchase_count'],
                'discount_eligible': month_total >= medium,
                'stores': stores_by_month.get(row['month'], []),
            })
        return history

    @staticmethod
    def purchase_stats(store_id=None, today=None):
        """
        Settlement totals across purchases.

        Returns:
            dict: ``purchase_count``, ``total_grams``, ``total_fees``,
            ``grams_paid``, ``fees_paid``, ``grams_due``, ``fees_due``
            (outstanding amounts of unpaid purchases), ``overdue_count``
            and ``status_counts``.
        """
        today = today or timezone.localdate()
        purchases = Purchase.objects.all()
        if store_id:
            purchases = purchases.filter(store_id=store_id)

        totals = purchases.aggregate(
            purchase_count=Count('id'),
            total_grams=Coalesce(Sum('total_grams'), ZERO),
            total_fees=Coalesce(Sum('total_fees'), ZERO),
            grams_paid=Coalesce(Sum('grams_paid'), ZERO),
            fees_paid=Coalesce(Sum('fees_paid'), ZERO),
        )
        outstanding = purchases.exclude(status=PurchaseStatus.PAID).aggregate(
            total_grams=Coalesce(Sum('total_grams'), ZERO),
            total_fees=Coalesce(Sum('total_fees'), ZERO),
            grams_paid=Coalesce(Sum('grams_paid'), ZERO),
            fees_paid=Coalesce(Sum('fees_paid'), ZERO),
        )

        # Stored status can lag behind the date; count overdue from due dates
        overdue_count = purchases.exclude(status=PurchaseStatus.PAID).filter(due_date__lt=today).count()

        status_counts = {choice: 0 for choice in PurchaseStatus.values}
        for row in purchases.values('status').annotate(count=Count('id')):
            status_counts[row['status']] = row['count']

        return {
            **totals,
            'grams_due': outstanding['total_grams'] - outstanding['grams_paid'],
            'fees_due': outstanding['total_fees'] - outstanding['fees_paid'],
            'overdue_count': overdue_count,
            'status_counts': status_counts,
        }

    @staticmethod
    def monthly_trends(today=None):
        """Current month against the previous month: grams, fees and count."""
        today = today or timezone.localdate()
        current_start = today.replace(day=1)
        previous_start = (current_start - timedelta(days=1)).replace(day=1)

        def _month_totals(start: date):
            return Purchase.objects.filter(
                date__year=start.year,
                date__month=start.month,
            ).aggregate(
                total_grams=Coalesce(Sum('total_grams'), ZERO),
                total_fees=Coalesce(Sum('total_fees'), ZERO),
                purchase_count=Count('id'),
                paid_count=Count('id', filter=Q(status=PurchaseStatus.PAID)),
            )

        current = _month_totals(current_start)
        previous = _month_totals(previous_start)

        return {
            'current_month': current_start,
            'previous_month': previous_start,
            'current': current,
            'previous': previous,
            'grams_change_pct': _change_pct(current['total_grams'], previous['total_grams']),
            'fees_change_pct': _change_pct(current['total_fees'], previous['total_fees']),
            'count_change': current['purchase_count'] - previous['purchase_count'],
        }
