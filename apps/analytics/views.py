from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema
from .analytics import AnalyticsQueries
from .serializers import (
    # Input serializers
    MonthQuerySerializer,
    HistoryQuerySerializer,
    StoreQuerySerializer,
    # Response serializers
    MonthAggregateSerializer,
    MonthHistorySerializer,
    PurchaseStatsSerializer,
    TrendsSerializer,
    ErrorSerializer,
)
from .exceptions import InvalidPeriodError


@extend_schema(
    parameters=[MonthQuerySerializer],
    responses={
        200: MonthAggregateSerializer,
        400: ErrorSerializer,
    },
    description="Cumulative 21k-equivalent grams of a month and its discount eligibility.",
    tags=['analytics'],
)
@api_view(['GET'])
def month_aggregate(request):
    """Month aggregate - thin HTTP handler."""
    query_serializer = MonthQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.month_aggregate(year=params['year'], month=params['month'])
    except InvalidPeriodError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(MonthAggregateSerializer(data).data)


@extend_schema(
    parameters=[HistoryQuerySerializer],
    responses={200: MonthHistorySerializer(many=True)},
    description="Per-month totals with store breakdown, newest first.",
    tags=['analytics'],
)
@api_view(['GET'])
def monthly_history(request):
    """Monthly history - thin HTTP handler."""
    query_serializer = HistoryQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = AnalyticsQueries.monthly_history(
        store_id=params.get('store'),
        limit=params.get('limit'),
    )
    return Response(MonthHistorySerializer(data, many=True).data)


@extend_schema(
    parameters=[StoreQuerySerializer],
    responses={200: PurchaseStatsSerializer},
    description="Settlement totals, amounts due and status counts.",
    tags=['analytics'],
)
@api_view(['GET'])
def purchase_stats(request):
    """Purchase statistics - thin HTTP handler."""
    query_serializer = StoreQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    data = AnalyticsQueries.purchase_stats(store_id=query_serializer.validated_data.get('store'))
    return Response(PurchaseStatsSerializer(data).data)


@extend_schema(
    responses={200: TrendsSerializer},
    description="Current month against the previous month.",
    tags=['analytics'],
)
@api_view(['GET'])
def monthly_trends(request):
    """Month-over-month trends - thin HTTP handler."""
    return Response(TrendsSerializer(AnalyticsQueries.monthly_trends()).data)
