from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import Purchase
from .serializers import (
    PurchaseSerializer,
    PurchaseListSerializer,
    PaymentSerializer,
    RemainingAmountsSerializer,
    RecalculationSummarySerializer,
    # Input serializers
    PurchaseFilterSerializer,
    PurchaseCreateSerializer,
    PurchaseUpdateSerializer,
    PaymentCreateSerializer,
    RecalculateMonthSerializer,
)
from .services import (
    create_purchase,
    update_purchase,
    delete_purchase,
    add_payment,
    delete_payment,
    get_remaining_amounts,
    recalculate_stored_month,
    filter_purchases,
)
from .services.exceptions import (
    PurchaseNotFoundError,
    PaymentNotFoundError,
    StoreNotFoundError,
    InvalidPurchaseError,
    InvalidPaymentError,
)


UUID_PATTERN = r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'


class PurchasePagination(PageNumberPagination):
    """Custom pagination for purchases."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PurchaseViewSet(viewsets.GenericViewSet):
    """
    ViewSet for purchases and their payments.

    list: Get purchases, most urgent first (filterable)
    create: Create a purchase and re-price its month
    retrieve: Get a specific purchase
    update / partial_update: Edit date, store or receipts
    destroy: Delete a purchase and re-price its month
    remaining: Grams and fees still due
    payments: List or record payments
    recalculate: Re-price a whole month on demand
    """

    queryset = Purchase.objects.select_related('store').prefetch_related('receipts', 'payment_history')
    serializer_class = PurchaseSerializer
    pagination_class = PurchasePagination
    lookup_value_regex = UUID_PATTERN

    def handle_exception(self, exc):
        if isinstance(exc, (PurchaseNotFoundError, PaymentNotFoundError, StoreNotFoundError)):
            return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)
        if isinstance(exc, (InvalidPurchaseError, InvalidPaymentError)):
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return super().handle_exception(exc)

    def get_purchase(self, pk):
        try:
            return self.get_queryset().get(id=pk)
        except Purchase.DoesNotExist:
            raise PurchaseNotFoundError(f"Purchase with ID {pk} not found")

    @extend_schema(parameters=[PurchaseFilterSerializer], responses={200: PurchaseListSerializer(many=True)})
    def list(self, request):
        filter_serializer = PurchaseFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        purchases = filter_purchases(
            store_id=params.get('store'),
            status=params.get('status'),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
            search=params.get('search'),
        )
        page = self.paginate_queryset(purchases)
        if page is not None:
            return self.get_paginated_response(PurchaseListSerializer(page, many=True).data)
        return Response(PurchaseListSerializer(purchases, many=True).data)

    @extend_schema(request=PurchaseCreateSerializer, responses={201: PurchaseSerializer})
    def create(self, request):
        serializer = PurchaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        purchase = create_purchase(
            date=data['date'],
            store_id=data['store_id'],
            suppliers=data['suppliers'],
        )
        return Response(
            PurchaseSerializer(self.get_purchase(purchase.id)).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(responses={200: PurchaseSerializer})
    def retrieve(self, request, pk=None):
        return Response(PurchaseSerializer(self.get_purchase(pk)).data)

    @extend_schema(request=PurchaseUpdateSerializer, responses={200: PurchaseSerializer})
    def update(self, request, pk=None):
        serializer = PurchaseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        purchase = update_purchase(purchase_id=pk, **serializer.validated_data)
        return Response(PurchaseSerializer(self.get_purchase(purchase.id)).data)

    @extend_schema(request=PurchaseUpdateSerializer, responses={200: PurchaseSerializer})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        delete_purchase(purchase_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: RemainingAmountsSerializer})
    @action(detail=True, methods=['get'])
    def remaining(self, request, pk=None):
        """
        Grams and fees still due.

        GET /api/purchases/{id}/remaining/
        """
        return Response(RemainingAmountsSerializer(get_remaining_amounts(purchase_id=pk)).data)

    @extend_schema(request=PaymentCreateSerializer, responses={201: PurchaseSerializer})
    @action(detail=True, methods=['get', 'post'])
    def payments(self, request, pk=None):
        """
        GET  /api/purchases/{id}/payments/  - Payment history
        POST /api/purchases/{id}/payments/  - Record a payment
        """
        purchase = self.get_purchase(pk)

        if request.method == 'POST':
            serializer = PaymentCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            add_payment(purchase_id=purchase.id, **serializer.validated_data)
            return Response(
                PurchaseSerializer(self.get_purchase(purchase.id)).data,
                status=status.HTTP_201_CREATED
            )

        return Response(PaymentSerializer(purchase.payment_history.all(), many=True).data)

    @extend_schema(responses={200: PurchaseSerializer})
    @action(
        detail=True,
        methods=['delete'],
        url_path=f'payments/(?P<payment_id>{UUID_PATTERN})',
        url_name='payment-detail',
    )
    def remove_payment(self, request, pk=None, payment_id=None):
        """
        Reverse a payment.

        DELETE /api/purchases/{id}/payments/{payment_id}/
        """
        delete_payment(purchase_id=pk, payment_id=payment_id)
        return Response(PurchaseSerializer(self.get_purchase(pk)).data)

    @extend_schema(request=RecalculateMonthSerializer, responses={200: RecalculationSummarySerializer})
    @action(detail=False, methods=['post'])
    def recalculate(self, request):
        """
        Re-price every purchase of a month.

        POST /api/purchases/recalculate/ {"month": 5, "year": 2025}
        """
        serializer = RecalculateMonthSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        month = serializer.validated_data['month']
        year = serializer.validated_data['year']

        result = recalculate_stored_month(year=year, month=month)
        return Response(RecalculationSummarySerializer({
            'year': year,
            'month': month,
            'monthly_total_grams': result.monthly_total_grams,
            'discount_eligible': result.discount_eligible,
            'purchase_count': len(result.updated_purchases),
        }).data)
