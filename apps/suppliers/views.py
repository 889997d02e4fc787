from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import Supplier
from .serializers import (
    SupplierSerializer,
    SupplierCreateSerializer,
    SupplierUpdateSerializer,
    DiscountTierSerializer,
    TierCreateSerializer,
    TierUpdateSerializer,
    ResolveTierQuerySerializer,
    ResolvedTierSerializer,
)
from .services import (
    create_supplier,
    update_supplier,
    delete_supplier,
    create_tier,
    update_tier,
    delete_tier,
    get_supplier_tiers,
    resolve_tier,
)
from .services.exceptions import (
    SupplierNotFoundError,
    DuplicateSupplierCodeError,
    TierNotFoundError,
    InvalidTierError,
    ProtectedTierError,
)


UUID_PATTERN = r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'


class SupplierErrorMixin:
    """Translate supplier domain exceptions into HTTP responses."""

    def handle_exception(self, exc):
        if isinstance(exc, (SupplierNotFoundError, TierNotFoundError)):
            return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)
        if isinstance(exc, InvalidTierError):
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, (DuplicateSupplierCodeError, ProtectedTierError)):
            return Response({'error': str(exc)}, status=status.HTTP_409_CONFLICT)
        return super().handle_exception(exc)


class SupplierViewSet(SupplierErrorMixin, viewsets.ViewSet):
    """
    ViewSet for suppliers and their discount schedules.

    list: Get all suppliers with tiers
    create: Create a supplier (seeds default tiers when none given)
    retrieve: Get a specific supplier
    partial_update: Update supplier attributes
    destroy: Delete a supplier and its tiers
    tiers: List or add tiers of a supplier
    resolve: Resolve the tier for a monthly total
    """

    lookup_value_regex = UUID_PATTERN

    def get_object(self, pk):
        try:
            return Supplier.objects.prefetch_related('discount_tiers').get(id=pk)
        except Supplier.DoesNotExist:
            raise SupplierNotFoundError(f"Supplier with ID {pk} not found")

    @extend_schema(responses={200: SupplierSerializer(many=True)})
    def list(self, request):
        queryset = Supplier.objects.prefetch_related('discount_tiers')
        is_active = request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() in ('1', 'true', 'yes'))
        return Response(SupplierSerializer(queryset, many=True).data)

    @extend_schema(request=SupplierCreateSerializer, responses={201: SupplierSerializer})
    def create(self, request):
        serializer = SupplierCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tiers = {}
        if 'tiers_18k' in data:
            tiers['18'] = data['tiers_18k']
        if 'tiers_21k' in data:
            tiers['21'] = data['tiers_21k']

        supplier = create_supplier(
            name=data['name'],
            code=data['code'],
            is_active=data['is_active'],
            karat_18_active=data['karat_18_active'],
            karat_21_active=data['karat_21_active'],
            tiers=tiers,
        )
        return Response(
            SupplierSerializer(self.get_object(supplier.id)).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(responses={200: SupplierSerializer})
    def retrieve(self, request, pk=None):
        return Response(SupplierSerializer(self.get_object(pk)).data)

    @extend_schema(request=SupplierUpdateSerializer, responses={200: SupplierSerializer})
    def partial_update(self, request, pk=None):
        serializer = SupplierUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        supplier = update_supplier(supplier_id=self.get_object(pk).id, **serializer.validated_data)
        return Response(SupplierSerializer(self.get_object(supplier.id)).data)

    def destroy(self, request, pk=None):
        delete_supplier(supplier_id=self.get_object(pk).id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=TierCreateSerializer, responses={200: DiscountTierSerializer(many=True)})
    @action(detail=True, methods=['get', 'post'])
    def tiers(self, request, pk=None):
        """
        GET  /api/suppliers/{id}/tiers/?karat_type=21  - List tiers
        POST /api/suppliers/{id}/tiers/                - Add a tier
        """
        supplier = self.get_object(pk)

        if request.method == 'POST':
            serializer = TierCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            tier = create_tier(supplier_id=supplier.id, **serializer.validated_data)
            return Response(DiscountTierSerializer(tier).data, status=status.HTTP_201_CREATED)

        tiers = get_supplier_tiers(
            supplier_id=supplier.id,
            karat_type=request.query_params.get('karat_type')
        )
        return Response(DiscountTierSerializer(tiers, many=True).data)

    @extend_schema(parameters=[ResolveTierQuerySerializer], responses={200: ResolvedTierSerializer})
    @action(detail=True, methods=['get'])
    def resolve(self, request, pk=None):
        """
        Resolve the applicable tier for a monthly total.

        GET /api/suppliers/{id}/resolve/?karat_type=21&monthly_total=600
        """
        supplier = self.get_object(pk)
        query = ResolveTierQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        karat_type = query.validated_data['karat_type']
        monthly_total = query.validated_data['monthly_total']

        tiers = []
        if supplier.is_active and supplier.is_karat_active(karat_type):
            tiers = supplier.discount_tiers.filter(karat_type=karat_type)
        tier = resolve_tier(tiers, monthly_total)

        return Response(ResolvedTierSerializer({
            'supplier': supplier.code,
            'karat_type': karat_type,
            'monthly_total': monthly_total,
            'tier_name': tier.name,
            'threshold': tier.threshold,
            'discount_percentage': tier.discount_percentage,
        }).data)


class DiscountTierViewSet(SupplierErrorMixin, viewsets.ViewSet):
    """
    Edit or delete single tiers.

    partial_update: Edit a tier (protected tiers included)
    destroy: Delete an unprotected tier
    """

    lookup_value_regex = UUID_PATTERN

    @extend_schema(request=TierUpdateSerializer, responses={200: DiscountTierSerializer})
    def partial_update(self, request, pk=None):
        serializer = TierUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tier = update_tier(tier_id=pk, **serializer.validated_data)
        return Response(DiscountTierSerializer(tier).data)

    def destroy(self, request, pk=None):
        delete_tier(tier_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
