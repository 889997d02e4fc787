from django.db.models import ProtectedError
from rest_framework import viewsets, status
from rest_framework.response import Response

from .models import Store
from .serializers import StoreSerializer


class StoreViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Store CRUD operations.

    list: Get all stores (``?is_active=true`` to filter)
    create: Register a store
    retrieve: Get a specific store
    update: Update a store
    destroy: Delete a store without purchases
    """

    queryset = Store.objects.all()
    serializer_class = StoreSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() in ('1', 'true', 'yes'))
        return queryset

    def destroy(self, request, *args, **kwargs):
        store = self.get_object()
        try:
            store.delete()
        except ProtectedError:
            return Response(
                {'error': 'Store has purchases and cannot be deleted. Deactivate it instead.'},
                status=status.HTTP_409_CONFLICT
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
