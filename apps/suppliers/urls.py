from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'suppliers'

# Note: tiers must be registered BEFORE empty prefix to avoid URL conflicts
router = DefaultRouter()
router.register(r'tiers', views.DiscountTierViewSet, basename='tier')
router.register(r'', views.SupplierViewSet, basename='supplier')

urlpatterns = [
    # GET    /api/suppliers/                     - List suppliers
    # POST   /api/suppliers/                     - Create supplier
    # GET    /api/suppliers/{id}/                - Get supplier
    # PATCH  /api/suppliers/{id}/                - Update supplier
    # DELETE /api/suppliers/{id}/                - Delete supplier
    # GET    /api/suppliers/{id}/tiers/          - List tiers
    # POST   /api/suppliers/{id}/tiers/          - Add tier
    # GET    /api/suppliers/{id}/resolve/        - Resolve tier for a monthly total
    # PATCH  /api/suppliers/tiers/{id}/          - Edit tier
    # DELETE /api/suppliers/tiers/{id}/          - Delete tier
    path('', include(router.urls)),
]
