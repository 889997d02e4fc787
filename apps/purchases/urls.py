from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'purchases'

router = DefaultRouter()
router.register(r'', views.PurchaseViewSet, basename='purchase')

urlpatterns = [
    # Purchase ViewSet routes
    # GET    /api/purchases/              - List purchases (most urgent first)
    # POST   /api/purchases/              - Create purchase, re-price its month
    # GET    /api/purchases/{id}/         - Get purchase details
    # PUT    /api/purchases/{id}/         - Update purchase
    # PATCH  /api/purchases/{id}/         - Partial update
    # DELETE /api/purchases/{id}/         - Delete purchase, re-price its month

    # Custom purchase actions
    # GET    /api/purchases/{id}/remaining/                - Grams and fees due
    # GET    /api/purchases/{id}/payments/                 - Payment history
    # POST   /api/purchases/{id}/payments/                 - Record payment
    # DELETE /api/purchases/{id}/payments/{payment_id}/    - Reverse payment
    # POST   /api/purchases/recalculate/                   - Re-price a month

    path('', include(router.urls)),
]
