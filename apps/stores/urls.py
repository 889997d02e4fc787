from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'stores'

router = DefaultRouter()
router.register(r'', views.StoreViewSet, basename='store')

urlpatterns = [
    # GET    /api/stores/       - List stores
    # POST   /api/stores/       - Create store
    # GET    /api/stores/{id}/  - Get store
    # PUT    /api/stores/{id}/  - Update store
    # DELETE /api/stores/{id}/  - Delete store
    path('', include(router.urls)),
]
