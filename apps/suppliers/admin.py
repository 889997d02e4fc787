from django.contrib import admin
from .models import Supplier, DiscountTier


class DiscountTierInline(admin.TabularInline):
    """Inline admin for tiers within a supplier."""
    model = DiscountTier
    extra = 0
    fields = ['karat_type', 'name', 'threshold', 'discount_percentage', 'is_protected']
    ordering = ['karat_type', 'threshold']

    def has_delete_permission(self, request, obj=None):
        # Deletion goes through the service so protected tiers stay
        return False


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'is_active', 'karat_18_active', 'karat_21_active']
    list_filter = ['is_active', 'karat_18_active', 'karat_21_active']
    search_fields = ['code', 'name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [DiscountTierInline]
