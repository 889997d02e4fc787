# ==========================================
# apps/purchases/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Purchase, PurchaseSupplierReceipt, Payment, PurchaseStatus


class ReceiptInline(admin.TabularInline):
    """Supplier receipts of a purchase (read only; priced by the service)."""
    model = PurchaseSupplierReceipt
    extra = 0
    fields = ['supplier_code', 'grams_18k', 'grams_21k', 'total_grams_21k']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    """Payment history; payments go through the settlement ledger."""
    model = Payment
    extra = 0
    fields = ['position', 'date', 'grams_paid', 'karat_type', 'grams_paid_21k', 'fees_paid', 'note']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    """
    Admin interface for purchases.

    Totals, fees and status are computed by the pricing engine, so every
    priced field is read only here.
    """

    list_display = [
        'date',
        'store',
        'total_grams',
        'total_fees',
        'due_date',
        'status_badge',
    ]
    list_filter = ['status', 'store', 'date']
    search_fields = ['store__name', 'store__code', 'receipts__supplier_code']
    date_hierarchy = 'date'
    inlines = [ReceiptInline, PaymentInline]
    readonly_fields = [
        'id',
        'status',
        'total_grams',
        'base_fees',
        'total_discount',
        'total_fees',
        'due_date',
        'grams_paid',
        'fees_paid',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        """Display purchase status as colored badge."""
        colors = {
            PurchaseStatus.PENDING: ('#E5C49A', '#2C1810'),
            PurchaseStatus.PARTIAL: ('#A47449', 'white'),
            PurchaseStatus.PAID: ('#6B8E5E', 'white'),
            PurchaseStatus.OVERDUE: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def has_add_permission(self, request):
        """Purchases are created through the API so their month is re-priced."""
        return False
