from django.contrib import admin
from django.utils.html import format_html
from unfold.admin import ModelAdmin
from unfold.decorators import display
from .models import Order, OrderItem, OrderStatusHistory

STATUS_COLOURS = {
    'pending':    ('#fef3c7', '#92400e'),
    'confirmed':  ('#dbeafe', '#1e40af'),
    'processing': ('#e0e7ff', '#4338ca'),
    'shipped':    ('#cffafe', '#155e75'),
    'delivered':  ('#dcfce7', '#166534'),
    'cancelled':  ('#fee2e2', '#991b1b'),
    'refunded':   ('#f3f4f6', '#374151'),
}


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "product_sku", "quantity", "unit_price", "discount", "total_price")


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    can_delete = False
    readonly_fields = ("from_status", "to_status", "notes", "changed_by", "created_at")


@admin.register(Order)
class OrderAdmin(ModelAdmin):
    list_display = ["order_number", "user", "status_display", "payment_status", "final_amount", "created_at"]
    list_filter = ["status", "payment_status", "payment_method"]
    search_fields = ["order_number", "user__email"]
    inlines = [OrderItemInline, OrderStatusHistoryInline]
    # Amounts and snapshots are fixed at checkout; status moves through the API
    readonly_fields = [
        "order_number", "user", "status", "total_amount", "discount_amount", "shipping_amount",
        "tax_amount", "final_amount", "coupon", "shipping_address", "billing_address",
        "payment_method", "payment_status", "paid_at", "confirmed_at", "shipped_at", "delivered_at",
    ]

    def has_delete_permission(self, request, obj=None):
        return False

    @display(description="Status", ordering="status")
    def status_display(self, obj):
        background, colour = STATUS_COLOURS.get(obj.status, ('#f3f4f6', '#374151'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 4px 12px; border-radius: 12px; font-size: 12px; font-weight: 500;">{}</span>',
            background, colour, obj.get_status_display()
        )
