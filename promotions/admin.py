from django.contrib import admin
from unfold.admin import ModelAdmin
from unfold.decorators import display
from core.api import save_form_fields

from .models import Coupon, CouponUsage, TodaysDeal
from .services import delete_deal, sync_deal_flag


@admin.register(Coupon)
class CouponAdmin(ModelAdmin):
    list_display = ("code", "discount_type", "discount_value", "usage_display", "valid_from", "valid_until", "is_active")
    list_filter = ("discount_type", "is_active")
    search_fields = ("code",)
    readonly_fields = ("used_count",)

    @display(description="Used")
    def usage_display(self, obj):
        return f"{obj.used_count} / {obj.usage_limit if obj.usage_limit is not None else '∞'}"

    def save_model(self, request, obj, form, change):
        if change:
            save_form_fields(form)
        else:
            super().save_model(request, obj, form, change)


@admin.register(CouponUsage)
class CouponUsageAdmin(ModelAdmin):
    list_display = ("coupon", "order", "user", "discount_amount", "created_at")
    search_fields = ("coupon__code", "order__order_number", "user__email")


@admin.register(TodaysDeal)
class TodaysDealAdmin(ModelAdmin):
    list_display = ("product", "discount", "start_time", "end_time", "is_active")
    list_filter = ("is_active",)
    search_fields = ("product__name",)

    def save_model(self, request, obj, form, change):
        previous_product_id = None
        if change:
            previous_product_id = TodaysDeal.objects.filter(pk=obj.pk).values_list('product_id', flat=True).first()
        super().save_model(request, obj, form, change)
        sync_deal_flag(obj.product_id)
        if previous_product_id and previous_product_id != obj.product_id:
            sync_deal_flag(previous_product_id)

    def delete_model(self, request, obj):
        delete_deal(obj)

    def delete_queryset(self, request, queryset):
        for deal in queryset:
            delete_deal(deal)
