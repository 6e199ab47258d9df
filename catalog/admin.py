from django.conf import settings
from django.contrib import admin
from django.utils.html import format_html
from unfold.admin import ModelAdmin
from unfold.decorators import display
from core.api import save_form_fields

from .models import Brand, Category, Product


@admin.register(Brand)
class BrandAdmin(ModelAdmin):
    list_display = ("name", "slug", "is_active")
    prepopulated_fields = {"slug": ("name",)}
    search_fields = ("name",)
    list_filter = ("is_active",)


@admin.register(Category)
class CategoryAdmin(ModelAdmin):
    list_display = ("name", "parent", "is_active")
    prepopulated_fields = {"slug": ("name",)}
    list_filter = ("is_active",)
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(ModelAdmin):
    list_display = [
        "product_image_display",
        "name",
        "brand_display",
        "category_display",
        "price",
        "stock",
        "rating_display",
        "is_active",
    ]
    list_filter = ["brand", "category", "is_active", "is_featured", "is_todays_deal"]
    search_fields = ["name", "sku", "brand__name"]
    prepopulated_fields = {"slug": ("name",)}
    # Owned by order placement and the review aggregate
    readonly_fields = ["sold_count", "average_rating", "review_count", "is_todays_deal"]

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return self.readonly_fields + ["stock"]
        return self.readonly_fields

    def save_model(self, request, obj, form, change):
        if change:
            save_form_fields(form)
        else:
            super().save_model(request, obj, form, change)

    @display(description="Image", header=True)
    def product_image_display(self, obj):
        if obj.image:
            return format_html(
                '<img src="{}" style="width: 50px; height: 50px; object-fit: cover; border-radius: 8px;" />',
                obj.image
            )
        return format_html(
            '<div style="width: 50px; height: 50px; background: #f3f4f6; border-radius: 8px; display: flex; align-items: center; justify-content: center; font-size: 10px; color: #9ca3af;">No Image</div>'
        )

    @display(description="Brand", ordering="brand__name")
    def brand_display(self, obj):
        return format_html(
            '<span style="background: #e0e7ff; color: #4338ca; padding: 4px 12px; border-radius: 12px; font-size: 12px; font-weight: 500;">{}</span>',
            obj.brand.name
        )

    @display(description="Category", ordering="category__name")
    def category_display(self, obj):
        return format_html(
            '<span style="background: #dbeafe; color: #1e40af; padding: 4px 12px; border-radius: 12px; font-size: 12px; font-weight: 500;">{}</span>',
            obj.category.name
        )

    @display(description="Rating", ordering="average_rating")
    def rating_display(self, obj):
        return f"{obj.average_rating} ({obj.review_count})"


# Dashboard callback function for custom widgets
def dashboard_callback(request, context):
    """
    Callback to add catalog counts and low-stock products to the dashboard
    """
    threshold = getattr(settings, 'SHOP_LOW_STOCK_THRESHOLD', 10)

    context.update({
        "total_products": Product.objects.filter(is_active=True).count(),
        "total_brands": Brand.objects.filter(is_active=True).count(),
        "total_categories": Category.objects.filter(is_active=True).count(),
        "low_stock_products": Product.objects.filter(is_active=True, stock__lte=threshold).order_by('stock')[:10],
        "recent_products": Product.objects.select_related('brand', 'category').order_by('-id')[:5],
    })
    return context
