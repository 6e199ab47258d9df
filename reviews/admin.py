from django.contrib import admin
from unfold.admin import ModelAdmin
from .models import Review
from .services import delete_review


@admin.register(Review)
class ReviewAdmin(ModelAdmin):
    list_display = ("product", "user", "rating", "is_verified_purchase", "created_at")
    list_filter = ("rating", "is_verified_purchase")
    search_fields = ("product__name", "user__email", "comment")
    # Ratings change through the API so the product aggregate follows
    readonly_fields = ("product", "user", "rating", "is_verified_purchase")

    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        delete_review(obj, request.user)

    def delete_queryset(self, request, queryset):
        for review in queryset:
            delete_review(review, request.user)
