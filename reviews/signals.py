# reviews/signals.py
from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_delete, pre_delete
from django.dispatch import receiver

from catalog.models import Product

from .models import Review
from .services import recompute_product_rating


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL)
def remember_reviewed_products(sender, instance, **kwargs):
    """Note which products lose a review when this user's reviews cascade away."""
    instance._reviewed_product_ids = sorted(set(
        Review.objects.filter(user=instance).values_list('product_id', flat=True)
    ))


@receiver(post_delete, sender=settings.AUTH_USER_MODEL)
def recompute_reviewed_products(sender, instance, **kwargs):
    for product_id in getattr(instance, '_reviewed_product_ids', []):
        with transaction.atomic():
            if Product.objects.select_for_update().filter(pk=product_id).exists():
                recompute_product_rating(product_id)
