# comparisons/models.py
from django.db import models
from django.conf import settings
from catalog.models import Product


class Comparison(models.Model):
    """Side-by-side product comparison saved by a user"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='comparisons')
    name = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'comparisons'
        ordering = ['-created_at']

    def __str__(self):
        return self.name or f"Comparison #{self.pk}"


class ComparisonProduct(models.Model):
    """Join row between a comparison and one of its products"""
    comparison = models.ForeignKey(Comparison, on_delete=models.CASCADE, related_name='entries')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='comparison_entries')

    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'comparison_products'
        ordering = ['added_at', 'id']
        unique_together = [['comparison', 'product']]
