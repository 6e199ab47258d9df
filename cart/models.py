# cart/models.py
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from catalog.models import Product


class Cart(models.Model):
    """Shopping cart, one per user"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cart_carts'

    def __str__(self):
        return f"Cart of {self.user}"


class CartItem(models.Model):
    """Cart line; priced from the live product"""
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='cart_items')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cart_items'
        ordering = ['-created_at']
        unique_together = [['cart', 'product']]

    @property
    def line_total(self):
        return self.product.price * self.quantity
