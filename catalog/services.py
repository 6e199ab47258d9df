# catalog/services.py
"""
Catalog store operations.

The only code paths allowed to write a product's stock, sold count and
rating aggregate. Each write is a single conditional UPDATE so the check
and the mutation happen in one statement at the database.
"""

import logging

from django.db.models import F

from core.exceptions import ConflictError, NotFoundError
from core.money import to_money

from .models import Product

logger = logging.getLogger(__name__)


def get_product(product_id):
    """Return the product or None."""
    return Product.objects.filter(pk=product_id).first()


def decrement_stock(product_id, quantity, product_name=None):
    """
    Take ``quantity`` units off the shelf.

    Raises ConflictError(InsufficientStock) when the product does not hold
    enough stock; nothing is written in that case.
    """
    updated = Product.objects.filter(pk=product_id, stock__gte=quantity).update(
        stock=F('stock') - quantity,
    )
    if not updated:
        name = product_name or product_id
        logger.warning(f"Insufficient stock for {name}: requested {quantity}")
        raise ConflictError(f"Insufficient stock for {name}", code='InsufficientStock')


def increment_sold_count(product_id, quantity):
    updated = Product.objects.filter(pk=product_id).update(sold_count=F('sold_count') + quantity)
    if not updated:
        raise NotFoundError('Product not found', code='ProductNotFound')


def update_rating_aggregate(product_id, average, count):
    """Overwrite both rating fields together."""
    Product.objects.filter(pk=product_id).update(
        average_rating=to_money(average),
        review_count=count,
    )
