# orders/services.py
"""
Order pipeline.

``place_order`` prices a list of (product, quantity) lines, applies an
optional coupon and persists the order, its items, the stock and sold
count moves and the coupon use as one transaction. Either all of it is
written or none of it.
"""

import logging
import random
import string

from django.db import DatabaseError, transaction
from django.utils import timezone

from cart.models import CartItem
from catalog.models import Product
from catalog.services import decrement_stock, increment_sold_count
from core.exceptions import (
    ShopError,
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthorizationError,
    StorageError,
)
from core.money import ZERO, to_money, tax_for, shipping_for
from promotions.services import validate_coupon, commit_coupon

from .models import Order, OrderItem, OrderStatusHistory

logger = logging.getLogger(__name__)

REQUIRED_ADDRESS_FIELDS = ('full_name', 'address_line1', 'city', 'country')

# Allowed status moves; cancelled and refunded are terminal
STATUS_TRANSITIONS = {
    'pending':    {'confirmed', 'cancelled'},
    'confirmed':  {'processing', 'cancelled', 'refunded'},
    'processing': {'shipped', 'cancelled', 'refunded'},
    'shipped':    {'delivered', 'cancelled', 'refunded'},
    'delivered':  {'refunded'},
    'cancelled':  set(),
    'refunded':   set(),
}

STATUS_TIMESTAMPS = {
    'confirmed': 'confirmed_at',
    'shipped':   'shipped_at',
    'delivered': 'delivered_at',
}


# ─────────────────────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────────────────────

def generate_order_number():
    timestamp  = timezone.now().strftime('%Y%m%d%H%M%S')
    random_str = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"ORD-{timestamp}-{random_str}"


def unique_order_number():
    order_number = generate_order_number()
    while Order.objects.filter(order_number=order_number).exists():
        order_number = generate_order_number()
    return order_number


def _parse_quantity(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def normalize_items(items):
    """
    Validate ``[{'product_id', 'quantity'}, ...]`` and merge repeated products.

    Returns a list of ``(product_id, quantity)`` in first-seen order.
    """
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError('Order must contain at least one item')

    merged = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")

        product_id = _parse_quantity(item.get('product_id'))
        if product_id is None:
            raise ValidationError(f"items[{index}].product_id is required")

        quantity = _parse_quantity(item.get('quantity'))
        if quantity is None or quantity < 1:
            raise ValidationError(f"items[{index}].quantity must be an integer of at least 1")

        merged[product_id] = merged.get(product_id, 0) + quantity

    return list(merged.items())


def clean_address(address, label):
    """Snapshot an address dict, requiring the fields a parcel needs."""
    if not isinstance(address, dict):
        raise ValidationError(f"{label} is required")

    snapshot = {}
    for key, value in address.items():
        snapshot[str(key)] = value.strip() if isinstance(value, str) else value

    missing = [f for f in REQUIRED_ADDRESS_FIELDS if not snapshot.get(f)]
    if missing:
        raise ValidationError(f"{label} is missing: {', '.join(missing)}")
    return snapshot


def _lock_products(product_ids):
    """Lock the rows in id order so concurrent orders never deadlock."""
    products = Product.objects.select_for_update().filter(pk__in=sorted(product_ids)).order_by('pk')
    return {product.pk: product for product in products}


def _quote_coupon(coupon_code, total_amount):
    try:
        quote = validate_coupon(coupon_code, total_amount, for_update=True)
    except NotFoundError as e:
        # At checkout an unusable code is a bad request, not a missing route
        raise NotFoundError(e.message, code=e.code, status_code=400) from e
    return quote.coupon, min(quote.discount_amount, total_amount)


# ─────────────────────────────────────────────────────────────
# PLACE ORDER
# ─────────────────────────────────────────────────────────────

def place_order(user, items, shipping_address, billing_address=None, payment_method='',
                coupon_code=None, notes='', clear_cart=False):
    """
    Price and persist an order for ``user``.

    Raises ValidationError for malformed input, NotFoundError(ProductNotFound)
    for an unknown or inactive product, ConflictError(InsufficientStock) when
    a product cannot cover its quantity, the coupon ledger's rejections when
    ``coupon_code`` is unusable and StorageError when the database fails.
    Nothing is written unless the order is.
    """
    lines = normalize_items(items)
    shipping_snapshot = clean_address(shipping_address, 'shipping_address')
    if billing_address:
        billing_snapshot = clean_address(billing_address, 'billing_address')
    else:
        billing_snapshot = dict(shipping_snapshot)

    valid_methods = dict(Order.PAYMENT_METHODS)
    if not isinstance(payment_method, str) or payment_method not in valid_methods:
        raise ValidationError(f"payment_method must be one of: {', '.join(valid_methods)}")

    try:
        with transaction.atomic():
            products = _lock_products(pid for pid, _ in lines)

            # ── Re-validate against the locked rows ──────────────
            priced = []
            total_amount = ZERO
            for product_id, quantity in lines:
                product = products.get(product_id)
                if product is None or not product.is_active:
                    logger.warning(f"Order rejected for user {user.pk}: product {product_id} not found")
                    raise NotFoundError(
                        f"Product {product_id} not found",
                        code='ProductNotFound',
                        status_code=400,
                    )
                if product.stock < quantity:
                    logger.warning(f"Order rejected for user {user.pk}: {product.name} has {product.stock}, wanted {quantity}")
                    raise ConflictError(f"Insufficient stock for {product.name}", code='InsufficientStock')
                priced.append((product, quantity))
                total_amount += product.price * quantity
            total_amount = to_money(total_amount)

            # ── Coupon ──────────────────────────────────────────
            coupon = None
            discount_amount = ZERO
            if coupon_code:
                coupon, discount_amount = _quote_coupon(coupon_code, total_amount)

            # ── Totals ──────────────────────────────────────────
            tax_amount = tax_for(total_amount)
            shipping_amount = shipping_for(total_amount)
            final_amount = to_money(total_amount - discount_amount + shipping_amount + tax_amount)

            # ── Persist ─────────────────────────────────────────
            order = Order.objects.create(
                order_number     = unique_order_number(),
                user             = user,
                status           = 'pending',
                total_amount     = total_amount,
                discount_amount  = discount_amount,
                shipping_amount  = shipping_amount,
                tax_amount       = tax_amount,
                final_amount     = final_amount,
                coupon           = coupon,
                shipping_address = shipping_snapshot,
                billing_address  = billing_snapshot,
                payment_method   = payment_method,
                payment_status   = 'pending',
                notes            = notes or '',
            )

            for product, quantity in priced:
                OrderItem.objects.create(
                    order        = order,
                    product      = product,
                    product_name = product.name,
                    product_sku  = product.sku or '',
                    quantity     = quantity,
                    unit_price   = product.price,
                )
                decrement_stock(product.pk, quantity, product_name=product.name)
                increment_sold_count(product.pk, quantity)

            if coupon is not None:
                commit_coupon(coupon, order=order, user=user, discount_amount=discount_amount)

            OrderStatusHistory.objects.create(
                order      = order,
                to_status  = 'pending',
                notes      = 'Order created',
                changed_by = user,
            )

            if clear_cart:
                CartItem.objects.filter(cart__user=user).delete()

    except ShopError:
        raise
    except DatabaseError as e:
        logger.error(f"place_order storage failure for user {user.pk}: {type(e).__name__}: {e}", exc_info=True)
        raise StorageError('Order could not be saved, please retry') from e

    logger.info(
        f"Order {order.order_number} created for {user.email}: "
        f"total={total_amount} discount={discount_amount} tax={tax_amount} final={final_amount}"
    )
    return order


# ─────────────────────────────────────────────────────────────
# STATUS
# ─────────────────────────────────────────────────────────────

def change_status(order, new_status, changed_by=None, notes=''):
    """Move ``order`` to ``new_status`` if the transition is allowed."""
    if not isinstance(new_status, str) or new_status not in STATUS_TRANSITIONS:
        raise ValidationError(f"Invalid status: {new_status}")

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        old_status = locked.status
        if new_status not in STATUS_TRANSITIONS[old_status]:
            logger.warning(f"Order {locked.order_number}: refused {old_status} -> {new_status}")
            raise ConflictError(
                f"Cannot change order status from {old_status} to {new_status}",
                code='InvalidTransition',
            )

        locked.status = new_status
        update_fields = ['status', 'updated_at']
        timestamp_field = STATUS_TIMESTAMPS.get(new_status)
        if timestamp_field:
            setattr(locked, timestamp_field, timezone.now())
            update_fields.append(timestamp_field)
        locked.save(update_fields=update_fields)

        OrderStatusHistory.objects.create(
            order       = locked,
            from_status = old_status,
            to_status   = new_status,
            notes       = notes or '',
            changed_by  = changed_by,
        )

    logger.info(f"Order {locked.order_number} status changed: {old_status} -> {new_status}")
    return locked


def cancel_order(order, user):
    """Customer cancellation, allowed while the order is pending or confirmed."""
    if order.user_id != user.pk:
        raise AuthorizationError('Access denied')
    if not order.can_be_cancelled:
        raise ConflictError('This order cannot be cancelled', code='InvalidTransition')
    return change_status(order, 'cancelled', changed_by=user, notes='Cancelled by customer')


def change_payment_status(order, payment_status):
    if not isinstance(payment_status, str) or payment_status not in dict(Order.PAYMENT_STATUS):
        raise ValidationError(f"Invalid payment status: {payment_status}")

    order.payment_status = payment_status
    update_fields = ['payment_status', 'updated_at']
    if payment_status == 'paid' and order.paid_at is None:
        order.paid_at = timezone.now()
        update_fields.append('paid_at')
    order.save(update_fields=update_fields)

    logger.info(f"Order {order.order_number} payment status: {payment_status}")
    return order
