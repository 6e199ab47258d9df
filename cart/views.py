# cart/views.py
from decimal import Decimal

from django.db import transaction

from catalog.services import get_product
from catalog.serializers import serialize_product_summary
from core.api import api_view, json_response, read_json, login_required_json
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import to_money, tax_for, shipping_for

from .models import Cart, CartItem


# ============================================
# HELPER FUNCTIONS
# ============================================

def get_or_create_cart(user):
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def get_cart_totals(items):
    """Totals for a list of cart items; total_items counts quantity"""
    subtotal = to_money(sum((item.line_total for item in items), Decimal('0.00')))
    tax = tax_for(subtotal)
    shipping = shipping_for(subtotal)
    return {
        'subtotal':    subtotal,
        'total_items': sum(item.quantity for item in items),
        'shipping':    shipping,
        'tax':         tax,
        'total':       to_money(subtotal + shipping + tax),
    }


def serialize_cart_item(item):
    return {
        'id':         item.id,
        'product':    serialize_product_summary(item.product),
        'quantity':   item.quantity,
        'line_total': to_money(item.line_total),
        'created_at': item.created_at,
    }


def _read_quantity(data, default=None):
    quantity = data.get('quantity', default)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError('Quantity must be at least 1')
    return quantity


def _active_product(product_id):
    product = get_product(product_id)
    if product is None or not product.is_active:
        raise NotFoundError('Product not found')
    return product


# ============================================
# VIEWS
# ============================================

@api_view(['GET', 'DELETE'])
@login_required_json
def cart_view(request):
    cart = get_or_create_cart(request.user)

    if request.method == 'DELETE':
        cart.items.all().delete()
        return json_response({'message': 'Cart cleared'})

    items = list(cart.items.select_related('product').order_by('-created_at'))
    return json_response({
        'items': [serialize_cart_item(item) for item in items],
        **get_cart_totals(items),
    })


@api_view(['POST', 'PUT', 'DELETE'])
@login_required_json
def cart_item(request, product_id):
    cart = get_or_create_cart(request.user)

    if request.method == 'DELETE':
        deleted, _ = cart.items.filter(product_id=product_id).delete()
        if not deleted:
            raise NotFoundError('Cart item not found')
        return json_response({'message': 'Item removed from cart'})

    data = read_json(request)
    product = _active_product(product_id)

    if request.method == 'POST':
        quantity = _read_quantity(data, default=1)
        with transaction.atomic():
            item = cart.items.select_for_update().filter(product=product).first()
            new_quantity = quantity + (item.quantity if item else 0)
            if product.stock < new_quantity:
                raise ConflictError(f"Insufficient stock for {product.name}", code='InsufficientStock')
            if item:
                item.quantity = new_quantity
                item.save(update_fields=['quantity', 'updated_at'])
            else:
                item = CartItem.objects.create(cart=cart, product=product, quantity=quantity)
        return json_response({'message': 'Added to cart', 'item': serialize_cart_item(item)}, status=201)

    quantity = _read_quantity(data)
    if product.stock < quantity:
        raise ConflictError(f"Insufficient stock for {product.name}", code='InsufficientStock')
    item = cart.items.filter(product=product).first()
    if item is None:
        raise NotFoundError('Cart item not found')
    item.quantity = quantity
    item.save(update_fields=['quantity', 'updated_at'])
    return json_response({'message': 'Cart updated', 'item': serialize_cart_item(item)})
