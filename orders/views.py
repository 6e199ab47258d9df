# orders/views.py
from django.contrib.auth import get_user_model

from cart.models import CartItem
from core.api import (
    api_view, json_response, read_json, read_text, get_or_not_found, paginate,
    login_required_json, admin_required, require_owner_or_admin,
)
from core.exceptions import ValidationError

from .models import Order
from .serializers import serialize_order
from .services import place_order, change_status, change_payment_status, cancel_order

User = get_user_model()


def _orders():
    return Order.objects.select_related('coupon').prefetch_related('items')


def _cart_lines(user):
    items = CartItem.objects.filter(cart__user=user).order_by('created_at')
    return [{'product_id': item.product_id, 'quantity': item.quantity} for item in items]


# ─────────────────────────────────────────────────────────────
# CHECKOUT
# ─────────────────────────────────────────────────────────────

@api_view(['POST'])
@login_required_json
def create_order(request):
    data = read_json(request)
    user = User.objects.get(pk=request.user.pk)

    # Without explicit items the order is placed from the cart
    items = data.get('items')
    from_cart = items is None
    if from_cart:
        items = _cart_lines(user)
        if not items:
            raise ValidationError('Your cart is empty')

    order = place_order(
        user             = user,
        items            = items,
        shipping_address = data.get('shipping_address') or user.shipping_address,
        billing_address  = data.get('billing_address') or user.billing_address,
        payment_method   = read_text(data, 'payment_method'),
        coupon_code      = read_text(data, 'coupon_code') or None,
        notes            = read_text(data, 'notes'),
        clear_cart       = from_cart,
    )

    order = _orders().get(pk=order.pk)
    return json_response({
        'message': 'Order placed successfully',
        'order':   serialize_order(order),
    }, status=201)


# ─────────────────────────────────────────────────────────────
# ORDER MANAGEMENT
# ─────────────────────────────────────────────────────────────

@api_view(['GET'])
@login_required_json
def my_orders(request):
    orders = _orders().filter(user=request.user).order_by('-created_at')
    status_filter = request.GET.get('status')
    if status_filter and status_filter != 'all':
        orders = orders.filter(status=status_filter)

    page, meta = paginate(request, orders, default_limit=10)
    return json_response({
        'orders': [serialize_order(o) for o in page],
        **meta,
        'total_orders': meta['count'],
    })


@api_view(['GET'])
@login_required_json
def order_detail(request, order_id):
    order = get_or_not_found(_orders().prefetch_related('status_history'), 'Order not found', pk=order_id)
    require_owner_or_admin(request, order.user_id)
    return json_response({'order': serialize_order(order, with_history=True)})


@api_view(['PUT'])
@admin_required
def update_order_status(request, order_id):
    order = get_or_not_found(Order.objects.all(), 'Order not found', pk=order_id)
    data = read_json(request)
    new_status = data.get('status')
    if not new_status:
        raise ValidationError('status is required')

    order = change_status(order, new_status, changed_by=request.user, notes=read_text(data, 'notes'))
    if 'tracking_number' in data:
        order.tracking_number = str(data['tracking_number'] or '')
        order.save(update_fields=['tracking_number', 'updated_at'])

    return json_response({
        'message': 'Order status updated successfully',
        'order':   serialize_order(_orders().get(pk=order.pk)),
    })


@api_view(['PUT'])
@admin_required
def update_payment_status(request, order_id):
    order = get_or_not_found(Order.objects.all(), 'Order not found', pk=order_id)
    payment_status = read_json(request).get('payment_status')
    if not payment_status:
        raise ValidationError('payment_status is required')

    change_payment_status(order, payment_status)
    return json_response({
        'message': 'Payment status updated successfully',
        'order':   serialize_order(_orders().get(pk=order.pk)),
    })


@api_view(['POST'])
@login_required_json
def cancel(request, order_id):
    order = get_or_not_found(Order.objects.all(), 'Order not found', pk=order_id)
    order = cancel_order(order, request.user)
    return json_response({
        'message': 'Order cancelled',
        'order':   serialize_order(_orders().get(pk=order.pk)),
    })
