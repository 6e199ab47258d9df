from promotions.serializers import serialize_coupon


def serialize_order_item(item):
    return {
        'id':           item.id,
        'product_id':   item.product_id,
        'product_name': item.product_name,
        'product_sku':  item.product_sku,
        'quantity':     item.quantity,
        'unit_price':   item.unit_price,
        'discount':     item.discount,
        'total_price':  item.total_price,
    }


def serialize_order(order, with_items=True, with_history=False):
    data = {
        'id':                 order.id,
        'order_number':       order.order_number,
        'user_id':            order.user_id,
        'status':             order.status,
        'total_amount':       order.total_amount,
        'discount_amount':    order.discount_amount,
        'shipping_amount':    order.shipping_amount,
        'tax_amount':         order.tax_amount,
        'final_amount':       order.final_amount,
        'payment_method':     order.payment_method,
        'payment_status':     order.payment_status,
        'shipping_address':   order.shipping_address,
        'billing_address':    order.billing_address,
        'tracking_number':    order.tracking_number,
        'estimated_delivery': order.estimated_delivery,
        'notes':              order.notes,
        'coupon':             serialize_coupon(order.coupon) if order.coupon_id else None,
        'created_at':         order.created_at,
        'confirmed_at':       order.confirmed_at,
        'shipped_at':         order.shipped_at,
        'delivered_at':       order.delivered_at,
        'paid_at':            order.paid_at,
    }
    if with_items:
        data['items'] = [serialize_order_item(item) for item in order.items.all()]
    if with_history:
        data['status_history'] = [
            {
                'from_status': h.from_status,
                'to_status':   h.to_status,
                'notes':       h.notes,
                'created_at':  h.created_at,
            }
            for h in order.status_history.all()
        ]
    return data
