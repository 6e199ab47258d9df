from catalog.serializers import serialize_product_summary


def serialize_coupon(coupon, admin=False):
    data = {
        'id':               coupon.id,
        'code':             coupon.code,
        'description':      coupon.description,
        'discount_type':    coupon.discount_type,
        'discount_value':   coupon.discount_value,
        'min_order_amount': coupon.min_order_amount,
        'max_discount':     coupon.max_discount,
        'valid_from':       coupon.valid_from,
        'valid_until':      coupon.valid_until,
    }
    if admin:
        data.update({
            'usage_limit': coupon.usage_limit,
            'used_count':  coupon.used_count,
            'is_active':   coupon.is_active,
            'created_at':  coupon.created_at,
        })
    return data


def serialize_deal(deal):
    return {
        'id':         deal.id,
        'discount':   deal.discount,
        'start_time': deal.start_time,
        'end_time':   deal.end_time,
        'is_active':  deal.is_active,
        'product':    serialize_product_summary(deal.product),
    }
