# promotions/views.py
import logging

from django.utils import timezone

from core.api import (
    api_view, json_response, read_json, form_error, bind_partial, bind_new, save_form_fields,
    get_or_not_found, paginate, admin_required, login_required_json,
)
from core.exceptions import ValidationError
from core.money import safe_decimal

from .forms import CouponForm, DealForm
from .models import Coupon, TodaysDeal
from .serializers import serialize_coupon, serialize_deal
from .services import validate_coupon, save_deal, delete_deal

logger = logging.getLogger(__name__)


# ==================== COUPONS ====================

@api_view(['GET', 'POST'])
@admin_required
def coupon_list(request):
    """All coupons (admin) / create a coupon (admin)."""
    if request.method == 'POST':
        form = bind_new(CouponForm, read_json(request))
        if not form.is_valid():
            raise form_error(form)
        coupon = form.save()
        logger.info(f"Coupon created: {coupon.code}")
        return json_response({
            'message': 'Coupon created successfully',
            'coupon':  serialize_coupon(coupon, admin=True),
        }, status=201)

    page, meta = paginate(request, Coupon.objects.order_by('-created_at'))
    return json_response({'coupons': [serialize_coupon(c, admin=True) for c in page], **meta})


@api_view(['GET'])
def active_coupons(request):
    """Public list of coupons usable right now."""
    coupons = Coupon.objects.usable().order_by('-created_at')
    return json_response({'coupons': [serialize_coupon(c) for c in coupons]})


@api_view(['POST'])
@login_required_json
def coupon_validate(request):
    data = read_json(request)
    code = data.get('code')
    order_amount = safe_decimal(data.get('order_amount'), default='-1')
    if order_amount < 0:
        raise ValidationError('order_amount must be a non-negative number')

    quote = validate_coupon(code, order_amount)
    return json_response({
        'valid':           True,
        'coupon':          serialize_coupon(quote.coupon),
        'discount_amount': quote.discount_amount,
    })


@api_view(['PUT', 'DELETE'])
@admin_required
def coupon_detail(request, coupon_id):
    coupon = get_or_not_found(Coupon.objects.all(), 'Coupon not found', pk=coupon_id)

    if request.method == 'DELETE':
        coupon.delete()
        logger.info(f"Coupon deleted: {coupon.code}")
        return json_response({'message': 'Coupon deleted successfully'})

    form = bind_partial(CouponForm, coupon, read_json(request))
    if not form.is_valid():
        raise form_error(form)
    coupon = save_form_fields(form)
    return json_response({
        'message': 'Coupon updated successfully',
        'coupon':  serialize_coupon(coupon, admin=True),
    })


# ==================== TODAY'S DEALS ====================

@api_view(['GET'])
def todays_deals(request):
    now = timezone.now()
    deals = TodaysDeal.objects.filter(
        is_active=True,
        start_time__lte=now,
        end_time__gte=now,
        product__is_active=True,
    ).select_related('product').order_by('-created_at')
    return json_response({'deals': [serialize_deal(d) for d in deals]})


@api_view(['GET', 'POST'])
@admin_required
def deal_list(request):
    if request.method == 'POST':
        form = bind_new(DealForm, read_json(request))
        if not form.is_valid():
            raise form_error(form)
        deal = save_deal(form)
        return json_response({
            'message': 'Deal created successfully',
            'deal':    serialize_deal(deal),
        }, status=201)

    deals = TodaysDeal.objects.select_related('product').order_by('-created_at')
    page, meta = paginate(request, deals)
    return json_response({'deals': [serialize_deal(d) for d in page], **meta})


@api_view(['PUT', 'DELETE'])
@admin_required
def deal_detail(request, deal_id):
    deal = get_or_not_found(TodaysDeal.objects.select_related('product'), 'Deal not found', pk=deal_id)

    if request.method == 'DELETE':
        delete_deal(deal)
        return json_response({'message': 'Deal deleted successfully'})

    previous_product_id = deal.product_id
    form = bind_partial(DealForm, deal, read_json(request))
    if not form.is_valid():
        raise form_error(form)
    deal = save_deal(form, previous_product_id=previous_product_id)
    return json_response({
        'message': 'Deal updated successfully',
        'deal':    serialize_deal(deal),
    })
