# promotions/services.py
"""
Coupon ledger.

``validate_coupon`` prices a coupon against an order amount without
touching it; ``commit_coupon`` consumes one use. Commit only runs inside
the transaction that persists the order using the coupon.
"""

import logging
from collections import namedtuple
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from core.api import save_form_fields
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import ZERO, to_money

from catalog.models import Product

from .models import Coupon, CouponUsage, TodaysDeal

logger = logging.getLogger(__name__)

CouponQuote = namedtuple('CouponQuote', ['coupon', 'discount_amount'])


def normalize_code(code):
    if code is not None and not isinstance(code, str):
        raise ValidationError('Coupon code must be a string')
    return (code or '').strip().upper()


def calculate_discount(coupon, order_amount):
    """
    Discount the coupon grants on ``order_amount``.

    Percentage coupons are capped at ``max_discount`` when one is set.
    Fixed coupons return their face value even when it exceeds the order
    amount; callers clamp.
    """
    order_amount = Decimal(order_amount)
    if coupon.discount_type == 'percentage':
        discount_amount = order_amount * coupon.discount_value / Decimal('100')
        if coupon.max_discount is not None:
            discount_amount = min(discount_amount, coupon.max_discount)
        return to_money(discount_amount)
    return to_money(coupon.discount_value)


def validate_coupon(code, order_amount, now=None, for_update=False):
    """
    Check ``code`` against ``order_amount`` at ``now``.

    Returns a CouponQuote or raises, in this order:
    NotFoundError(NotFound) for an unknown, inactive or out-of-window code,
    ConflictError(LimitExceeded) for an exhausted coupon and
    ConflictError(MinimumNotMet) when the order is below the minimum.

    ``for_update`` locks the coupon row for the rest of the transaction.
    """
    code = normalize_code(code)
    if not code:
        raise ValidationError('Coupon code is required')

    now = now or timezone.now()
    queryset = Coupon.objects.all()
    if for_update:
        queryset = queryset.select_for_update()

    coupon = queryset.filter(code__iexact=code).first()
    if coupon is None or not coupon.is_active or not (coupon.valid_from <= now <= coupon.valid_until):
        logger.warning(f"Coupon rejected: {code} not found or not usable")
        raise NotFoundError('Invalid or expired coupon', code='NotFound')

    if coupon.is_exhausted:
        logger.warning(f"Coupon rejected: {code} usage limit reached ({coupon.used_count}/{coupon.usage_limit})")
        raise ConflictError('Coupon usage limit exceeded', code='LimitExceeded')

    order_amount = to_money(order_amount)
    if order_amount < coupon.min_order_amount:
        logger.warning(f"Coupon rejected: {code} needs {coupon.min_order_amount}, order is {order_amount}")
        raise ConflictError(
            f"Minimum order amount of {coupon.min_order_amount} required",
            code='MinimumNotMet',
        )

    return CouponQuote(coupon, calculate_discount(coupon, order_amount))


def commit_coupon(coupon, order=None, user=None, discount_amount=ZERO):
    """
    Consume one use of ``coupon``.

    The increment is a single guarded UPDATE, so the usage limit holds even
    when two orders race for the last use. Raises ConflictError(LimitExceeded)
    when the guard fails.
    """
    updated = (
        Coupon.objects
        .filter(pk=coupon.pk)
        .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F('usage_limit')))
        .update(used_count=F('used_count') + 1)
    )
    if not updated:
        logger.warning(f"Coupon commit refused: {coupon.code} usage limit reached")
        raise ConflictError('Coupon usage limit exceeded', code='LimitExceeded')

    if order is not None:
        CouponUsage.objects.create(
            coupon          = coupon,
            order           = order,
            user            = user or order.user,
            discount_amount = discount_amount,
        )

    coupon.refresh_from_db(fields=['used_count'])
    logger.info(f"Coupon {coupon.code} committed ({coupon.used_count}/{coupon.usage_limit or 'unlimited'})")
    return coupon


# ─────────────────────────────────────────────────────────────
# TODAY'S DEALS
# ─────────────────────────────────────────────────────────────

def _check_deal_overlap(product, start_time, end_time, exclude_pk=None):
    overlapping = TodaysDeal.objects.filter(
        product=product,
        is_active=True,
        start_time__lte=end_time,
        end_time__gte=start_time,
    ).exclude(pk=exclude_pk)
    if overlapping.exists():
        raise ConflictError(
            'Product already has an active deal in this time period',
            code='DealOverlap',
        )


def sync_deal_flag(product_id):
    """Keep ``Product.is_todays_deal`` in line with the product's live deals."""
    has_deal = TodaysDeal.objects.filter(
        product_id=product_id,
        is_active=True,
        end_time__gte=timezone.now(),
    ).exists()
    Product.objects.filter(pk=product_id).update(is_todays_deal=has_deal)


@transaction.atomic
def save_deal(form, previous_product_id=None):
    """
    Create or update a deal from a valid DealForm.

    ``previous_product_id`` is the product the deal pointed at before the
    form was bound; its flag is resynced when the deal moves.
    """
    deal = form.instance
    data = form.cleaned_data
    if data.get('is_active', True):
        _check_deal_overlap(data['product'], data['start_time'], data['end_time'], exclude_pk=deal.pk)

    deal = save_form_fields(form)
    sync_deal_flag(deal.product_id)
    if previous_product_id and previous_product_id != deal.product_id:
        sync_deal_flag(previous_product_id)
    logger.info(f"Deal saved: {deal.product_id} -{deal.discount}% ({deal.start_time} - {deal.end_time})")
    return deal


@transaction.atomic
def delete_deal(deal):
    product_id = deal.product_id
    deal.delete()
    sync_deal_flag(product_id)
