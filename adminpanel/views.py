# adminpanel/views.py
import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDay, TruncMonth, TruncWeek, TruncYear
from django.utils import timezone

from catalog.models import Product
from catalog.serializers import serialize_product_summary
from core.api import admin_required, api_view, get_or_not_found, json_response, paginate, read_json
from core.exceptions import ValidationError
from core.money import ZERO
from orders.models import Order
from orders.serializers import serialize_order
from users.models import User
from users.serializers import serialize_user

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 10
LOW_STOCK_LIMIT = 10

SALES_PERIODS = {
    'day':   (TruncDay, '%Y-%m-%d'),
    'week':  (TruncWeek, '%Y-%W'),
    'month': (TruncMonth, '%Y-%m'),
    'year':  (TruncYear, '%Y'),
}


def _revenue(orders):
    return orders.filter(payment_status='paid').aggregate(total=Sum('final_amount'))['total'] or ZERO


def _with_customer(order):
    data = serialize_order(order, with_items=False)
    data['customer'] = serialize_user(order.user, private=True) if order.user_id else None
    return data


# ==================== DASHBOARD ====================

@api_view(['GET'])
@admin_required
def dashboard(request):
    """Store-wide totals, today's and this month's figures, recent orders, low stock"""
    now = timezone.localtime()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_of_month = start_of_day.replace(day=1)
    threshold = getattr(settings, 'SHOP_LOW_STOCK_THRESHOLD', 10)

    orders = Order.objects.all()
    today_orders = orders.filter(created_at__gte=start_of_day)
    monthly_orders = orders.filter(created_at__gte=start_of_month)

    overview = {
        'total_users':     User.objects.count(),
        'total_products':  Product.objects.count(),
        'total_orders':    orders.count(),
        'total_revenue':   _revenue(orders),
        'today_orders':    today_orders.count(),
        'today_revenue':   _revenue(today_orders),
        'monthly_orders':  monthly_orders.count(),
        'monthly_revenue': _revenue(monthly_orders),
    }

    recent_orders = orders.select_related('user', 'coupon').order_by('-created_at')[:RECENT_ORDERS_LIMIT]
    low_stock = (
        Product.objects.filter(stock__lte=threshold)
        .select_related('brand', 'category')
        .order_by('stock', 'id')[:LOW_STOCK_LIMIT]
    )

    return json_response({
        'overview':           overview,
        'recent_orders':      [_with_customer(o) for o in recent_orders],
        'low_stock_products': [serialize_product_summary(p) for p in low_stock],
    })


# ==================== USERS ====================

@api_view(['GET'])
@admin_required
def user_list(request):
    users = User.objects.order_by('-created_at', '-id')

    search = request.GET.get('search', '').strip()
    if search:
        users = users.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(email__icontains=search)
        )

    page, meta = paginate(request, users, default_limit=10)
    return json_response({
        'users':       [serialize_user(u, private=True) for u in page],
        **meta,
        'total_users': meta['count'],
    })


@api_view(['PUT'])
@admin_required
def user_role(request, user_id):
    user = get_or_not_found(User.objects.all(), 'User not found', pk=user_id)

    role = read_json(request).get('role')
    if not isinstance(role, str) or role not in dict(User.ROLES):
        raise ValidationError(f"role must be one of: {', '.join(dict(User.ROLES))}")

    user.role = role
    user.save(update_fields=['role', 'updated_at'])
    logger.info(f"User {user.email} role set to {role} by {request.user.email}")
    return json_response({'user': serialize_user(user, private=True)})


# ==================== ORDERS ====================

@api_view(['GET'])
@admin_required
def order_list(request):
    orders = Order.objects.select_related('user', 'coupon').order_by('-created_at', '-id')

    status = request.GET.get('status', '').strip()
    if status:
        orders = orders.filter(status=status)

    page, meta = paginate(request, orders, default_limit=10)
    return json_response({
        'orders':       [_with_customer(o) for o in page],
        **meta,
        'total_orders': meta['count'],
    })


# ==================== ANALYTICS ====================

@api_view(['GET'])
@admin_required
def sales_analytics(request):
    """Paid orders over the last year grouped by day, week, month or year"""
    period = request.GET.get('period', 'month')
    if period not in SALES_PERIODS:
        period = 'month'
    trunc, label_format = SALES_PERIODS[period]

    since = timezone.now() - timedelta(days=365)
    rows = (
        Order.objects.filter(payment_status='paid', created_at__gte=since)
        .annotate(bucket=trunc('created_at'))
        .values('bucket')
        .annotate(orders=Count('id'), revenue=Sum('final_amount'))
        .order_by('bucket')
    )

    sales = [
        {
            'period':  row['bucket'].strftime(label_format),
            'orders':  row['orders'],
            'revenue': row['revenue'] or ZERO,
        }
        for row in rows
    ]
    return json_response({'period': period, 'sales': sales})
