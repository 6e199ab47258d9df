# core/money.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def safe_decimal(value, default='0.00'):
    """Safely convert a value to Decimal."""
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(default)
    # NaN and Infinity cannot be compared or priced
    return number if number.is_finite() else Decimal(default)


def to_money(value):
    """Quantize to 2 decimal places, half up."""
    return safe_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def tax_for(amount):
    rate = getattr(settings, 'SHOP_TAX_RATE', Decimal('0.10'))
    return to_money(safe_decimal(amount) * rate)


def shipping_for(amount):
    """Flat shipping charge; zero unless configured."""
    return to_money(getattr(settings, 'SHOP_SHIPPING_AMOUNT', ZERO))
