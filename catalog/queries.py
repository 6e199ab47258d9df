# catalog/queries.py
from django.db.models import Q

from core.api import parse_bool, parse_decimal, parse_int

from .models import Product

PRODUCT_SORTS = {
    'price_asc':       ['price'],
    'price_desc':      ['-price'],
    'name_asc':        ['name'],
    'name_desc':       ['-name'],
    'rating_desc':     ['-average_rating', '-review_count'],
    'created_at_desc': ['-created_at'],
    'popular':         ['-sold_count'],
}


def active_products():
    return Product.objects.filter(is_active=True).select_related('brand', 'category')


def text_query(term):
    """Match a free-text term against name, description and tags."""
    return (
        Q(name__icontains=term) |
        Q(description__icontains=term) |
        Q(short_description__icontains=term) |
        Q(tags__icontains=term)
    )


def filter_products(queryset, params):
    """Apply the listing filters found in ``params`` (a QueryDict)."""
    category = parse_int(params.get('category'))
    if category is not None:
        queryset = queryset.filter(category_id=category)

    brand = parse_int(params.get('brand'))
    if brand is not None:
        queryset = queryset.filter(brand_id=brand)

    min_price = parse_decimal(params.get('min_price'))
    if min_price is not None:
        queryset = queryset.filter(price__gte=min_price)

    max_price = parse_decimal(params.get('max_price'))
    if max_price is not None:
        queryset = queryset.filter(price__lte=max_price)

    # Flags only narrow when explicitly true
    flags = {
        'featured':     'is_featured',
        'best_selling': 'is_best_selling',
        'new_arrivals': 'is_new',
        'todays_deal':  'is_todays_deal',
    }
    for param, field in flags.items():
        if parse_bool(params.get(param, '')):
            queryset = queryset.filter(**{field: True})

    search = (params.get('search') or params.get('q') or '').strip()
    if search:
        queryset = queryset.filter(text_query(search))

    return queryset


def sort_products(queryset, sort, default='created_at_desc'):
    ordering = PRODUCT_SORTS.get(sort) or PRODUCT_SORTS[default]
    return queryset.order_by(*ordering, 'id')
