# search/views.py
import logging

from core.api import api_view, json_response, paginate, parse_bool, parse_decimal, parse_id_list
from catalog.queries import active_products, filter_products, sort_products
from catalog.serializers import serialize_product

logger = logging.getLogger(__name__)

# Short sort names accepted by the search box
SORT_ALIASES = {
    'name':   'name_asc',
    'rating': 'rating_desc',
    'latest': 'created_at_desc',
}


@api_view(['GET'])
def search(request):
    """Free-text product search with the usual listing filters"""
    query = request.GET.get('q', '').strip()

    products = filter_products(active_products(), request.GET)
    products = products.filter(category__is_active=True) if request.GET.get('category') else products
    products = products.filter(brand__is_active=True) if request.GET.get('brand') else products

    sort = request.GET.get('sort', '')
    products = sort_products(products, SORT_ALIASES.get(sort, sort))
    page, meta = paginate(request, products)

    if query:
        logger.debug(f"Search '{query}' matched {meta['count']} products")

    return json_response({
        'query':          query,
        'products':       [serialize_product(p) for p in page],
        **meta,
        'total_products': meta['count'],
    })


@api_view(['GET'])
def advanced_search(request):
    """
    Multi-value filters: comma-separated ``categories``, ``brands`` and
    ``ratings`` (minimum whole-star ratings), plus ``in_stock``.
    """
    products = active_products()

    category_ids = parse_id_list(request.GET.get('categories'))
    if category_ids:
        products = products.filter(category_id__in=category_ids)

    brand_ids = parse_id_list(request.GET.get('brands'))
    if brand_ids:
        products = products.filter(brand_id__in=brand_ids)

    ratings = [
        r for r in (parse_decimal(v.strip()) for v in request.GET.get('ratings', '').split(','))
        if r is not None
    ]
    if ratings:
        products = products.filter(average_rating__gte=min(ratings))

    if parse_bool(request.GET.get('in_stock', '')):
        products = products.filter(stock__gt=0)

    products = products.order_by('-average_rating', '-review_count', 'id')
    page, meta = paginate(request, products)

    return json_response({
        'products':       [serialize_product(p) for p in page],
        **meta,
        'total_products': meta['count'],
    })
