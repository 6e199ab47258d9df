# comparisons/views.py
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from catalog.models import Product
from catalog.serializers import serialize_product
from core.api import (
    api_view, json_response, read_json, read_text, get_or_not_found,
    login_required_json, require_owner_or_admin,
)
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

from .models import Comparison, ComparisonProduct


def _limits():
    return (
        getattr(settings, 'SHOP_COMPARISON_MIN_PRODUCTS', 2),
        getattr(settings, 'SHOP_COMPARISON_MAX_PRODUCTS', 4),
    )


def _comparisons():
    return Comparison.objects.prefetch_related('entries__product__brand', 'entries__product__category')


def serialize_comparison(comparison):
    return {
        'id':         comparison.id,
        'name':       comparison.name,
        'user_id':    comparison.user_id,
        'products':   [serialize_product(entry.product, detail=True) for entry in comparison.entries.all()],
        'created_at': comparison.created_at,
        'updated_at': comparison.updated_at,
    }


def _require_owner(request, comparison):
    if comparison.user_id != request.user.id:
        raise AuthorizationError('Access denied')


def _read_product_ids(data):
    product_ids = data.get('product_ids')
    if not isinstance(product_ids, list) or not all(
        isinstance(pid, int) and not isinstance(pid, bool) for pid in product_ids
    ):
        raise ValidationError('product_ids must be a list of product ids')
    return list(dict.fromkeys(product_ids))


@api_view(['GET', 'POST'])
@login_required_json
def comparison_list(request):
    if request.method == 'GET':
        comparisons = _comparisons().filter(user=request.user)
        return json_response({'comparisons': [serialize_comparison(c) for c in comparisons]})

    data = read_json(request)
    product_ids = _read_product_ids(data)
    min_products, max_products = _limits()
    if len(product_ids) < min_products:
        raise ValidationError(f"At least {min_products} products required for comparison")
    if len(product_ids) > max_products:
        raise ValidationError(f"Maximum {max_products} products allowed for comparison")

    products = {p.pk: p for p in Product.objects.filter(pk__in=product_ids, is_active=True)}
    if len(products) != len(product_ids):
        raise NotFoundError('One or more products not found', code='ProductNotFound', status_code=400)

    with transaction.atomic():
        comparison = Comparison.objects.create(
            user=request.user,
            name=read_text(data, 'name') or f"Comparison {timezone.now():%Y-%m-%d %H:%M}",
        )
        for product_id in product_ids:
            ComparisonProduct.objects.create(comparison=comparison, product=products[product_id])

    comparison = _comparisons().get(pk=comparison.pk)
    return json_response({'comparison': serialize_comparison(comparison)}, status=201)


@api_view(['GET', 'DELETE'])
@login_required_json
def comparison_detail(request, comparison_id):
    comparison = get_or_not_found(_comparisons(), 'Comparison not found', pk=comparison_id)
    require_owner_or_admin(request, comparison.user_id)

    if request.method == 'DELETE':
        comparison.delete()
        return json_response({'message': 'Comparison deleted successfully'})

    return json_response({'comparison': serialize_comparison(comparison)})


@api_view(['POST', 'DELETE'])
@login_required_json
def comparison_product(request, comparison_id, product_id):
    comparison = get_or_not_found(Comparison.objects.all(), 'Comparison not found', pk=comparison_id)
    _require_owner(request, comparison)

    if request.method == 'DELETE':
        comparison.entries.filter(product_id=product_id).delete()
    else:
        product = get_or_not_found(Product.objects.filter(is_active=True), 'Product not found', pk=product_id)
        _, max_products = _limits()
        with transaction.atomic():
            entries = comparison.entries.select_for_update()
            if entries.filter(product=product).exists():
                raise ConflictError('Product already in comparison', code='DuplicateProduct')
            if entries.count() >= max_products:
                raise ConflictError(f"Maximum {max_products} products allowed for comparison", code='LimitExceeded')
            ComparisonProduct.objects.create(comparison=comparison, product=product)

    comparison.save(update_fields=['updated_at'])
    comparison = _comparisons().get(pk=comparison.pk)
    return json_response({'comparison': serialize_comparison(comparison)})
