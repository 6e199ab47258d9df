# catalog/views.py
import logging

from core.api import (
    api_view, json_response, read_json, form_error, bind_partial, bind_new, save_form_fields,
    get_or_not_found, paginate, require_admin, is_admin,
)
from reviews.serializers import serialize_review

from .forms import BrandForm, CategoryForm, ProductForm, ProductCreateForm
from .models import Brand, Category, Product
from .queries import active_products, filter_products, sort_products
from .serializers import serialize_brand, serialize_category, serialize_product

logger = logging.getLogger(__name__)

RELATED_PRODUCTS_LIMIT = 8
DETAIL_REVIEWS_LIMIT = 10


def _visible_products(request):
    if is_admin(request.user):
        return Product.objects.select_related('brand', 'category')
    return active_products()


# ─────────────────────────────────────────────────────────────
# PRODUCTS
# ─────────────────────────────────────────────────────────────

@api_view(['GET', 'POST'])
def product_list(request):
    if request.method == 'POST':
        return _product_create(request)

    products = filter_products(active_products(), request.GET)
    products = sort_products(products, request.GET.get('sort'))
    page, meta = paginate(request, products)

    return json_response({
        'products': [serialize_product(p) for p in page],
        **meta,
        'total_products': meta['count'],
    })


def _product_create(request):
    require_admin(request)
    form = bind_new(ProductCreateForm, read_json(request))
    if not form.is_valid():
        raise form_error(form)

    product = form.save()
    logger.info(f"Product created: {product.name} (id={product.id})")
    return json_response({
        'message': 'Product created successfully',
        'product': serialize_product(product, detail=True),
    }, status=201)


@api_view(['GET', 'PUT', 'DELETE'])
def product_detail(request, product_id):
    if request.method == 'GET':
        product = get_or_not_found(_visible_products(request), 'Product not found', pk=product_id)
        reviews = product.reviews.select_related('user').order_by('-created_at')[:DETAIL_REVIEWS_LIMIT]
        data = serialize_product(product, detail=True)
        data['reviews'] = [serialize_review(r) for r in reviews]
        return json_response({'product': data})

    require_admin(request)
    product = get_or_not_found(Product.objects.select_related('brand', 'category'), 'Product not found', pk=product_id)

    if request.method == 'DELETE':
        # Soft delete: orders keep pointing at the row
        product.is_active = False
        product.save(update_fields=['is_active', 'updated_at'])
        logger.info(f"Product deactivated: {product.name} (id={product.id})")
        return json_response({'message': 'Product deleted successfully'})

    form = bind_partial(ProductForm, product, read_json(request))
    if not form.is_valid():
        raise form_error(form)

    product = save_form_fields(form)
    return json_response({
        'message': 'Product updated successfully',
        'product': serialize_product(product, detail=True),
    })


@api_view(['GET'])
def product_related(request, product_id):
    product = get_or_not_found(active_products(), 'Product not found', pk=product_id)
    related = (
        active_products()
        .filter(category_id=product.category_id)
        .exclude(pk=product.pk)
        .order_by('-sold_count', '-created_at')[:RELATED_PRODUCTS_LIMIT]
    )
    return json_response({'products': [serialize_product(p) for p in related]})


# ─────────────────────────────────────────────────────────────
# CATEGORIES
# ─────────────────────────────────────────────────────────────

@api_view(['GET', 'POST'])
def category_list(request):
    if request.method == 'POST':
        require_admin(request)
        form = bind_new(CategoryForm, read_json(request))
        if not form.is_valid():
            raise form_error(form)
        category = form.save()
        logger.info(f"Category created: {category.name}")
        return json_response({
            'message':  'Category created successfully',
            'category': serialize_category(category),
        }, status=201)

    categories = list(Category.objects.filter(is_active=True))
    children_by_parent = {}
    for category in categories:
        children_by_parent.setdefault(category.parent_id, []).append(category)

    top_level = children_by_parent.get(None, [])
    return json_response({
        'categories': [serialize_category(c, children_by_parent.get(c.id, [])) for c in top_level],
    })


@api_view(['GET', 'PUT', 'DELETE'])
def category_detail(request, category_id):
    if request.method == 'GET':
        category = get_or_not_found(Category.objects.filter(is_active=True), 'Category not found', pk=category_id)
        children = category.children.filter(is_active=True)
        products = sort_products(active_products().filter(category=category), request.GET.get('sort'))
        page, meta = paginate(request, products)
        data = serialize_category(category, children)
        data['products'] = [serialize_product(p) for p in page]
        return json_response({'category': data, **meta})

    require_admin(request)
    category = get_or_not_found(Category.objects.all(), 'Category not found', pk=category_id)

    if request.method == 'DELETE':
        category.is_active = False
        category.save(update_fields=['is_active', 'updated_at'])
        return json_response({'message': 'Category deleted successfully'})

    form = bind_partial(CategoryForm, category, read_json(request))
    if not form.is_valid():
        raise form_error(form)
    category = save_form_fields(form)
    return json_response({
        'message':  'Category updated successfully',
        'category': serialize_category(category),
    })


# ─────────────────────────────────────────────────────────────
# BRANDS
# ─────────────────────────────────────────────────────────────

@api_view(['GET', 'POST'])
def brand_list(request):
    if request.method == 'POST':
        require_admin(request)
        form = bind_new(BrandForm, read_json(request))
        if not form.is_valid():
            raise form_error(form)
        brand = form.save()
        logger.info(f"Brand created: {brand.name}")
        return json_response({
            'message': 'Brand created successfully',
            'brand':   serialize_brand(brand),
        }, status=201)

    brands = Brand.objects.filter(is_active=True)
    return json_response({'brands': [serialize_brand(b) for b in brands]})


@api_view(['GET', 'PUT', 'DELETE'])
def brand_detail(request, brand_id):
    if request.method == 'GET':
        brand = get_or_not_found(Brand.objects.filter(is_active=True), 'Brand not found', pk=brand_id)
        products = sort_products(active_products().filter(brand=brand), request.GET.get('sort'))
        page, meta = paginate(request, products)
        data = serialize_brand(brand)
        data['products'] = [serialize_product(p) for p in page]
        return json_response({'brand': data, **meta})

    require_admin(request)
    brand = get_or_not_found(Brand.objects.all(), 'Brand not found', pk=brand_id)

    if request.method == 'DELETE':
        brand.is_active = False
        brand.save(update_fields=['is_active', 'updated_at'])
        return json_response({'message': 'Brand deleted successfully'})

    form = bind_partial(BrandForm, brand, read_json(request))
    if not form.is_valid():
        raise form_error(form)
    brand = save_form_fields(form)
    return json_response({
        'message': 'Brand updated successfully',
        'brand':   serialize_brand(brand),
    })
