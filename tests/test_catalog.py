from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib import admin
from django.utils import timezone

from catalog.admin import ProductAdmin
from catalog.forms import ProductForm
from catalog.models import Brand, Category, Product
from catalog.services import decrement_stock, get_product, increment_sold_count, update_rating_aggregate
from core.api import bind_partial, save_form_fields
from core.exceptions import ConflictError, NotFoundError
from orders.services import place_order
from promotions.models import TodaysDeal

pytestmark = pytest.mark.django_db


# ── Store operations ─────────────────────────────────────────

def test_get_product(product):
    assert get_product(product.pk) == product
    assert get_product(987654) is None


def test_stock_and_sold_count_move_separately(product):
    decrement_stock(product.pk, 2)
    product.refresh_from_db()
    assert (product.stock, product.sold_count) == (3, 0)

    increment_sold_count(product.pk, 2)
    product.refresh_from_db()
    assert (product.stock, product.sold_count) == (3, 2)


def test_increment_sold_count_unknown_product():
    with pytest.raises(NotFoundError):
        increment_sold_count(987654, 1)


def test_decrement_stock_refuses_to_go_negative(product):
    with pytest.raises(ConflictError) as exc:
        decrement_stock(product.pk, 6)
    assert exc.value.code == 'InsufficientStock'
    product.refresh_from_db()
    assert (product.stock, product.sold_count) == (5, 0)


def test_rating_aggregate_is_written_together(product):
    update_rating_aggregate(product.pk, Decimal('4.333'), 3)
    product.refresh_from_db()
    assert product.average_rating == Decimal('4.33')
    assert product.review_count == 3


# ── Products ─────────────────────────────────────────────────

def test_product_list_filters_and_sorts(anon_client, make_product):
    make_product(name='Cheap phone', price='50.00', is_featured=True)
    make_product(name='Mid phone', price='150.00')
    make_product(name='Dear phone', price='900.00', is_featured=True)
    make_product(name='Hidden phone', price='10.00', is_active=False)

    body = anon_client.get('/api/products/', {'sort': 'price_asc'}).json()
    assert [p['name'] for p in body['products']] == ['Cheap phone', 'Mid phone', 'Dear phone']
    assert body['total_products'] == 3

    body = anon_client.get('/api/products/', {'featured': 'true', 'max_price': '100'}).json()
    assert [p['name'] for p in body['products']] == ['Cheap phone']


def test_product_list_pagination(anon_client, make_product):
    for i in range(5):
        make_product(name=f'Item {i}')
    body = anon_client.get('/api/products/', {'limit': 2, 'page': 3}).json()
    assert body['total_pages'] == 3
    assert body['current_page'] == 3
    assert len(body['products']) == 1


def test_product_detail_hides_inactive_from_customers(anon_client, admin_client, make_product):
    hidden = make_product(is_active=False)
    assert anon_client.get(f'/api/products/{hidden.pk}/').status_code == 404
    assert admin_client.get(f'/api/products/{hidden.pk}/').status_code == 200


def test_admin_creates_product(admin_client, category, brand):
    response = admin_client.post('/api/products/', {
        'name':     'Yellow Phone X',
        'category': category.pk,
        'brand':    brand.pk,
        'price':    '499.00',
        'stock':    7,
        'tags':     ['phone', 'android'],
    }, content_type='application/json')

    assert response.status_code == 201
    product = Product.objects.get(name='Yellow Phone X')
    assert product.slug == 'yellow-phone-x'
    assert product.stock == 7
    assert product.is_active is True
    assert product.tags == ['phone', 'android']


def test_update_cannot_touch_stock_or_aggregates(admin_client, product):
    response = admin_client.put(f'/api/products/{product.pk}/', {
        'price':          '120.00',
        'stock':          999,
        'average_rating': '5.00',
    }, content_type='application/json')

    assert response.status_code == 200
    product.refresh_from_db()
    assert product.price == Decimal('120.00')
    assert product.stock == 5
    assert product.average_rating == Decimal('0.00')


def test_product_write_requires_admin(customer_client, anon_client, product):
    assert customer_client.delete(f'/api/products/{product.pk}/').status_code == 403
    assert anon_client.delete(f'/api/products/{product.pk}/').status_code == 401


def test_delete_is_soft(admin_client, product):
    assert admin_client.delete(f'/api/products/{product.pk}/').status_code == 200
    assert Product.objects.get(pk=product.pk).is_active is False


def test_related_products(anon_client, make_product):
    main = make_product(name='Main')
    sibling = make_product(name='Sibling')
    body = anon_client.get(f'/api/products/{main.pk}/related/').json()
    assert [p['id'] for p in body['products']] == [sibling.pk]


# ── Categories and brands ────────────────────────────────────

def test_category_tree(anon_client, category):
    Category.objects.create(name='Android', parent=category)
    body = anon_client.get('/api/categories/').json()
    assert len(body['categories']) == 1
    assert body['categories'][0]['children'][0]['name'] == 'Android'


def test_category_cannot_nest_under_itself(admin_client, category):
    child = Category.objects.create(name='Android', parent=category)
    response = admin_client.put(f'/api/categories/{category.pk}/', {'parent': child.pk},
                                content_type='application/json')
    assert response.status_code == 400


def test_brand_crud(admin_client, anon_client):
    response = admin_client.post('/api/brands/', {'name': 'Acme'}, content_type='application/json')
    assert response.status_code == 201
    brand = Brand.objects.get(name='Acme')
    assert brand.is_active is True

    assert admin_client.delete(f'/api/brands/{brand.pk}/').status_code == 200
    assert anon_client.get(f'/api/brands/{brand.pk}/').status_code == 404


# ── Today's deals ────────────────────────────────────────────

def _deal_payload(product, start, end, discount='20'):
    return {
        'product':    product.pk,
        'discount':   discount,
        'start_time': start.isoformat(),
        'end_time':   end.isoformat(),
    }


def test_deal_sets_and_clears_product_flag(admin_client, anon_client, product):
    now = timezone.now()
    response = admin_client.post('/api/deals/', _deal_payload(product, now - timedelta(hours=1), now + timedelta(hours=5)),
                                 content_type='application/json')
    assert response.status_code == 201
    assert Product.objects.get(pk=product.pk).is_todays_deal is True

    body = anon_client.get('/api/deals/today/').json()
    assert [d['product']['id'] for d in body['deals']] == [product.pk]

    deal = TodaysDeal.objects.get()
    assert admin_client.delete(f'/api/deals/{deal.pk}/').status_code == 200
    assert Product.objects.get(pk=product.pk).is_todays_deal is False


def test_overlapping_deal_is_rejected(admin_client, product):
    now = timezone.now()
    admin_client.post('/api/deals/', _deal_payload(product, now, now + timedelta(hours=5)),
                      content_type='application/json')
    response = admin_client.post('/api/deals/', _deal_payload(product, now + timedelta(hours=1), now + timedelta(hours=8)),
                                 content_type='application/json')
    assert response.status_code == 400
    assert response.json()['code'] == 'DealOverlap'


def test_deal_end_must_follow_start(admin_client, product):
    now = timezone.now()
    response = admin_client.post('/api/deals/', _deal_payload(product, now, now - timedelta(hours=1)),
                                 content_type='application/json')
    assert response.status_code == 400


# ── Edits keep store-owned counters ─────────────────────────

def test_stale_edit_keeps_stock_and_sold_count(customer, product, shipping_address):
    stale = Product.objects.get(pk=product.pk)
    place_order(
        user             = customer,
        items            = [{'product_id': product.pk, 'quantity': 2}],
        shipping_address = shipping_address,
        payment_method   = 'cod',
    )

    form = bind_partial(ProductForm, stale, {'price': '120.00'})
    assert form.is_valid(), form.errors
    save_form_fields(form)

    product.refresh_from_db()
    assert product.price == Decimal('120.00')
    assert (product.stock, product.sold_count) == (3, 2)


def test_stale_edit_keeps_rating_aggregate(product):
    stale = Product.objects.get(pk=product.pk)
    update_rating_aggregate(product.pk, Decimal('4.50'), 2)

    form = bind_partial(ProductForm, stale, {'name': 'Renamed'})
    assert form.is_valid(), form.errors
    save_form_fields(form)

    product.refresh_from_db()
    assert product.name == 'Renamed'
    assert (product.average_rating, product.review_count) == (Decimal('4.50'), 2)


def test_admin_change_keeps_stock(rf, admin_user, product):
    stale = Product.objects.get(pk=product.pk)
    decrement_stock(product.pk, 4)

    form = bind_partial(ProductForm, stale, {'is_featured': True})
    assert form.is_valid(), form.errors
    request = rf.post('/admin/')
    request.user = admin_user
    ProductAdmin(Product, admin.site).save_model(request, stale, form, change=True)

    product.refresh_from_db()
    assert product.is_featured is True
    assert product.stock == 1
