from decimal import Decimal

import pytest

from cart.models import CartItem
from wishlist.models import WishlistItem

pytestmark = pytest.mark.django_db


def _add(client, product, quantity=None):
    body = {} if quantity is None else {'quantity': quantity}
    return client.post(f'/api/cart/{product.pk}/', body, content_type='application/json')


# ── Cart ─────────────────────────────────────────────────────

def test_empty_cart(customer_client):
    response = customer_client.get('/api/cart/')
    assert response.status_code == 200
    body = response.json()
    assert body['items'] == []
    assert body['total_items'] == 0
    assert Decimal(body['total']) == Decimal('0.00')


def test_add_merges_quantities_and_totals(customer_client, make_product):
    product = make_product(price='100.00', stock=5)
    assert _add(customer_client, product).status_code == 201
    assert _add(customer_client, product, 2).status_code == 201

    body = customer_client.get('/api/cart/').json()
    assert len(body['items']) == 1
    assert body['total_items'] == 3
    assert Decimal(body['subtotal']) == Decimal('300.00')
    assert Decimal(body['tax']) == Decimal('30.00')
    assert Decimal(body['total']) == Decimal('330.00')


def test_add_beyond_stock(customer_client, product):
    _add(customer_client, product, 4)
    response = _add(customer_client, product, 2)
    assert response.status_code == 400
    assert response.json()['code'] == 'InsufficientStock'
    assert CartItem.objects.get().quantity == 4


def test_add_inactive_product(customer_client, make_product):
    hidden = make_product(is_active=False)
    assert _add(customer_client, hidden).status_code == 404


def test_set_quantity(customer_client, product):
    _add(customer_client, product, 1)
    url = f'/api/cart/{product.pk}/'

    assert customer_client.put(url, {'quantity': 5}, content_type='application/json').status_code == 200
    assert CartItem.objects.get().quantity == 5
    assert customer_client.put(url, {'quantity': 6}, content_type='application/json').status_code == 400
    assert customer_client.put(url, {'quantity': 0}, content_type='application/json').status_code == 400


def test_remove_and_clear(customer_client, make_product):
    a = make_product(name='A')
    b = make_product(name='B')
    _add(customer_client, a)
    _add(customer_client, b)

    assert customer_client.delete(f'/api/cart/{a.pk}/').status_code == 200
    assert customer_client.delete(f'/api/cart/{a.pk}/').status_code == 404
    assert customer_client.delete('/api/cart/').status_code == 200
    assert CartItem.objects.count() == 0


def test_cart_requires_login(anon_client):
    assert anon_client.get('/api/cart/').status_code == 401


# ── Wishlist ─────────────────────────────────────────────────

def test_wishlist_add_list_remove(customer_client, product):
    url = f'/api/wishlist/{product.pk}/'
    assert customer_client.post(url).status_code == 201

    body = customer_client.get('/api/wishlist/').json()
    assert body['count'] == 1
    assert body['items'][0]['product']['id'] == product.pk

    assert customer_client.delete(url).status_code == 200
    assert customer_client.delete(url).status_code == 404


def test_wishlist_rejects_duplicates(customer_client, product):
    url = f'/api/wishlist/{product.pk}/'
    customer_client.post(url)
    response = customer_client.post(url)
    assert response.status_code == 400
    assert response.json()['code'] == 'DuplicateWishlistItem'
    assert WishlistItem.objects.count() == 1


def test_wishlist_move_to_cart(customer_client, product):
    customer_client.post(f'/api/wishlist/{product.pk}/')
    response = customer_client.post(f'/api/wishlist/{product.pk}/move-to-cart/')
    assert response.status_code == 200
    assert WishlistItem.objects.count() == 0
    assert CartItem.objects.get().quantity == 1


def test_wishlists_are_per_user(customer_client, other_client, product):
    customer_client.post(f'/api/wishlist/{product.pk}/')
    assert other_client.get('/api/wishlist/').json()['count'] == 0
