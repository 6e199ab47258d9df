from decimal import Decimal

import pytest

from orders.services import change_payment_status, place_order
from users.models import User

pytestmark = pytest.mark.django_db


@pytest.fixture
def paid_order(customer, product, shipping_address):
    order = place_order(customer, [{'product_id': product.pk, 'quantity': 2}], shipping_address,
                        payment_method='cod')
    return change_payment_status(order, 'paid')


def test_dashboard_requires_admin(customer_client, anon_client):
    assert customer_client.get('/api/admin/dashboard/').status_code == 403
    assert anon_client.get('/api/admin/dashboard/').status_code == 401


def test_dashboard_overview(admin_client, paid_order, make_product):
    make_product(name='Almost gone', stock=1)

    body = admin_client.get('/api/admin/dashboard/').json()
    overview = body['overview']
    assert overview['total_orders'] == 1
    assert overview['today_orders'] == 1
    assert Decimal(overview['total_revenue']) == Decimal('220.00')
    assert Decimal(overview['monthly_revenue']) == Decimal('220.00')
    assert body['recent_orders'][0]['order_number'] == paid_order.order_number
    assert body['low_stock_products'][0]['name'] == 'Almost gone'


def test_user_search(admin_client, customer, other_customer):
    body = admin_client.get('/api/admin/users/', {'search': 'other@'}).json()
    assert [u['email'] for u in body['users']] == ['other@example.com']


def test_change_role(admin_client, customer):
    url = f'/api/admin/users/{customer.pk}/role/'
    assert admin_client.put(url, {'role': 'vendor'}, content_type='application/json').status_code == 200
    assert User.objects.get(pk=customer.pk).role == 'vendor'
    assert admin_client.put(url, {'role': 'king'}, content_type='application/json').status_code == 400


def test_order_list_status_filter(admin_client, paid_order):
    assert admin_client.get('/api/admin/orders/', {'status': 'pending'}).json()['total_orders'] == 1
    assert admin_client.get('/api/admin/orders/', {'status': 'shipped'}).json()['total_orders'] == 0


@pytest.mark.parametrize('period', ['day', 'week', 'month', 'year'])
def test_sales_analytics(admin_client, paid_order, period):
    body = admin_client.get('/api/admin/analytics/sales/', {'period': period}).json()
    assert body['period'] == period
    assert len(body['sales']) == 1
    assert body['sales'][0]['orders'] == 1
    assert Decimal(body['sales'][0]['revenue']) == Decimal('220.00')
