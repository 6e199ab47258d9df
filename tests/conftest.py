from datetime import timedelta
from decimal import Decimal

import pytest
from django.test import Client
from django.utils import timezone

from catalog.models import Brand, Category, Product
from promotions.models import Coupon
from users.models import User

SHIPPING_ADDRESS = {
    'full_name':     'Asha Menon',
    'phone':         '+919876543210',
    'address_line1': '12 MG Road',
    'city':          'Kochi',
    'state':         'Kerala',
    'postal_code':   '682001',
    'country':       'India',
}


def make_user(email, role='customer', password='secret123', **extra):
    return User.objects.create_user(
        username   = email.split('@')[0],
        email      = email,
        password   = password,
        first_name = extra.pop('first_name', 'Test'),
        last_name  = extra.pop('last_name', 'User'),
        role       = role,
        **extra,
    )


@pytest.fixture
def customer(db):
    return make_user('customer@example.com')


@pytest.fixture
def other_customer(db):
    return make_user('other@example.com')


@pytest.fixture
def admin_user(db):
    return make_user('admin@example.com', role='admin')


@pytest.fixture
def anon_client():
    return Client()


@pytest.fixture
def customer_client(customer):
    client = Client()
    client.force_login(customer)
    return client


@pytest.fixture
def other_client(other_customer):
    client = Client()
    client.force_login(other_customer)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = Client()
    client.force_login(admin_user)
    return client


@pytest.fixture
def category(db):
    return Category.objects.create(name='Phones')


@pytest.fixture
def brand(db):
    return Brand.objects.create(name='Yellow')


@pytest.fixture
def make_product(category, brand):
    def _make(name='Widget', price='100.00', stock=5, **extra):
        extra.setdefault('category', category)
        extra.setdefault('brand', brand)
        return Product.objects.create(
            name  = name,
            price = Decimal(price),
            stock = stock,
            **extra,
        )
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def make_coupon(db):
    def _make(code='SAVE10', discount_type='percentage', discount_value='10', **extra):
        now = timezone.now()
        extra.setdefault('valid_from', now - timedelta(days=1))
        extra.setdefault('valid_until', now + timedelta(days=1))
        for key in ('min_order_amount', 'max_discount'):
            if extra.get(key) is not None:
                extra[key] = Decimal(extra[key])
        return Coupon.objects.create(
            code           = code,
            discount_type  = discount_type,
            discount_value = Decimal(discount_value),
            **extra,
        )
    return _make


@pytest.fixture
def shipping_address():
    return dict(SHIPPING_ADDRESS)
