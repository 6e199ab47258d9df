import pytest

from comparisons.models import Comparison, ComparisonProduct

pytestmark = pytest.mark.django_db


@pytest.fixture
def products(make_product):
    return [make_product(name=f'Phone {i}') for i in range(5)]


def _create(client, product_ids, **extra):
    return client.post('/api/comparisons/', {'product_ids': product_ids, **extra},
                       content_type='application/json')


def test_create_and_list(customer_client, products):
    response = _create(customer_client, [products[0].pk, products[1].pk], name='Flagships')
    assert response.status_code == 201
    comparison = response.json()['comparison']
    assert comparison['name'] == 'Flagships'
    assert [p['id'] for p in comparison['products']] == [products[0].pk, products[1].pk]

    body = customer_client.get('/api/comparisons/').json()
    assert len(body['comparisons']) == 1


def test_default_name(customer_client, products):
    response = _create(customer_client, [products[0].pk, products[1].pk])
    assert response.json()['comparison']['name'].startswith('Comparison ')


@pytest.mark.parametrize('count', [1, 5])
def test_product_count_bounds(customer_client, products, count):
    response = _create(customer_client, [p.pk for p in products[:count]])
    assert response.status_code == 400
    assert Comparison.objects.count() == 0


def test_inactive_product_is_rejected(customer_client, make_product, products):
    hidden = make_product(name='Hidden', is_active=False)
    response = _create(customer_client, [products[0].pk, hidden.pk])
    assert response.status_code == 400


def test_add_and_remove_product(customer_client, products):
    comparison_id = _create(customer_client, [products[0].pk, products[1].pk]).json()['comparison']['id']
    url = f'/api/comparisons/{comparison_id}/products/{products[2].pk}/'

    assert customer_client.post(url).status_code == 200
    duplicate = customer_client.post(url)
    assert duplicate.status_code == 400
    assert duplicate.json()['message'] == 'Product already in comparison'

    assert customer_client.delete(url).status_code == 200
    assert ComparisonProduct.objects.filter(comparison_id=comparison_id).count() == 2


def test_add_beyond_maximum(customer_client, products):
    comparison_id = _create(customer_client, [p.pk for p in products[:4]]).json()['comparison']['id']
    response = customer_client.post(f'/api/comparisons/{comparison_id}/products/{products[4].pk}/')
    assert response.status_code == 400


def test_access_rules(customer_client, other_client, admin_client, products):
    comparison_id = _create(customer_client, [products[0].pk, products[1].pk]).json()['comparison']['id']

    assert other_client.get(f'/api/comparisons/{comparison_id}/').status_code == 403
    assert other_client.post(f'/api/comparisons/{comparison_id}/products/{products[2].pk}/').status_code == 403
    assert admin_client.get(f'/api/comparisons/{comparison_id}/').status_code == 200
    assert admin_client.delete(f'/api/comparisons/{comparison_id}/').status_code == 200
    assert customer_client.get(f'/api/comparisons/{comparison_id}/').status_code == 404
