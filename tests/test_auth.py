import pytest

from users.models import User

pytestmark = pytest.mark.django_db


def _register(client, **overrides):
    payload = {
        'first_name': 'Asha',
        'last_name':  'Menon',
        'email':      'Asha@Example.com',
        'password':   'secret123',
        **overrides,
    }
    return client.post('/api/auth/register/', payload, content_type='application/json')


def test_register_logs_in(anon_client):
    response = _register(anon_client)
    assert response.status_code == 201
    assert response.json()['user']['email'] == 'asha@example.com'
    assert User.objects.get().role == 'customer'
    assert anon_client.get('/api/auth/me/').status_code == 200


def test_register_duplicate_email(anon_client):
    _register(anon_client)
    response = _register(anon_client, email='asha@example.com')
    assert response.status_code == 400


def test_register_short_password(anon_client):
    assert _register(anon_client, password='123').status_code == 400


def test_login_and_logout(anon_client, customer):
    response = anon_client.post('/api/auth/login/', {'email': 'customer@example.com', 'password': 'secret123'},
                                content_type='application/json')
    assert response.status_code == 200

    anon_client.post('/api/auth/logout/')
    assert anon_client.get('/api/auth/me/').status_code == 401


def test_login_bad_password(anon_client, customer):
    response = anon_client.post('/api/auth/login/', {'email': 'customer@example.com', 'password': 'nope'},
                                content_type='application/json')
    assert response.status_code == 401
    assert response.json()['code'] == 'InvalidCredentials'


def test_update_profile_keeps_other_fields(customer_client, customer, shipping_address):
    response = customer_client.put('/api/auth/me/', {'phone': '+919812345678', 'shipping_address': shipping_address},
                                   content_type='application/json')
    assert response.status_code == 200

    customer.refresh_from_db()
    assert customer.phone == '+919812345678'
    assert customer.first_name == 'Test'
    assert customer.shipping_address['city'] == 'Kochi'


def test_malformed_json_is_a_bad_request(customer_client):
    response = customer_client.put('/api/auth/me/', 'not json', content_type='application/json')
    assert response.status_code == 400


def test_health_and_root(anon_client):
    assert anon_client.get('/api/health/').json()['status'] == 'OK'
    assert 'endpoints' in anon_client.get('/').json()


def test_method_not_allowed(anon_client):
    assert anon_client.delete('/api/health/').status_code == 405
