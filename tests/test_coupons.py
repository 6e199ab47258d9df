from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core.api import bind_partial, save_form_fields
from core.exceptions import ConflictError, NotFoundError, ValidationError
from promotions.forms import CouponForm
from promotions.models import Coupon
from promotions.services import calculate_discount, commit_coupon, validate_coupon

pytestmark = pytest.mark.django_db


# ── Discount math ────────────────────────────────────────────

def test_percentage_discount_is_capped_by_max_discount(make_coupon):
    coupon = make_coupon(discount_value='10', max_discount='15')
    assert calculate_discount(coupon, Decimal('200')) == Decimal('15.00')


def test_percentage_discount_below_cap(make_coupon):
    coupon = make_coupon(discount_value='10', max_discount='50')
    assert calculate_discount(coupon, Decimal('200')) == Decimal('20.00')


def test_percentage_discount_rounds_half_up(make_coupon):
    coupon = make_coupon(discount_value='12.5')
    assert calculate_discount(coupon, Decimal('0.20')) == Decimal('0.03')


def test_fixed_discount_returns_face_value(make_coupon):
    coupon = make_coupon(code='FLAT50', discount_type='fixed', discount_value='50')
    assert calculate_discount(coupon, Decimal('30')) == Decimal('50.00')


# ── Validation ───────────────────────────────────────────────

def test_validate_is_case_insensitive(make_coupon):
    make_coupon(code='SAVE10')
    quote = validate_coupon('  save10 ', Decimal('100'))
    assert quote.coupon.code == 'SAVE10'
    assert quote.discount_amount == Decimal('10.00')


def test_validate_does_not_consume_a_use(make_coupon):
    coupon = make_coupon(usage_limit=1)
    validate_coupon('SAVE10', Decimal('100'))
    validate_coupon('SAVE10', Decimal('100'))
    coupon.refresh_from_db()
    assert coupon.used_count == 0


def test_unknown_code_is_not_found():
    with pytest.raises(NotFoundError) as exc:
        validate_coupon('NOPE', Decimal('100'))
    assert exc.value.code == 'NotFound'


def test_blank_code_is_a_validation_error():
    with pytest.raises(ValidationError):
        validate_coupon('   ', Decimal('100'))


def test_inactive_coupon_is_not_found(make_coupon):
    make_coupon(is_active=False)
    with pytest.raises(NotFoundError):
        validate_coupon('SAVE10', Decimal('100'))


def test_expired_coupon_is_not_found(make_coupon):
    now = timezone.now()
    make_coupon(valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1))
    with pytest.raises(NotFoundError):
        validate_coupon('SAVE10', Decimal('100'))


def test_window_bounds_are_inclusive(make_coupon):
    now = timezone.now()
    make_coupon(valid_from=now, valid_until=now + timedelta(hours=1))
    assert validate_coupon('SAVE10', Decimal('100'), now=now).discount_amount == Decimal('10.00')


def test_exhausted_coupon_is_limit_exceeded(make_coupon):
    make_coupon(usage_limit=2, used_count=2)
    with pytest.raises(ConflictError) as exc:
        validate_coupon('SAVE10', Decimal('100'))
    assert exc.value.code == 'LimitExceeded'


def test_minimum_order_amount(make_coupon):
    make_coupon(min_order_amount='150')
    with pytest.raises(ConflictError) as exc:
        validate_coupon('SAVE10', Decimal('149.99'))
    assert exc.value.code == 'MinimumNotMet'
    assert validate_coupon('SAVE10', Decimal('150')).discount_amount == Decimal('15.00')


# ── Commit ───────────────────────────────────────────────────

def test_commit_increments_used_count(make_coupon):
    coupon = make_coupon(usage_limit=3)
    commit_coupon(coupon)
    commit_coupon(coupon)
    coupon.refresh_from_db()
    assert coupon.used_count == 2


def test_commit_refuses_past_the_limit(make_coupon):
    coupon = make_coupon(usage_limit=1)
    commit_coupon(coupon)
    with pytest.raises(ConflictError) as exc:
        commit_coupon(coupon)
    assert exc.value.code == 'LimitExceeded'
    assert Coupon.objects.get(pk=coupon.pk).used_count == 1


def test_commit_without_limit_never_refuses(make_coupon):
    coupon = make_coupon(usage_limit=None)
    for _ in range(5):
        commit_coupon(coupon)
    assert Coupon.objects.get(pk=coupon.pk).used_count == 5


def test_stale_edit_keeps_used_count(make_coupon):
    coupon = make_coupon(usage_limit=5)
    stale = Coupon.objects.get(pk=coupon.pk)
    commit_coupon(coupon)

    form = bind_partial(CouponForm, stale, {'description': 'Autumn sale'})
    assert form.is_valid(), form.errors
    save_form_fields(form)

    coupon.refresh_from_db()
    assert coupon.description == 'Autumn sale'
    assert coupon.used_count == 1


def test_admin_edit_endpoint_keeps_used_count(admin_client, make_coupon):
    coupon = make_coupon(usage_limit=5)
    commit_coupon(coupon)
    commit_coupon(coupon)

    response = admin_client.put(f'/api/coupons/{coupon.pk}/', {'usage_limit': 10},
                                content_type='application/json')

    assert response.status_code == 200
    coupon.refresh_from_db()
    assert (coupon.usage_limit, coupon.used_count) == (10, 2)


# ── HTTP ─────────────────────────────────────────────────────

def test_validate_endpoint(customer_client, make_coupon):
    make_coupon(discount_value='10', max_discount='15')
    response = customer_client.post(
        '/api/coupons/validate/',
        {'code': 'save10', 'order_amount': '200'},
        content_type='application/json',
    )
    assert response.status_code == 200
    assert Decimal(response.json()['discount_amount']) == Decimal('15.00')


def test_validate_endpoint_requires_login(anon_client, make_coupon):
    make_coupon()
    response = anon_client.post(
        '/api/coupons/validate/',
        {'code': 'SAVE10', 'order_amount': '200'},
        content_type='application/json',
    )
    assert response.status_code == 401


def test_validate_endpoint_unknown_code_is_404(customer_client):
    response = customer_client.post(
        '/api/coupons/validate/',
        {'code': 'MISSING', 'order_amount': '200'},
        content_type='application/json',
    )
    assert response.status_code == 404
    assert response.json()['code'] == 'NotFound'


@pytest.mark.parametrize('payload', [
    {'code': 123, 'order_amount': '200'},
    {'code': 'SAVE10', 'order_amount': 'NaN'},
    {'code': 'SAVE10', 'order_amount': 'Infinity'},
])
def test_validate_endpoint_rejects_malformed_input(customer_client, make_coupon, payload):
    make_coupon()
    response = customer_client.post('/api/coupons/validate/', payload, content_type='application/json')
    assert response.status_code == 400


def test_non_string_code_is_a_validation_error():
    with pytest.raises(ValidationError):
        validate_coupon(123, Decimal('100'))


def test_active_coupons_hides_exhausted(anon_client, make_coupon):
    make_coupon(code='LIVE')
    make_coupon(code='USEDUP', usage_limit=1, used_count=1)
    response = anon_client.get('/api/coupons/active/')
    codes = [c['code'] for c in response.json()['coupons']]
    assert codes == ['LIVE']


def test_admin_creates_coupon_with_uppercase_code(admin_client):
    now = timezone.now()
    response = admin_client.post('/api/coupons/', {
        'code':           'welcome5',
        'discount_type':  'fixed',
        'discount_value': '5.00',
        'valid_from':     now.isoformat(),
        'valid_until':    (now + timedelta(days=7)).isoformat(),
    }, content_type='application/json')
    assert response.status_code == 201
    assert Coupon.objects.get().code == 'WELCOME5'


def test_customer_cannot_create_coupon(customer_client):
    response = customer_client.post('/api/coupons/', {'code': 'X'}, content_type='application/json')
    assert response.status_code == 403
