# core/api.py
"""
Plumbing shared by every JSON endpoint: identity checks, body parsing,
pagination and the mapping from typed shop errors to HTTP responses.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from functools import wraps

from django.conf import settings
from django.core.paginator import Paginator
from django.db import DatabaseError
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .exceptions import (
    ShopError,
    ValidationError,
    NotFoundError,
    AuthenticationError,
    AuthorizationError,
    StorageError,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# RESPONSES
# ─────────────────────────────────────────────────────────────

def json_response(data, status=200):
    return JsonResponse(data, status=status, safe=False)


def error_response(error):
    return json_response(error.as_dict(), status=error.status_code)


def api_view(methods=('GET',)):
    """
    Wrap a function view as a JSON endpoint.

    Restricts the HTTP methods, exempts the view from CSRF and converts any
    ShopError (or storage failure) raised below it into a JSON response.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapped(request, *args, **kwargs):
            try:
                return view_func(request, *args, **kwargs)
            except ShopError as e:
                if e.status_code >= 500:
                    logger.error(f"{view_func.__name__}: {e.message}", exc_info=True)
                return error_response(e)
            except DatabaseError as e:
                logger.error(f"{view_func.__name__} storage failure: {type(e).__name__}: {e}", exc_info=True)
                return error_response(StorageError('The request could not be completed, please retry'))

        return csrf_exempt(require_http_methods(list(methods))(wrapped))
    return decorator


# ─────────────────────────────────────────────────────────────
# IDENTITY
# ─────────────────────────────────────────────────────────────

def is_admin(user):
    return user.is_authenticated and (user.is_superuser or user.role == 'admin')


def resolve_identity(request):
    """Resolve the caller to ``{'user_id', 'role'}`` or raise AuthenticationError."""
    user = request.user
    if not user.is_authenticated:
        raise AuthenticationError('Authentication required')
    if not user.is_active:
        raise AuthenticationError('Account is disabled')
    return {'user_id': user.id, 'role': 'admin' if is_admin(user) else user.role}


def require_admin(request):
    resolve_identity(request)
    if not is_admin(request.user):
        raise AuthorizationError('Access denied. Admin only.')


def require_owner_or_admin(request, owner_id):
    resolve_identity(request)
    if owner_id != request.user.id and not is_admin(request.user):
        raise AuthorizationError('Access denied')


def login_required_json(view_func):
    @wraps(view_func)
    def wrapped(request, *args, **kwargs):
        resolve_identity(request)
        return view_func(request, *args, **kwargs)
    return wrapped


def admin_required(view_func):
    @wraps(view_func)
    def wrapped(request, *args, **kwargs):
        require_admin(request)
        return view_func(request, *args, **kwargs)
    return wrapped


# ─────────────────────────────────────────────────────────────
# INPUT
# ─────────────────────────────────────────────────────────────

def read_json(request):
    """Decode the request body as a JSON object; empty bodies give {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
        raise ValidationError('Request body must be valid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def parse_int(value, default=None):
    if value in (None, ''):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_bool(value):
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def parse_decimal(value, default=None):
    if value in (None, ''):
        return default
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return default
    return number if number.is_finite() else default


def read_text(data, key):
    """Stripped string under ``key``; missing or null gives ''."""
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip()


def parse_id_list(value):
    """'1,2, 3' -> [1, 2, 3]; silently drops anything that is not an integer."""
    if not value:
        return []
    ids = []
    for part in str(value).split(','):
        number = parse_int(part.strip())
        if number is not None:
            ids.append(number)
    return ids


def form_error(form, message='Invalid data'):
    """Turn bound form errors into a ValidationError naming the first problem."""
    errors = {field: [str(e) for e in errs] for field, errs in form.errors.items()}
    first_field, first_errors = next(iter(errors.items()), (None, []))
    if first_field and first_errors:
        label = 'Request' if first_field == '__all__' else first_field
        message = f"{label}: {first_errors[0]}"
    return ValidationError(message, errors=errors)


def bind_partial(form_class, instance, data):
    """Bind a ModelForm for a partial update: missing keys keep the stored value."""
    fields = form_class._meta.fields
    merged = model_to_dict(instance, fields=fields)
    merged.update({k: v for k, v in data.items() if k in fields})
    return form_class(merged, instance=instance)


def bind_new(form_class, data):
    """Bind a ModelForm for a create: missing keys take the model's field defaults."""
    return bind_partial(form_class, form_class._meta.model(), data)


def save_form_fields(form):
    """
    Save an edit, writing only the columns the form owns.

    Counters maintained elsewhere (stock, sold and rating aggregates, coupon
    use) may have moved since the instance was loaded; a full-row save
    would write the stale values back.
    """
    obj = form.save(commit=False)
    if obj.pk is None:
        obj.save()
    else:
        columns = {f.name for f in obj._meta.concrete_fields}
        update_fields = [name for name in form.fields if name in columns]
        if 'updated_at' in columns:
            update_fields.append('updated_at')
        obj.save(update_fields=update_fields)
    form.save_m2m()
    return obj


def get_or_not_found(queryset, message, **lookup):
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise NotFoundError(message)
    return obj


# ─────────────────────────────────────────────────────────────
# PAGINATION
# ─────────────────────────────────────────────────────────────

def paginate(request, queryset, default_limit=None):
    """
    Paginate with ``page`` / ``limit`` query parameters.

    Returns ``(items, meta)`` where meta holds ``total_pages``,
    ``current_page`` and ``count``.
    """
    max_limit = getattr(settings, 'SHOP_MAX_PAGE_SIZE', 100)
    default_limit = default_limit or getattr(settings, 'SHOP_PAGE_SIZE', 12)
    limit = parse_int(request.GET.get('limit'), default_limit)
    limit = min(max(limit, 1), max_limit)

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(request.GET.get('page'))
    meta = {
        'total_pages':  paginator.num_pages,
        'current_page': page_obj.number,
        'count':        paginator.count,
    }
    return list(page_obj.object_list), meta
