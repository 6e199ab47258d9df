import logging

from django.contrib.auth import authenticate, login, logout, get_user_model

from core.api import (
    api_view, json_response, read_json, read_text, form_error, bind_partial,
    save_form_fields, login_required_json,
)
from core.exceptions import ValidationError, AuthenticationError

from .forms import RegisterForm, ProfileForm
from .serializers import serialize_user

logger = logging.getLogger(__name__)

User = get_user_model()


def _unique_username(email):
    # Generate unique username safely
    base_username = email.split('@')[0]
    username = base_username
    counter = 1
    while User.objects.filter(username=username).exists():
        username = f"{base_username}{counter}"
        counter += 1
    return username


# ==================== REGISTER ====================
@api_view(['POST'])
def register(request):
    form = RegisterForm(read_json(request))
    if not form.is_valid():
        raise form_error(form)

    email = form.cleaned_data['email']
    user = User.objects.create_user(
        username   = _unique_username(email),
        email      = email,
        password   = form.cleaned_data['password'],
        first_name = form.cleaned_data['first_name'],
        last_name  = form.cleaned_data['last_name'],
        phone      = form.cleaned_data.get('phone', ''),
        role       = 'customer',
    )
    login(request, user)
    logger.info(f"User registered: {user.email} (id={user.id})")

    return json_response({
        'message': 'User registered successfully',
        'user':    serialize_user(user, private=True),
    }, status=201)


# ==================== LOGIN ====================
@api_view(['POST'])
def user_login(request):
    data = read_json(request)
    email = read_text(data, 'email').lower()
    password = data.get('password') or ''
    if not isinstance(password, str):
        raise ValidationError('password must be a string')
    if not email or not password:
        raise ValidationError('Email and password are required')

    user_obj = User.objects.filter(email=email).first()
    user = None
    if user_obj is not None:
        user = authenticate(request, username=user_obj.username, password=password)

    if user is None:
        if user_obj is not None and not user_obj.is_active:
            raise AuthenticationError('Account is deactivated')
        raise AuthenticationError('Invalid credentials', code='InvalidCredentials')

    login(request, user)
    logger.info(f"User logged in: {user.email}")

    return json_response({
        'message': 'Login successful',
        'user':    serialize_user(user, private=True),
    })


# ==================== LOGOUT ====================
@api_view(['POST'])
def user_logout(request):
    logout(request)
    return json_response({'message': 'Logged out successfully'})


# ==================== PROFILE ====================
@api_view(['GET', 'PUT'])
@login_required_json
def me(request):
    user = User.objects.get(pk=request.user.pk)
    if request.method == 'GET':
        return json_response({'user': serialize_user(user, private=True)})

    form = bind_partial(ProfileForm, user, read_json(request))
    if not form.is_valid():
        raise form_error(form)

    user = save_form_fields(form)
    return json_response({
        'message': 'Profile updated successfully',
        'user':    serialize_user(user, private=True),
    })
