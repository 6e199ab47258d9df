# core/views.py
from django.conf import settings
from django.utils import timezone

from .api import api_view, json_response


@api_view(['GET'])
def api_root(request):
    return json_response({
        'message': f"Welcome to {settings.SHOP_NAME} E-Commerce API",
        'version': '1.0.0',
        'endpoints': {
            'health':      '/api/health/',
            'auth':        '/api/auth/',
            'products':    '/api/products/',
            'categories':  '/api/categories/',
            'brands':      '/api/brands/',
            'cart':        '/api/cart/',
            'wishlist':    '/api/wishlist/',
            'orders':      '/api/orders/',
            'admin':       '/api/admin/',
            'coupons':     '/api/coupons/',
            'deals':       '/api/deals/',
            'reviews':     '/api/reviews/',
            'search':      '/api/search/',
            'comparisons': '/api/comparisons/',
        },
    })


@api_view(['GET'])
def health(request):
    return json_response({
        'status':      'OK',
        'message':     f"{settings.SHOP_NAME} API is running",
        'timestamp':   timezone.now().isoformat(),
        'environment': 'development' if settings.DEBUG else 'production',
    })


def not_found(request, exception=None):
    return json_response({'message': 'Route not found'}, status=404)


def server_error(request):
    return json_response({'message': 'Something went wrong!'}, status=500)
