from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from catalog.urls import product_urls, category_urls, brand_urls
from core import views as core_views
from promotions.urls import coupon_urls, deal_urls

urlpatterns = [
    path('', core_views.api_root, name='api_root'),
    path('api/health/', core_views.health, name='health'),

    # Back office
    path('admin/', admin.site.urls),

    # JSON API
    path('api/auth/', include('users.urls')),
    path('api/products/', include(product_urls)),
    path('api/categories/', include(category_urls)),
    path('api/brands/', include(brand_urls)),
    path('api/cart/', include('cart.urls')),
    path('api/wishlist/', include('wishlist.urls')),
    path('api/orders/', include('orders.urls')),
    path('api/coupons/', include(coupon_urls)),
    path('api/deals/', include(deal_urls)),
    path('api/reviews/', include('reviews.urls')),
    path('api/comparisons/', include('comparisons.urls')),
    path('api/search/', include('search.urls')),
    path('api/admin/', include('adminpanel.urls')),
]

handler404 = 'core.views.not_found'
handler500 = 'core.views.server_error'

# Serve uploaded files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
