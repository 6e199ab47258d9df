from django.urls import path
from . import views

app_name = 'wishlist'

urlpatterns = [
    # List (GET) / clear (DELETE)
    path('', views.wishlist_view, name='wishlist'),

    # Add (POST) / remove (DELETE)
    path('<int:product_id>/', views.wishlist_item, name='item'),

    # Move single item to cart (POST only)
    path('<int:product_id>/move-to-cart/', views.move_to_cart, name='move_to_cart'),
]
