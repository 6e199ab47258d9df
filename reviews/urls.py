from django.urls import path
from . import views

app_name = 'reviews'

urlpatterns = [
    # Product Reviews
    path('product/<int:product_id>/', views.product_reviews, name='product_reviews'),

    # Edit/Delete Reviews
    path('<int:review_id>/', views.review_detail, name='review_detail'),

    # My Reviews
    path('my-reviews/', views.my_reviews, name='my_reviews'),
]
