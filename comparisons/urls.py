from django.urls import path
from . import views

app_name = 'comparisons'

urlpatterns = [
    path('', views.comparison_list, name='comparison_list'),
    path('<int:comparison_id>/', views.comparison_detail, name='comparison_detail'),
    path('<int:comparison_id>/products/<int:product_id>/', views.comparison_product, name='comparison_product'),
]
