from django.urls import path
from . import views

product_urls = ([
    path('',                            views.product_list,    name='product_list'),
    path('<int:product_id>/',           views.product_detail,  name='product_detail'),
    path('<int:product_id>/related/',   views.product_related, name='product_related'),
], 'products')

category_urls = ([
    path('',                    views.category_list,   name='category_list'),
    path('<int:category_id>/',  views.category_detail, name='category_detail'),
], 'categories')

brand_urls = ([
    path('',                 views.brand_list,   name='brand_list'),
    path('<int:brand_id>/',  views.brand_detail, name='brand_detail'),
], 'brands')
