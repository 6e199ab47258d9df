# promotions/urls.py
from django.urls import path
from . import views

coupon_urls = ([
    path('',                  views.coupon_list,     name='coupon_list'),
    path('active/',           views.active_coupons,  name='active_coupons'),
    path('validate/',         views.coupon_validate, name='coupon_validate'),
    path('<int:coupon_id>/',  views.coupon_detail,   name='coupon_detail'),
], 'coupons')

deal_urls = ([
    path('',                views.deal_list,    name='deal_list'),
    path('today/',          views.todays_deals, name='todays_deals'),
    path('<int:deal_id>/',  views.deal_detail,  name='deal_detail'),
], 'deals')
