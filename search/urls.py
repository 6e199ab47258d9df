from django.urls import path
from . import views

app_name = 'search'

urlpatterns = [
    # Main Search
    path('', views.search, name='search'),

    # Multi-value filters
    path('advanced/', views.advanced_search, name='advanced'),
]
