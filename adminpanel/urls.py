from django.urls import path
from .import views

app_name = "adminpanel"

urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),

    # Users
    path("users/", views.user_list, name="user_list"),
    path("users/<int:user_id>/role/", views.user_role, name="user_role"),

    # Orders
    path("orders/", views.order_list, name="order_list"),

    # Analytics
    path("analytics/sales/", views.sales_analytics, name="sales_analytics"),
]
