"""
URLs for customers app
"""
from django.urls import path
from . import views

app_name = 'customers'

urlpatterns = [
    path('customers', views.customers_list_or_create_view, name='list-create'),
    path('customers/stats/overview', views.customer_stats_view, name='stats'),
    path('customers/schemes/<int:pk>', views.enrollment_detail_view, name='enrollment-detail'),
    path('customers/<int:pk>', views.customer_detail_view, name='detail'),
    path('customers/<int:pk>/schemes', views.customer_schemes_view, name='schemes'),
]
