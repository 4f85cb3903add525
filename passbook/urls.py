"""
URLs for passbook app
"""
from django.urls import path
from . import views

app_name = 'passbook'

urlpatterns = [
    path('passbook', views.passbook_create_view, name='create'),
    path('passbook/stats/profit', views.profit_stats_view, name='profit'),
    path('passbook/customer/<int:customer_id>', views.customer_passbook_view, name='customer'),
    path('passbook/customer/<int:customer_id>/summary', views.customer_passbook_summary_view, name='summary'),
    path('passbook/customer-schemes/<int:pk>/generate', views.passbook_generate_view, name='generate'),
    path('passbook/<int:pk>', views.passbook_entry_view, name='detail'),
]
