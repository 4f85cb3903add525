"""
URLs for reports app
"""
from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('dashboard/overview', views.dashboard_overview_view, name='dashboard'),
    path('revenue', views.revenue_view, name='revenue'),
    path('customers/performance', views.customer_performance_view, name='customer-performance'),
    path('schemes/performance', views.scheme_performance_view, name='scheme-performance'),
    path('collections/efficiency', views.collection_efficiency_view, name='collection-efficiency'),
    path('daily', views.daily_report_view, name='daily'),
    path('monthly', views.monthly_report_view, name='monthly'),
    path('yearly', views.yearly_report_view, name='yearly'),
    path('top-customers', views.top_customers_view, name='top-customers'),
    path('scheme-performance', views.scheme_collection_summary_view, name='scheme-collection-summary'),
]
