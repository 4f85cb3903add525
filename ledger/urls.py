"""
URLs for ledger (collections) app
"""
from django.urls import path
from . import views

app_name = 'ledger'

urlpatterns = [
    path('collections', views.collections_list_or_create_view, name='list-create'),
    path('collections/stats/daily', views.daily_stats_view, name='stats-daily'),
    path('collections/stats/range', views.range_stats_view, name='stats-range'),
    path('collections/<int:pk>', views.collection_detail_view, name='detail'),
]
