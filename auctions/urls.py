"""
URLs for auctions app
"""
from django.urls import path
from . import views

app_name = 'auctions'

urlpatterns = [
    path('auctions', views.auctions_list_or_create_view, name='list-create'),
    path('auctions/stats/overview', views.auction_stats_view, name='stats'),
    path('auctions/upcoming/list', views.upcoming_auctions_view, name='upcoming'),
    path('auctions/<int:pk>', views.auction_detail_view, name='detail'),
    path('auctions/<int:pk>/propagate', views.auction_propagate_view, name='propagate'),
]
