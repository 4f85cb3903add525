"""
URLs for schemes app
"""
from django.urls import path
from . import views

app_name = 'schemes'

urlpatterns = [
    path('chit-schemes', views.schemes_list_or_create_view, name='list-create'),
    path('chit-schemes/<int:pk>', views.scheme_detail_view, name='detail'),
    path('chit-schemes/<int:pk>/stats', views.scheme_stats_view, name='stats'),
]
