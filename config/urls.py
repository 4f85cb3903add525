"""
URL configuration for chitfund-back project
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods
from django.views.generic import RedirectView
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)


@require_http_methods(["GET"])
def health_view(request):
    """Minimal health check for connectivity verification. No auth required."""
    return JsonResponse({
        'status': 'OK',
        'service': 'chitfund-back',
        'timestamp': timezone.now().isoformat(),
    })


@require_http_methods(["GET"])
def api_root(request):
    """Root endpoint - API information"""
    return JsonResponse({
        'name': 'Chit Fund Management API',
        'version': '1.0.0',
        'endpoints': {
            'health': '/api/health/',
            'auth': '/api/auth/',
            'chitSchemes': '/api/chit-schemes',
            'customers': '/api/customers',
            'collections': '/api/collections',
            'auctions': '/api/auctions',
            'passbook': '/api/passbook',
            'reports': '/api/reports/',
            'docs': '/api/docs/',
            'schema': '/api/schema/',
        }
    })


urlpatterns = [
    path('', api_root, name='api-root'),
    path('admin', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api', RedirectView.as_view(url='/api/', permanent=False)),
    path('api/', api_root),
    path('api/health/', health_view, name='api-health'),

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # API endpoints
    path('api/auth/', include('accounts.urls')),
    path('api/', include('schemes.urls')),
    path('api/', include('customers.urls')),
    path('api/', include('ledger.urls')),
    path('api/', include('auctions.urls')),
    path('api/', include('passbook.urls')),
    path('api/reports/', include('reports.urls')),
]

handler404 = 'config.exceptions.not_found_view'
handler500 = 'config.exceptions.server_error_view'
