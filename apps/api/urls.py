# apps/api/urls.py
"""
Main API URL configuration.

Versioned routes live under v1/; the OpenAPI schema and Swagger UI are
served alongside.
"""
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path('v1/', include('apps.api.v1.urls')),
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
