"""
URL configuration for the ship reporting backend.

The API routes come from ``reporting.routers``.  OpenAPI documentation
is exposed at ``/docs/`` and ``/redoc/`` outside production.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# API metadata for Swagger/OpenAPI documentation
api_info = openapi.Info(
    title="Ship Inspection Reporting API",
    default_version='v1',
    description="Multi-tenant backend for vessel inspection reports and deficiency follow-up.",
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('reporting.routers')),
]

if settings.API_DOCS_ENABLED:
    schema_view = get_schema_view(
        api_info,
        public=True,
        permission_classes=(permissions.AllowAny,),
    )
    urlpatterns += [
        path('docs/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
        path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
    ]

# uploaded images are served by Django only in development
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
