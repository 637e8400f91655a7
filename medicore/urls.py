"""
URL configuration for the MediCore project.

The REST API is mounted under ``settings.API_BASE_URL`` (``/api`` by
default).  OpenAPI documentation is exposed at ``/swagger/`` and
``/redoc/``, Prometheus metrics at ``/metrics`` and the Django admin at
``/django-admin/``.
"""
from django.conf import settings
from django.contrib import admin
from django.urls import path, include

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# API metadata for Swagger/OpenAPI documentation
api_info = openapi.Info(
    title="MediCore Hospital API",
    default_version='v1',
    description="Patients, appointments, billing and medical records.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
    authentication_classes=(),
)

api_prefix = settings.API_BASE_URL.strip('/')

urlpatterns = [
    path('django-admin/', admin.site.urls),
    path('', include('django_prometheus.urls')),
    path(f'{api_prefix}/' if api_prefix else '', include('clinic.routers')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
