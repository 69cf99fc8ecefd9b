"""
URL configuration for the ClickNotes API.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from apps.core.observability.health import HealthzView, ReadyzView

urlpatterns = [
    # Health checks (no auth required)
    path('healthz', HealthzView.as_view(), name='healthz'),
    path('readyz', ReadyzView.as_view(), name='readyz'),

    # Admin (note moderation)
    path('admin/', admin.site.urls),

    # API
    path('api/auth/', include('apps.authz.urls')),  # register, login, logout, me
    path('api/users/', include('apps.authz.urls_users')),  # profiles, own notes, downloads
    path('api/', include('apps.notes.urls')),  # notes catalog, upload, download, likes

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]

# Serve uploaded note files in development
if settings.DEBUG:
    urlpatterns += static(settings.NOTES_UPLOAD_URL, document_root=settings.NOTES_UPLOAD_DIR)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
