"""Core app configuration."""
from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Observability, error rendering and health checks."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    def ready(self):
        from django.conf import settings
        from apps.core.observability import metrics

        metrics.app_info.info({
            'version': getattr(settings, 'VERSION', 'unknown'),
            'commit': getattr(settings, 'COMMIT_HASH', None) or 'unknown',
        })
