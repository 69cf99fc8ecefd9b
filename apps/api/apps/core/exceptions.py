"""
API error rendering.

Every error leaves the API as ``{"error": <message>}``, plus
``"errors": [{"field", "message"}, ...]`` when field-level detail exists.
Service layers raise ``ServiceError`` subclasses; DRF's own exceptions are
reshaped into the same body.
"""
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.observability import get_sanitized_logger, metrics

logger = get_sanitized_logger(__name__)

GENERIC_SERVER_ERROR = 'Something went wrong!'
AUTHENTICATION_REQUIRED = 'Please authenticate'


class ServiceError(Exception):
    """
    Base class for errors raised by service layers.

    Subclasses set ``status_code`` and ``default_message``. ``errors`` holds
    optional field-level detail as a list of ``{'field', 'message'}`` dicts.
    ``expose`` controls whether the message reaches the client; when False
    the client sees a generic message and the real one is only logged.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_SERVER_ERROR
    expose = True

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def public_message(self):
        return self.message if self.expose else GENERIC_SERVER_ERROR


def field_errors_from_detail(detail, prefix=''):
    """Flatten DRF ValidationError detail into ``[{'field', 'message'}]``."""
    if isinstance(detail, dict):
        flattened = []
        for field, value in detail.items():
            name = f'{prefix}.{field}' if prefix else str(field)
            flattened.extend(field_errors_from_detail(value, name))
        return flattened
    if isinstance(detail, (list, tuple)):
        flattened = []
        for item in detail:
            flattened.extend(field_errors_from_detail(item, prefix))
        return flattened
    return [{'field': prefix or 'non_field_errors', 'message': str(detail)}]


def _service_error_response(exc, context):
    if exc.status_code >= 500:
        view = context.get('view')
        logger.error(
            f'Service error: {exc.__class__.__name__}',
            exc_info=exc,
            extra={
                'event': 'service_error',
                'exception_type': exc.__class__.__name__,
                'detail': exc.message,
                'view': view.__class__.__name__ if view else None,
            }
        )
        metrics.exceptions_total.labels(
            exception_type=exc.__class__.__name__, location='service'
        ).inc()

    body = {'error': exc.public_message()}
    if exc.errors:
        body['errors'] = exc.errors
    return Response(body, status=exc.status_code)


def api_exception_handler(exc, context):
    """
    DRF exception handler producing ``{error, errors?}`` bodies.

    Configured as ``REST_FRAMEWORK['EXCEPTION_HANDLER']``.
    """
    if isinstance(exc, ServiceError):
        return _service_error_response(exc, context)

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        # Unhandled: let Django's 500 machinery and the correlation
        # middleware log it.
        return None

    if isinstance(exc, exceptions.ValidationError):
        errors = field_errors_from_detail(exc.detail)
        response.data = {
            'error': errors[0]['message'] if errors else 'Invalid input',
            'errors': errors,
        }
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = {'error': AUTHENTICATION_REQUIRED}
    else:
        detail = exc.detail if isinstance(exc, exceptions.APIException) else str(exc)
        response.data = {'error': str(detail)}

    return response
