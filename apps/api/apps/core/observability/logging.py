"""
Structured logging with account PII redaction.

Every logger obtained through ``get_sanitized_logger`` carries the request
correlation context; the JSON formatter redacts credential and profile
fields wherever they appear in a record's extras.
"""
import json
import logging
from datetime import datetime, timezone

from .correlation import get_request_id, get_trace_id, get_user_id

REDACTED = '[REDACTED]'

# Credentials and account PII; matched case-insensitively on key names
SENSITIVE_FIELDS = {
    'password',
    'token',
    'access',
    'secret',
    'api_key',
    'authorization',
    'cookie',
    'email',
    'first_name',
    'last_name',
    'mobile_number',
    'phone',
    'date_of_birth',
}

# LogRecord attributes that are not caller-supplied extras
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord('', 0, '', 0, '', None, None).__dict__
) | {'message', 'asctime'}


def _redact(value):
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_FIELDS else _redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item) for item in value]
    return value


def sanitize_dict(data):
    """Copy of ``data`` with sensitive keys redacted at any depth."""
    return _redact(data)


class CorrelationFilter(logging.Filter):
    """Stamp request id, trace id and user id onto every record."""

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        record.trace_id = get_trace_id() or '-'
        record.user_id = get_user_id() or '-'
        return True


class SanitizedJSONFormatter(logging.Formatter):
    """One JSON object per record: fixed envelope plus redacted extras."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'trace_id': getattr(record, 'trace_id', '-'),
            'user_id': getattr(record, 'user_id', '-'),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in log_data and not key.startswith('_')
        }
        log_data.update(_redact(extras))

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_sanitized_logger(name):
    """
    Logger with the correlation filter attached once.

    Usage:
        logger = get_sanitized_logger(__name__)
        logger.info('Note removed', extra={'event': 'note_deleted', 'note_id': note_id})
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())
    return logger
