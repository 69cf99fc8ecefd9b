"""
Tests for observability layer.

Validates that metrics, logs, and events are emitted correctly
without logging account PII.
"""
import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from django.http import HttpResponse
from django.test import RequestFactory
from prometheus_client import REGISTRY

from apps.core.observability.correlation import (
    RequestCorrelationMiddleware,
    clear_request_context,
    get_request_id,
    get_user_id,
)
from apps.core.observability.events import (
    log_domain_event,
    log_note_file_missing,
    log_upload_cleanup,
)
from apps.core.observability.logging import (
    SENSITIVE_FIELDS,
    SanitizedJSONFormatter,
    sanitize_dict,
)
from apps.core.observability.metrics import metrics


@pytest.fixture(autouse=True)
def reset_request_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.mark.django_db
class TestRequestCorrelation:
    """Test request correlation middleware."""

    def _middleware(self):
        return RequestCorrelationMiddleware(lambda request: HttpResponse('ok'))

    def test_generates_request_id_if_missing(self):
        request = RequestFactory().get('/api/notes')

        self._middleware().process_request(request)

        assert request.request_id
        assert get_request_id() == request.request_id

    def test_propagates_existing_request_id(self):
        request = RequestFactory().get('/api/notes', HTTP_X_REQUEST_ID='test-request-123')

        self._middleware().process_request(request)

        assert request.request_id == 'test-request-123'

    def test_adds_request_id_to_response_headers(self):
        middleware = self._middleware()
        request = RequestFactory().get('/api/notes', HTTP_X_REQUEST_ID='abc-123')
        middleware.process_request(request)

        response = middleware.process_response(request, HttpResponse('ok'))

        assert response['X-Request-ID'] == 'abc-123'

    def test_counts_requests_by_route_name(self, client):
        labels = {'path': 'healthz', 'method': 'GET', 'status': '200'}
        before = REGISTRY.get_sample_value('http_requests_total', labels) or 0

        response = client.get('/healthz')

        assert response.status_code == 200
        assert 'X-Request-ID' in response
        assert REGISTRY.get_sample_value('http_requests_total', labels) == before + 1


@pytest.mark.django_db
class TestUserContext:
    """The authenticated user reaches service-layer logs during the request."""

    def test_jwt_user_visible_inside_view(self, api_client, user, note_factory, monkeypatch):
        from apps.authz.authentication import issue_access_token
        from apps.notes.services import LikeState, NoteService

        seen = []

        def recording_toggle(self, note_id, requester):
            seen.append(get_user_id())
            return LikeState(liked=True, likes_count=1)

        monkeypatch.setattr(NoteService, 'toggle_like', recording_toggle)
        note = note_factory()
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_access_token(user)}')

        response = api_client.post(f'/api/notes/{note.id}/like')

        assert response.status_code == 200
        assert seen == [str(user.id)]

    def test_correlation_filter_stamps_user_id(self, user):
        from apps.core.observability.correlation import set_user_context
        from apps.core.observability.logging import CorrelationFilter

        set_user_context(user)
        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'msg', None, None)

        CorrelationFilter().filter(record)

        assert record.user_id == str(user.id)


class TestSanitization:
    """Test PII sanitization."""

    def test_sanitize_dict_redacts_sensitive_fields(self):
        data = {
            'note_id': 'note-123',
            'email': 'asha@example.com',
            'mobile_number': '9876543210',
            'password': 'secret',
            'token': 'eyJ...',
            'subject': 'Physics',
        }

        sanitized = sanitize_dict(data)

        assert sanitized['note_id'] == 'note-123'
        assert sanitized['subject'] == 'Physics'
        for key in ('email', 'mobile_number', 'password', 'token'):
            assert sanitized[key] == '[REDACTED]'

    def test_sanitize_dict_handles_nested_objects(self):
        sanitized = sanitize_dict({'user': {'username': 'asha', 'date_of_birth': '2001-01-01'}})

        assert sanitized['user']['username'] == 'asha'
        assert sanitized['user']['date_of_birth'] == '[REDACTED]'

    def test_sensitive_fields_cover_account_pii(self):
        assert {'email', 'mobile_number', 'date_of_birth', 'password'} <= SENSITIVE_FIELDS

    def test_json_formatter_redacts_extra_fields(self):
        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'User event', None, None)
        record.email = 'asha@example.com'
        record.note_id = 'note-1'

        payload = json.loads(SanitizedJSONFormatter().format(record))

        assert payload['message'] == 'User event'
        assert payload['email'] == '[REDACTED]'
        assert payload['note_id'] == 'note-1'
        assert payload['timestamp'].endswith('Z')


class TestMetricsEmission:
    """Test metrics registry."""

    def test_metrics_registry_has_note_metrics(self):
        for name in (
            'http_requests_total',
            'exceptions_total',
            'notes_uploaded_total',
            'notes_upload_cleanup_total',
            'notes_deleted_total',
            'note_downloads_total',
            'note_likes_toggled_total',
            'note_searches_total',
            'users_registered_total',
        ):
            assert hasattr(metrics, name)

    def test_http_metrics_have_no_unbounded_labels(self):
        assert metrics.http_requests_total._labelnames == ('path', 'method', 'status')
        assert 'user_id' not in metrics.http_request_duration_seconds._labelnames

    @pytest.mark.django_db
    def test_upload_increments_counter(self, auth_client, upload_file):
        before = REGISTRY.get_sample_value('notes_uploaded_total', {'result': 'success'}) or 0

        response = auth_client.post('/api/notes/upload', {
            'title': 'Optics',
            'subject': 'Physics',
            'class': '12',
            'unit': 'Light',
            'description': 'Reflection and refraction',
            'content': ' '.join(['lens'] * 60),
            'file': upload_file(),
        }, format='multipart')

        assert response.status_code == 201
        assert REGISTRY.get_sample_value('notes_uploaded_total', {'result': 'success'}) == before + 1


class TestDomainEvents:
    """Test domain event logging."""

    @patch('apps.core.observability.events.logger')
    def test_log_domain_event_structure(self, mock_logger):
        log_domain_event(
            'note_uploaded',
            entity_type='Note',
            entity_id='note-123',
            entity_ids={'uploaded_by': 'user-1'},
            file_size=42,
        )

        mock_logger.info.assert_called_once()
        extra = mock_logger.info.call_args[1]['extra']
        assert extra['event'] == 'note_uploaded'
        assert extra['entity_type'] == 'Note'
        assert extra['entity_id'] == 'note-123'
        assert extra['uploaded_by'] == 'user-1'
        assert extra['result'] == 'success'
        assert extra['file_size'] == 42

    @patch('apps.core.observability.events.logger')
    def test_extra_fields_are_sanitized(self, mock_logger):
        log_domain_event('user_registered', entity_type='User', entity_id='u-1', email='asha@example.com')

        extra = mock_logger.info.call_args[1]['extra']
        assert extra['email'] == '[REDACTED]'

    @patch('apps.core.observability.events.logger')
    def test_upload_cleanup_logs_warning(self, mock_logger):
        log_upload_cleanup('1700000000000-000000001.pdf', 'database')

        mock_logger.warning.assert_called_once()
        extra = mock_logger.warning.call_args[1]['extra']
        assert extra['event'] == 'note_upload_cleanup'
        assert extra['reason'] == 'database'

    @patch('apps.core.observability.events.logger')
    def test_missing_file_logs_error(self, mock_logger):
        note = MagicMock(id='note-9', file_path='gone.pdf')

        log_note_file_missing(note, operation='download')

        mock_logger.error.assert_called_once()
        extra = mock_logger.error.call_args[1]['extra']
        assert extra['event'] == 'note_file_missing'
        assert extra['operation'] == 'download'


@pytest.mark.django_db
class TestHealthChecks:
    """Test health check endpoints."""

    def test_healthz_returns_200(self, client):
        response = client.get('/healthz')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ok'
        assert 'version' in data

    def test_readyz_checks_database_and_upload_dir(self, client):
        response = client.get('/readyz')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ready'
        assert data['checks'] == {'database': True, 'upload_dir': True}

    @patch('apps.core.observability.health.connection')
    def test_readyz_fails_on_db_error(self, mock_connection, client):
        mock_connection.cursor.side_effect = Exception("DB connection failed")

        response = client.get('/readyz')

        assert response.status_code == 503
        data = response.json()
        assert data['status'] == 'not_ready'
        assert data['checks']['database'] is False


class TestExceptionHandler:
    """Errors leave the API as {error, errors?}."""

    @pytest.mark.django_db
    def test_storage_failure_hides_detail(self, auth_client, note_factory, monkeypatch):
        from apps.notes.exceptions import StorageFailure
        from apps.notes.services import NoteService

        def broken_toggle(self, note_id, user):
            raise StorageFailure('disk /var/data exploded')

        monkeypatch.setattr(NoteService, 'toggle_like', broken_toggle)
        note = note_factory()

        response = auth_client.post(f'/api/notes/{note.id}/like')

        assert response.status_code == 500
        assert response.data == {'error': 'Something went wrong!'}

    def test_field_errors_flatten_nested_detail(self):
        from apps.core.exceptions import field_errors_from_detail

        errors = field_errors_from_detail({'email': ['Invalid email'], 'profile': {'name': ['Required']}})

        assert errors == [
            {'field': 'email', 'message': 'Invalid email'},
            {'field': 'profile.name', 'message': 'Required'},
        ]
