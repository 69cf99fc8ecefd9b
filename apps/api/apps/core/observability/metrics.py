"""
Metrics instrumentation on top of prometheus_client.
"""
import time
from functools import wraps

from prometheus_client import Counter, Histogram, Info


class MetricsRegistry:
    """
    Central metrics registry for the ClickNotes API.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        """Initialize metrics registry."""
        self._setup_metrics()

    def _create_counter(self, name, description, labels=None):
        """Create a counter metric."""
        return Counter(name, description, labels or [])

    def _create_histogram(self, name, description, labels=None, buckets=None):
        """Create a histogram metric."""
        if buckets:
            return Histogram(name, description, labels or [], buckets=buckets)
        return Histogram(name, description, labels or [])

    def _create_info(self, name, description):
        """Create an info metric."""
        return Info(name, description)

    def _setup_metrics(self):
        """Setup all application metrics."""

        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.http_requests_total = self._create_counter(
            'http_requests_total',
            'Total HTTP requests',
            ['path', 'method', 'status']
        )

        self.http_request_duration_seconds = self._create_histogram(
            'http_request_duration_seconds',
            'HTTP request duration in seconds',
            ['path', 'method'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
        )

        self.exceptions_total = self._create_counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Note Metrics
        # ===================================================================
        self.notes_uploaded_total = self._create_counter(
            'notes_uploaded_total',
            'Note uploads',
            ['result']  # success, rejected, failure
        )

        self.notes_upload_cleanup_total = self._create_counter(
            'notes_upload_cleanup_total',
            'Stored files removed after a failed upload',
            ['reason']  # validation, database
        )

        self.notes_upload_bytes = self._create_histogram(
            'notes_upload_bytes',
            'Size of accepted note files',
            buckets=[10_000, 100_000, 500_000, 1_000_000, 5_000_000, 10_000_000]
        )

        self.notes_deleted_total = self._create_counter(
            'notes_deleted_total',
            'Note deletions',
            ['result']  # success, forbidden, file_missing
        )

        self.note_downloads_total = self._create_counter(
            'note_downloads_total',
            'Note downloads',
            ['result']  # success, file_missing
        )

        self.note_likes_toggled_total = self._create_counter(
            'note_likes_toggled_total',
            'Like toggles',
            ['state']  # liked, unliked
        )

        self.note_searches_total = self._create_counter(
            'note_searches_total',
            'Full-text note searches',
            ['engine']  # postgres, fallback
        )

        self.note_search_duration_seconds = self._create_histogram(
            'note_search_duration_seconds',
            'Full-text note search duration',
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
        )

        # ===================================================================
        # Account Metrics
        # ===================================================================
        self.users_registered_total = self._create_counter(
            'users_registered_total',
            'Account registrations',
            ['result']  # success, rejected, conflict
        )

        self.auth_logins_total = self._create_counter(
            'auth_logins_total',
            'Login attempts',
            ['result']  # success, rejected
        )

        self.app_info = self._create_info(
            'clicknotes_app',
            'Application build information'
        )

    def track_duration(self, histogram_metric):
        """
        Decorator to track function duration.

        Usage:
            @metrics.track_duration(metrics.note_search_duration_seconds)
            def search(self, q, page, limit):
                ...
        """
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return func(*args, **kwargs)
                finally:
                    duration = time.time() - start_time
                    histogram_metric.observe(duration)
            return wrapper
        return decorator


# Global metrics instance
metrics = MetricsRegistry()
