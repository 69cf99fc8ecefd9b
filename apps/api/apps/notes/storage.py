"""
Local-disk storage for uploaded note files.

Files are written under ``NOTES_UPLOAD_DIR`` with generated names
(``<unix-ms>-<9 random digits><ext>``) and served read-only under
``NOTES_UPLOAD_URL``.
"""
import os
import secrets
import time
from dataclasses import dataclass

from django.conf import settings
from django.core.files.storage import FileSystemStorage

from apps.core.observability import get_sanitized_logger
from apps.notes.exceptions import StorageFailure

logger = get_sanitized_logger(__name__)


@dataclass(frozen=True)
class StoredFile:
    name: str
    url: str
    size: int


def generate_file_name(suggested_name):
    """
    Unique name keeping only the lower-cased extension of ``suggested_name``.

    The client's name never reaches the filesystem, so it can neither
    collide with another upload nor escape the upload directory.
    """
    extension = os.path.splitext(os.path.basename(suggested_name or ''))[1].lower()
    stamp = int(time.time() * 1000)
    suffix = secrets.randbelow(10 ** 9)
    return f'{stamp}-{suffix:09d}{extension}'


class NoteFileStore:
    """
    Thin wrapper over ``FileSystemStorage`` scoped to the note upload directory.

    Usage:
        store = NoteFileStore.from_settings()
        stored = store.save(request.FILES['file'], 'chapter-1.pdf')
        with store.open(stored.name) as fh:
            ...
    """

    def __init__(self, location, base_url):
        self.location = str(location)
        self.base_url = base_url
        self._storage = FileSystemStorage(location=self.location, base_url=base_url)

    @classmethod
    def from_settings(cls):
        return cls(settings.NOTES_UPLOAD_DIR, settings.NOTES_UPLOAD_URL)

    def save(self, fileobj, suggested_name):
        name = generate_file_name(suggested_name)
        try:
            saved_name = self._storage.save(name, fileobj)
            size = self._storage.size(saved_name)
        except OSError as e:
            logger.error(
                'Failed to write uploaded file',
                extra={'event': 'note_file_write_failed', 'stored_name': name, 'error': str(e)}
            )
            raise StorageFailure(f'Could not store {name}: {e}') from e
        return StoredFile(name=saved_name, url=self._storage.url(saved_name), size=size)

    def delete(self, name):
        """Remove ``name``. A file that is already gone is not an error."""
        if not name:
            return
        try:
            self._storage.delete(name)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageFailure(f'Could not delete {name}: {e}') from e

    def open(self, name):
        """Open ``name`` for binary reading. Raises StorageFailure if it is absent."""
        if not name or not self._storage.exists(name):
            raise StorageFailure(f'Stored file {name!r} does not exist')
        try:
            return self._storage.open(name, 'rb')
        except OSError as e:
            raise StorageFailure(f'Could not open {name}: {e}') from e

    def exists(self, name):
        return bool(name) and self._storage.exists(name)

    def url(self, name):
        return self._storage.url(name)
