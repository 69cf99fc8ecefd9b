"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Unauthenticated and authenticated API clients
- Users and notes
- In-memory upload files
"""
import itertools

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from apps.authz.models import User
from apps.notes.models import Note, Tag
from apps.notes.storage import NoteFileStore


LONG_CONTENT = (
    'Newton formulated three laws of motion that describe how bodies respond '
    'to forces acting upon them in classical mechanics.'
)

_sequence = itertools.count(1)


def make_user(username, **extra):
    number = next(_sequence)
    defaults = {
        'email': f'{username}@test.com',
        'mobile_number': f'98765{number:05d}',
        'first_name': username.title(),
        'last_name': 'Tester',
        'qualification': 'B.Sc',
    }
    defaults.update(extra)
    return User.objects.create_user(username=username, password='testpass123', **defaults)


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def user(db):
    return make_user('asha')


@pytest.fixture
def other_user(db):
    return make_user('ravi')


@pytest.fixture
def auth_client(user):
    """API client authenticated as ``user``."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def other_client(other_user):
    """API client authenticated as ``other_user``."""
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


# ============================================================================
# Files and notes
# ============================================================================

@pytest.fixture
def upload_file():
    """
    Factory for in-memory uploads.

    Usage:
        upload_file()  # small PDF
        upload_file('slides.pptx', content_type='application/vnd.ms-powerpoint')
    """
    def _make(name='chapter-1.pdf', content=b'%PDF-1.4 test document', content_type='application/pdf'):
        return SimpleUploadedFile(name, content, content_type=content_type)
    return _make


@pytest.fixture
def file_store(note_upload_dir, settings):
    return NoteFileStore(note_upload_dir, settings.NOTES_UPLOAD_URL)


@pytest.fixture
def note_factory(user, file_store):
    """
    Create notes directly through the ORM, with a real file on disk.

    Usage:
        note = note_factory(title='Optics', subject='Physics', tags=['light'])
    """
    def _make(uploaded_by=None, tags=(), write_file=True, **fields):
        number = next(_sequence)
        values = {
            'title': f'Note {number}',
            'subject': 'Physics',
            'class_name': '12',
            'unit': 'Unit 1',
            'description': 'Summary of the chapter',
            'content': LONG_CONTENT,
            'reading_time': 1,
        }
        values.update(fields)
        if write_file:
            stored = file_store.save(SimpleUploadedFile('source.pdf', b'%PDF-1.4 body'), 'source.pdf')
            values.setdefault('file_path', stored.name)
            values.setdefault('file_url', stored.url)
            values.setdefault('file_size', stored.size)
        else:
            values.setdefault('file_path', f'{number}-missing.pdf')
            values.setdefault('file_url', f'/uploads/{number}-missing.pdf')
            values.setdefault('file_size', 0)
        values.setdefault('file_name', 'source.pdf')
        note = Note.objects.create(uploaded_by=uploaded_by or user, **values)
        for name in tags:
            note.tags.add(Tag.objects.get_or_create(name=name)[0])
        return note
    return _make


@pytest.fixture
def note_metadata():
    """Valid upload metadata as the service receives it."""
    return {
        'title': 'Laws of Motion',
        'subject': 'Physics',
        'class_name': '11',
        'unit': 'Mechanics',
        'description': 'Short notes on Newtonian mechanics',
        'content': LONG_CONTENT,
        'tags': 'mechanics, newton',
    }
