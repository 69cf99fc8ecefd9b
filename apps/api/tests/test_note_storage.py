"""
Tests for the local note file store.

Business Rules:
- Stored names are generated; only the lower-cased extension survives
- Names cannot escape the upload directory
- delete() is idempotent
- open() on a missing file raises StorageFailure
"""
import re

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.notes.exceptions import StorageFailure
from apps.notes.storage import NoteFileStore, generate_file_name


GENERATED_NAME = re.compile(r'^\d{13}-\d{9}\.[a-z]+$')


class TestGenerateFileName:

    def test_keeps_lowercased_extension_only(self):
        name = generate_file_name('My Chapter.PDF')
        assert GENERATED_NAME.match(name)
        assert name.endswith('.pdf')

    def test_path_components_are_dropped(self):
        name = generate_file_name('../../etc/passwd.txt')
        assert '/' not in name
        assert '..' not in name
        assert name.endswith('.txt')

    def test_names_do_not_repeat(self):
        names = {generate_file_name('a.pdf') for _ in range(50)}
        assert len(names) == 50

    def test_missing_extension(self):
        assert re.match(r'^\d{13}-\d{9}$', generate_file_name('README'))


class TestNoteFileStore:

    def test_save_writes_under_upload_dir(self, file_store, note_upload_dir):
        stored = file_store.save(SimpleUploadedFile('x.pdf', b'hello'), 'x.pdf')

        assert (note_upload_dir / stored.name).read_bytes() == b'hello'
        assert stored.size == 5
        assert stored.url == f'/uploads/{stored.name}'
        assert file_store.exists(stored.name)

    def test_open_returns_binary_stream(self, file_store):
        stored = file_store.save(SimpleUploadedFile('x.txt', b'abc'), 'x.txt')

        with file_store.open(stored.name) as fh:
            assert fh.read() == b'abc'

    def test_open_missing_file_raises(self, file_store):
        with pytest.raises(StorageFailure):
            file_store.open('1700000000000-123456789.pdf')

    def test_delete_is_idempotent(self, file_store, note_upload_dir):
        stored = file_store.save(SimpleUploadedFile('x.pdf', b'data'), 'x.pdf')

        file_store.delete(stored.name)
        file_store.delete(stored.name)

        assert not (note_upload_dir / stored.name).exists()
        assert not file_store.exists(stored.name)

    def test_delete_blank_name_is_noop(self, file_store):
        file_store.delete('')

    def test_from_settings_uses_configured_directory(self, note_upload_dir):
        store = NoteFileStore.from_settings()
        assert store.location == str(note_upload_dir)
