"""
Pytest configuration for the entire test suite.

Settings come from ``config.settings_test`` (SQLite in memory, fast
hashing). Uploaded note files go to a fresh directory per test.
"""
import pytest


@pytest.fixture(autouse=True)
def note_upload_dir(settings, tmp_path):
    """Point NOTES_UPLOAD_DIR at a per-test temporary directory."""
    upload_dir = tmp_path / 'uploads'
    upload_dir.mkdir()
    settings.NOTES_UPLOAD_DIR = upload_dir
    return upload_dir
