"""
Tests for user profile endpoints.

Endpoints tested:
- GET /api/users/profile/{username}
- PUT /api/users/profile
- GET /api/users/notes
- GET /api/users/downloads
- GET /api/users/stats
"""
import pytest

from apps.notes.models import NoteDownload, NoteLike


@pytest.mark.django_db
class TestPublicProfile:

    def test_profile_lists_recent_uploads(self, api_client, user, note_factory):
        for _ in range(12):
            note_factory()

        response = api_client.get(f'/api/users/profile/{user.username}')

        assert response.status_code == 200
        assert response.data['username'] == user.username
        assert len(response.data['uploadedNotes']) == 10
        assert 'email' not in response.data
        assert 'mobileNumber' not in response.data

    def test_unknown_username(self, api_client):
        response = api_client.get('/api/users/profile/nobody')

        assert response.status_code == 404
        assert 'error' in response.data


@pytest.mark.django_db
class TestProfileUpdate:

    def test_only_names_and_qualification_change(self, auth_client, user):
        response = auth_client.put(
            '/api/users/profile',
            {'firstName': 'Asha', 'lastName': 'Menon', 'qualification': 'M.Sc', 'email': 'hacked@test.com'},
            format='json',
        )

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.last_name == 'Menon'
        assert user.qualification == 'M.Sc'
        assert user.email == 'asha@test.com'

    def test_requires_authentication(self, api_client):
        assert api_client.put('/api/users/profile', {}, format='json').status_code == 401


@pytest.mark.django_db
class TestMyNotes:

    def test_includes_unapproved_uploads(self, auth_client, note_factory, other_user):
        mine = note_factory()
        hidden = note_factory(is_approved=False)
        note_factory(uploaded_by=other_user)

        response = auth_client.get('/api/users/notes')

        assert response.status_code == 200
        assert {n['id'] for n in response.data['notes']} == {str(mine.id), str(hidden.id)}
        assert response.data['totalNotes'] == 2


@pytest.mark.django_db
class TestDownloadsAndStats:

    def test_download_history(self, other_client, note_factory):
        note = note_factory()
        download = other_client.get(f'/api/notes/{note.id}/download')
        b''.join(download.streaming_content)

        response = other_client.get('/api/users/downloads')

        assert response.status_code == 200
        assert len(response.data) == 1
        assert response.data[0]['note']['id'] == str(note.id)
        assert response.data[0]['downloadedAt']

    def test_stats(self, auth_client, user, other_user, note_factory):
        first = note_factory(views=4, download_count=2)
        note_factory(views=1, download_count=0)
        NoteLike.objects.create(note=first, user=other_user)
        other_note = note_factory(uploaded_by=other_user)
        NoteDownload.objects.create(note=other_note, user=user)

        response = auth_client.get('/api/users/stats')

        assert response.status_code == 200
        assert response.data == {
            'uploadedNotes': 2,
            'downloadedNotes': 1,
            'totalDownloads': 2,
            'totalViews': 5,
            'totalLikes': 1,
        }
