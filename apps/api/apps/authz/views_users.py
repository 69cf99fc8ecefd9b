"""
User profile views: public profiles, self-service edits, own uploads,
download history and engagement stats.
"""
from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.models import User
from apps.authz.serializers import AccountSerializer, ProfileSerializer, ProfileUpdateSerializer
from apps.notes.models import Note, NoteDownload
from apps.notes.serializers import DownloadHistorySerializer, note_page_payload
from apps.notes.services import NoteService
from apps.notes.views import pagination_params


class PublicProfileView(APIView):
    """GET /api/users/profile/{username} - profile plus the ten newest uploads."""
    permission_classes = [AllowAny]

    def get(self, request, username):
        user = get_object_or_404(User, username=username, is_active=True)
        return Response(ProfileSerializer(user).data)


class ProfileUpdateView(APIView):
    """
    PUT /api/users/profile

    Only firstName, lastName and qualification can change.
    """
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response({
            'message': 'Profile updated successfully',
            'user': AccountSerializer(user).data,
        })


class MyNotesView(APIView):
    """GET /api/users/notes?page=1&limit=12 - the caller's uploads, approved or not."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        page, limit = pagination_params(request)
        result = NoteService.from_settings().uploads_of(request.user, page=page, limit=limit)
        return Response(note_page_payload(result, request))


class DownloadHistoryView(APIView):
    """GET /api/users/downloads - one entry per downloaded note, latest first."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        downloads = (
            NoteDownload.objects.filter(user=request.user)
            .select_related('note__uploaded_by')
            .prefetch_related('note__tags', 'note__likes')
            .order_by('-downloaded_at')
        )
        return Response(DownloadHistorySerializer(downloads, many=True).data)


class UserStatsView(APIView):
    """
    GET /api/users/stats

    Response:
    - uploadedNotes: number of notes the caller uploaded
    - downloadedNotes: distinct notes the caller downloaded
    - totalDownloads, totalViews: summed over the caller's notes
    - totalLikes: likes received on the caller's notes
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        own_notes = Note.objects.filter(uploaded_by=request.user)
        totals = own_notes.aggregate(
            uploaded=Count('id'),
            downloads=Sum('download_count'),
            views=Sum('views'),
        )
        total_likes = own_notes.aggregate(likes=Count('likes'))['likes']
        return Response({
            'uploadedNotes': totals['uploaded'],
            'downloadedNotes': NoteDownload.objects.filter(user=request.user).count(),
            'totalDownloads': totals['downloads'] or 0,
            'totalViews': totals['views'] or 0,
            'totalLikes': total_likes or 0,
        })
