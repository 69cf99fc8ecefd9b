"""
Notes REST API endpoints.

Views translate HTTP into NoteService calls; validation, storage and
counters live in the service. Service errors are rendered by
``apps.core.exceptions.api_exception_handler``.
"""
import time

from django.conf import settings
from django.http import FileResponse
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.notes.serializers import (
    NoteSerializer,
    NoteUpdateSerializer,
    NoteUploadResultSerializer,
    note_page_payload,
)
from apps.notes.services import NoteService


# Multipart form field -> service metadata key
UPLOAD_FIELDS = {
    'title': 'title',
    'subject': 'subject',
    'class': 'class_name',
    'unit': 'unit',
    'description': 'description',
    'content': 'content',
    'tags': 'tags',
}


def _positive_int(value, default, maximum=None):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


def pagination_params(request):
    """``(page, limit)`` from the query string, falling back to the defaults."""
    page = _positive_int(request.query_params.get('page'), 1)
    limit = _positive_int(
        request.query_params.get('limit'),
        settings.NOTES_PAGE_SIZE,
        maximum=settings.NOTES_MAX_PAGE_SIZE,
    )
    return page, limit


class NoteListView(APIView):
    """
    GET /api/notes

    Query parameters:
    - ?page=1&limit=12
    - ?subject=Physics&class=12
    - ?search=term - relevance-ordered text search
    - ?sort=-createdAt|createdAt|views|-views|downloadCount|-downloadCount|title|-title
    """
    permission_classes = [AllowAny]

    def get(self, request):
        page, limit = pagination_params(request)
        result = NoteService.from_settings().list(
            subject=request.query_params.get('subject'),
            class_name=request.query_params.get('class'),
            search=request.query_params.get('search'),
            page=page,
            limit=limit,
            sort=request.query_params.get('sort'),
        )
        return Response(note_page_payload(result, request))


class NoteUploadView(APIView):
    """
    POST /api/notes/upload

    Request body (multipart/form-data):
    - file: pdf, doc, docx, txt, ppt or pptx
    - title, subject, class, unit: required
    - description: at least 10 characters
    - content: at least 50 characters
    - tags: optional, comma-separated
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        metadata = {
            key: request.data.get(wire_name)
            for wire_name, key in UPLOAD_FIELDS.items()
        }
        note = NoteService.from_settings().upload(
            request.user, metadata, request.FILES.get('file')
        )
        return Response(
            {
                'message': 'Note uploaded successfully',
                'note': NoteUploadResultSerializer(note).data,
            },
            status=status.HTTP_201_CREATED,
        )


class NoteSearchView(APIView):
    """
    GET /api/notes/search?q=term&page=1&limit=12

    400 when ``q`` is missing or blank.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        page, limit = pagination_params(request)
        result = NoteService.from_settings().search(
            request.query_params.get('q', ''), page=page, limit=limit
        )
        payload = note_page_payload(result, request)
        payload['searchTime'] = int(time.time() * 1000)
        return Response(payload)


class NoteDetailView(APIView):
    """
    GET /api/notes/{id} - full document; every fetch counts a view
    PATCH /api/notes/{id} - owner edits metadata
    DELETE /api/notes/{id} - owner removes note and file
    """
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, pk):
        note = NoteService.from_settings().get(pk)
        return Response(NoteSerializer(note, context={'request': request}).data)

    def patch(self, request, pk):
        serializer = NoteUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        note = NoteService.from_settings().update(pk, request.user, serializer.validated_data)
        return Response(NoteSerializer(note, context={'request': request}).data)

    def delete(self, request, pk):
        NoteService.from_settings().delete(pk, request.user)
        return Response({'message': 'Note deleted successfully'})


class NoteDownloadView(APIView):
    """
    GET /api/notes/{id}/download

    Streams the file as an attachment under its original name.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        handle = NoteService.from_settings().download(pk, request.user)
        return FileResponse(handle.stream, as_attachment=True, filename=handle.file_name)


class NoteLikeView(APIView):
    """POST /api/notes/{id}/like - toggles the caller's like."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        state = NoteService.from_settings().toggle_like(pk, request.user)
        return Response({'liked': state.liked, 'likesCount': state.likes_count})


class RelatedNotesView(APIView):
    """GET /api/notes/{id}/related - up to three approved notes on the same topic."""
    permission_classes = [AllowAny]

    def get(self, request, pk):
        notes = NoteService.from_settings().related(pk)
        return Response(NoteSerializer(notes, many=True, context={'request': request}).data)
