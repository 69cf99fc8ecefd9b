"""
Note serializers.

Outgoing documents use the camelCase field names the browser client reads.
``class`` is a Python keyword, so the field is declared as ``class_name``
and renamed on the way out.
"""
from rest_framework import serializers

from apps.authz.serializers import PublicUserSerializer
from apps.notes.models import TAG_NAME_MAX_LENGTH, Note


class ClassFieldMixin:
    """Expose the ``class_name`` serializer field under the wire name ``class``."""

    def get_fields(self):
        fields = super().get_fields()
        return {
            ('class' if name == 'class_name' else name): field
            for name, field in fields.items()
        }


class NoteSerializer(ClassFieldMixin, serializers.ModelSerializer):
    """
    Full note document.

    Used for:
    - GET /api/notes/{id}
    - list, search and related responses
    """
    class_name = serializers.CharField(source='class_name', read_only=True)
    fileUrl = serializers.CharField(source='file_url', read_only=True)
    fileName = serializers.CharField(source='file_name', read_only=True)
    fileSize = serializers.IntegerField(source='file_size', read_only=True)
    thumbnailUrl = serializers.CharField(source='thumbnail_url', read_only=True)
    readingTime = serializers.CharField(source='reading_time_label', read_only=True)
    downloadCount = serializers.IntegerField(source='download_count', read_only=True)
    likesCount = serializers.SerializerMethodField()
    isApproved = serializers.BooleanField(source='is_approved', read_only=True)
    uploadedBy = PublicUserSerializer(source='uploaded_by', read_only=True)
    tags = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Note
        fields = [
            'id', 'title', 'subject', 'class_name', 'unit', 'description', 'content',
            'fileUrl', 'fileName', 'fileSize', 'thumbnailUrl', 'readingTime',
            'views', 'downloadCount', 'likesCount', 'isApproved', 'uploadedBy',
            'tags', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def get_likesCount(self, obj):
        # Reads the prefetched rows when the queryset used with_uploader()
        return len(obj.likes.all())

    def get_tags(self, obj):
        return [tag.name for tag in obj.tags.all()]


class NoteUploadResultSerializer(serializers.ModelSerializer):
    """Short confirmation returned by POST /api/notes/upload."""
    fileUrl = serializers.CharField(source='file_url', read_only=True)

    class Meta:
        model = Note
        fields = ['id', 'title', 'subject', 'fileUrl']
        read_only_fields = fields


class NoteUpdateSerializer(serializers.Serializer):
    """
    Owner edit payload. All fields optional; file fields are not accepted.

    Used for:
    - PATCH /api/notes/{id}
    """
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    subject = serializers.CharField(required=False, allow_blank=True, max_length=120)
    class_name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    unit = serializers.CharField(required=False, allow_blank=True, max_length=120)
    description = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField(required=False, allow_blank=True)
    tags = serializers.JSONField(required=False)

    def to_internal_value(self, data):
        if 'class' in data:
            data = {key: data.get(key) for key in data}
            data['class_name'] = data.pop('class')
        return super().to_internal_value(data)

    def validate_tags(self, value):
        if value is None:
            return ''
        if isinstance(value, str):
            names = value.split(',')
        elif isinstance(value, list) and all(isinstance(item, str) for item in value):
            names = value
        else:
            raise serializers.ValidationError('Tags must be a list of strings or a comma-separated string')
        if any(len(name.strip()) > TAG_NAME_MAX_LENGTH for name in names):
            raise serializers.ValidationError(f'Tags must be at most {TAG_NAME_MAX_LENGTH} characters')
        return value


class DownloadHistorySerializer(serializers.Serializer):
    """One entry of GET /api/users/downloads."""
    note = NoteSerializer(read_only=True)
    downloadedAt = serializers.DateTimeField(source='downloaded_at', read_only=True)


def note_page_payload(page, request=None):
    """List/search envelope: ``{notes, totalPages, currentPage, totalNotes}``."""
    context = {'request': request} if request is not None else {}
    return {
        'notes': NoteSerializer(page.notes, many=True, context=context).data,
        'totalPages': page.total_pages,
        'currentPage': page.page,
        'totalNotes': page.total,
    }
