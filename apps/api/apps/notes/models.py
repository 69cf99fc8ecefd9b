"""
Notes models: note, tag, note_like, note_download
"""
import math
import uuid
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from apps.notes.querysets import NoteQuerySet


WORDS_PER_MINUTE = 200


def reading_time_minutes(content):
    """Minutes to read ``content`` at 200 words per minute, rounded up."""
    words = len((content or '').split())
    return math.ceil(words / WORDS_PER_MINUTE)


TAG_NAME_MAX_LENGTH = 64


class Tag(models.Model):
    """Free-form classification label. Names are stored lower-cased."""
    name = models.CharField(max_length=TAG_NAME_MAX_LENGTH, unique=True)

    class Meta:
        db_table = 'note_tag'
        ordering = ['name']

    def __str__(self):
        return self.name


class Note(models.Model):
    """
    Uploaded study note.

    Fields:
    - id: UUID PK
    - title, subject, class_name, unit, description, content: metadata
    - file_path, file_url, file_name, file_size: stored file reference,
      written once at upload
    - thumbnail_url: placeholder image unless one is provided
    - reading_time: minutes, derived from content
    - views, download_count: monotonic engagement counters
    - is_approved: gates catalog listing, search and related notes

    Relations:
    - uploaded_by: owning user
    - tags: many-to-many Tag
    - likes: NoteLike rows, one per liking user
    - download_records: NoteDownload rows
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=255)
    subject = models.CharField(max_length=120, db_index=True)
    class_name = models.CharField(max_length=120, db_column='class', db_index=True)
    unit = models.CharField(max_length=120)
    description = models.TextField()
    content = models.TextField()

    file_path = models.CharField(
        max_length=255,
        editable=False,
        help_text="Generated name of the file inside the upload directory"
    )
    file_url = models.CharField(max_length=512, editable=False)
    file_name = models.CharField(
        max_length=255,
        editable=False,
        help_text="Original client-side filename, used for downloads"
    )
    file_size = models.BigIntegerField(editable=False)
    thumbnail_url = models.CharField(max_length=512, blank=True)

    reading_time = models.PositiveIntegerField(default=0)
    views = models.PositiveIntegerField(default=0)
    download_count = models.PositiveIntegerField(default=0)
    is_approved = models.BooleanField(default=True)

    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='uploaded_notes',
    )
    tags = models.ManyToManyField(Tag, related_name='notes', blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = NoteQuerySet.as_manager()

    class Meta:
        db_table = 'note'
        verbose_name = 'Note'
        verbose_name_plural = 'Notes'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_approved', '-created_at'], name='idx_note_approved_created'),
            models.Index(fields=['uploaded_by', 'created_at'], name='idx_note_uploader_created'),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        errors = {}
        for field in ('title', 'subject', 'class_name', 'unit'):
            value = getattr(self, field) or ''
            if not value.strip():
                errors[field] = 'This field cannot be blank.'
        if len((self.description or '').strip()) < 10:
            errors['description'] = 'Description must be at least 10 characters'
        if len((self.content or '').strip()) < 50:
            errors['content'] = 'Content must be at least 50 characters'
        if errors:
            raise ValidationError(errors)
        self.reading_time = reading_time_minutes(self.content)

    @property
    def reading_time_label(self):
        return f'{self.reading_time} min'


class NoteLike(models.Model):
    """One user's like on one note."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='note_likes',
    )
    note = models.ForeignKey(Note, on_delete=models.CASCADE, related_name='likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'note_like'
        constraints = [
            models.UniqueConstraint(fields=['user', 'note'], name='uniq_note_like_user_note'),
        ]


class NoteDownload(models.Model):
    """Download history entry. A user has at most one row per note."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='downloads',
    )
    note = models.ForeignKey(Note, on_delete=models.CASCADE, related_name='download_records')
    downloaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'note_download'
        ordering = ['-downloaded_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'note'], name='uniq_note_download_user_note'),
        ]
