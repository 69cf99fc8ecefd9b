"""
Note lifecycle: upload, catalog queries, engagement counters, edits and deletion.

Views call ``NoteService.from_settings()`` per request; tests construct the
service directly with their own file store and limits.
"""
import math
import os
from dataclasses import dataclass
from typing import List

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, connections, transaction
from django.utils import timezone

from apps.core.observability import get_sanitized_logger, log_domain_event, metrics
from apps.core.observability.events import (
    log_note_deleted,
    log_note_file_missing,
    log_note_uploaded,
    log_upload_cleanup,
)
from apps.notes.exceptions import (
    FileTooLarge,
    NoteFileMissing,
    NoteNotFound,
    NoteValidationError,
    NotNoteOwner,
    StorageFailure,
    UnsupportedFileType,
)
from apps.notes.models import TAG_NAME_MAX_LENGTH, Note, NoteDownload, NoteLike, Tag
from apps.notes.querysets import page_bounds
from apps.notes.storage import NoteFileStore

logger = get_sanitized_logger(__name__)


ALLOWED_EXTENSIONS = {'pdf', 'doc', 'docx', 'txt', 'ppt', 'pptx'}
ALLOWED_MIME_TYPES = {
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'text/plain',
    'application/vnd.ms-powerpoint',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation',
}

EDITABLE_FIELDS = ('title', 'subject', 'class_name', 'unit', 'description', 'content')

REQUIRED_MESSAGES = {
    'title': 'Title is required',
    'subject': 'Subject is required',
    'class_name': 'Class is required',
    'unit': 'Unit is required',
}
MIN_LENGTHS = {
    'description': (10, 'Description must be at least 10 characters'),
    'content': (50, 'Content must be at least 50 characters'),
}
TAG_TOO_LONG_MESSAGE = f'Tags must be at most {TAG_NAME_MAX_LENGTH} characters'

# Model field -> wire field, where they differ
WIRE_FIELD_NAMES = {'class_name': 'class'}


def wire_field(name):
    return WIRE_FIELD_NAMES.get(name, name)


def parse_tags(raw):
    """
    Normalize tags given as a comma-separated string or a list.

    Blank entries are dropped, names are lower-cased, and duplicates
    collapse while keeping first-seen order.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(',')
    tags = []
    for item in raw:
        name = str(item).strip().lower()
        if name and name not in tags:
            tags.append(name)
    return tags


def errors_from_model_validation(exc):
    """Flatten a Django ValidationError into ``[{'field', 'message'}]``."""
    if not hasattr(exc, 'message_dict'):
        return [{'field': 'non_field_errors', 'message': message} for message in exc.messages]
    return [
        {'field': wire_field(field), 'message': message}
        for field, messages in exc.message_dict.items()
        for message in messages
    ]


@dataclass
class NotePage:
    notes: List[Note]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self):
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class LikeState:
    liked: bool
    likes_count: int


@dataclass
class NoteDownloadHandle:
    """Open file stream plus the name the client should save it under."""
    note: Note
    stream: object
    file_name: str


class NoteService:
    """
    Note operations with explicit storage and limits.

    Usage:
        service = NoteService.from_settings()
        note = service.upload(request.user, metadata, request.FILES.get('file'))
    """

    def __init__(
        self,
        file_store: NoteFileStore,
        max_upload_bytes: int,
        default_thumbnail: str,
        related_limit: int = 3,
    ):
        self.file_store = file_store
        self.max_upload_bytes = max_upload_bytes
        self.default_thumbnail = default_thumbnail
        self.related_limit = related_limit

    @classmethod
    def from_settings(cls):
        return cls(
            file_store=NoteFileStore.from_settings(),
            max_upload_bytes=settings.NOTES_MAX_UPLOAD_BYTES,
            default_thumbnail=settings.NOTES_DEFAULT_THUMBNAIL,
            related_limit=settings.NOTES_RELATED_LIMIT,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_metadata(self, metadata):
        """Return ``[{'field', 'message'}]`` for every metadata problem."""
        errors = []
        for field, message in REQUIRED_MESSAGES.items():
            if not str(metadata.get(field) or '').strip():
                errors.append({'field': wire_field(field), 'message': message})
        for field, (minimum, message) in MIN_LENGTHS.items():
            if len(str(metadata.get(field) or '').strip()) < minimum:
                errors.append({'field': field, 'message': message})
        if any(len(name) > TAG_NAME_MAX_LENGTH for name in parse_tags(metadata.get('tags'))):
            errors.append({'field': 'tags', 'message': TAG_TOO_LONG_MESSAGE})
        return errors

    def validate_file(self, upload):
        """
        Check extension, declared MIME type and size.

        Raises:
            UnsupportedFileType: extension or MIME type not allowed
            FileTooLarge: larger than ``max_upload_bytes``
        """
        extension = os.path.splitext(upload.name or '')[1].lower().lstrip('.')
        if extension not in ALLOWED_EXTENSIONS:
            raise UnsupportedFileType()
        content_type = (getattr(upload, 'content_type', '') or '').split(';')[0].strip().lower()
        if content_type not in ALLOWED_MIME_TYPES:
            raise UnsupportedFileType()
        if upload.size > self.max_upload_bytes:
            raise FileTooLarge(self.max_upload_bytes)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, uploader, metadata, upload):
        """
        Validate, store the file, then insert the note and link its tags.

        Nothing is written until metadata and file both pass validation.
        If the database step fails the stored file is removed again.
        """
        errors = self.validate_metadata(metadata)
        if upload is None:
            errors.append({'field': 'file', 'message': 'File is required'})
        if errors:
            metrics.notes_uploaded_total.labels(result='rejected').inc()
            raise NoteValidationError(errors)
        try:
            self.validate_file(upload)
        except NoteValidationError:
            metrics.notes_uploaded_total.labels(result='rejected').inc()
            raise

        stored = self.file_store.save(upload, upload.name)

        try:
            note = self._insert(uploader, metadata, upload.name, stored)
        except ValidationError as e:
            self._discard(stored, reason='validation')
            metrics.notes_uploaded_total.labels(result='rejected').inc()
            raise NoteValidationError(errors_from_model_validation(e)) from e
        except DatabaseError as e:
            self._discard(stored, reason='database')
            metrics.notes_uploaded_total.labels(result='failure').inc()
            raise StorageFailure(f'Could not save note record: {e}') from e

        metrics.notes_uploaded_total.labels(result='success').inc()
        metrics.notes_upload_bytes.observe(stored.size)
        log_note_uploaded(note)
        return note

    def _insert(self, uploader, metadata, original_name, stored):
        with transaction.atomic():
            note = Note(
                title=str(metadata.get('title') or '').strip(),
                subject=str(metadata.get('subject') or '').strip(),
                class_name=str(metadata.get('class_name') or '').strip(),
                unit=str(metadata.get('unit') or '').strip(),
                description=str(metadata.get('description') or '').strip(),
                content=str(metadata.get('content') or '').strip(),
                file_path=stored.name,
                file_url=stored.url,
                file_name=os.path.basename(original_name),
                file_size=stored.size,
                thumbnail_url=self.default_thumbnail,
                uploaded_by=uploader,
            )
            note.full_clean()
            note.save()
            note.tags.set(self._tags_for(parse_tags(metadata.get('tags'))))
        return note

    def _tags_for(self, names):
        return [Tag.objects.get_or_create(name=name)[0] for name in names]

    def _discard(self, stored, reason):
        try:
            self.file_store.delete(stored.name)
        except StorageFailure as e:
            logger.error(
                'Could not remove file after failed upload',
                extra={'event': 'note_upload_cleanup_failed', 'stored_name': stored.name, 'error': str(e)}
            )
            return
        metrics.notes_upload_cleanup_total.labels(reason=reason).inc()
        log_upload_cleanup(stored.name, reason)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _page(self, queryset, page, limit):
        total = queryset.count()
        start, end = page_bounds(page, limit)
        return NotePage(
            notes=list(queryset.with_uploader()[start:end]),
            total=total,
            page=page,
            limit=limit,
        )

    def list(self, subject=None, class_name=None, search=None, page=1, limit=12, sort=None):
        """
        Approved notes matching the filters, one page at a time.

        A non-blank ``search`` switches to relevance order; otherwise
        ``sort`` applies (newest first by default).
        """
        queryset = Note.objects.approved().filter_catalog(subject=subject, class_name=class_name)
        if search and search.strip():
            queryset = queryset.text_search(search)
        else:
            queryset = queryset.sorted_by(sort)
        return self._page(queryset, page, limit)

    @metrics.track_duration(metrics.note_search_duration_seconds)
    def search(self, q, page=1, limit=12):
        """
        Relevance-ordered text search over approved notes.

        Raises:
            InvalidQuery: ``q`` is missing or blank; no query is run.
        """
        queryset = Note.objects.approved().text_search(q)
        engine = 'postgres' if connections[queryset.db].vendor == 'postgresql' else 'fallback'
        result = self._page(queryset, page, limit)
        metrics.note_searches_total.labels(engine=engine).inc()
        return result

    def uploads_of(self, user, page=1, limit=12):
        """The user's own uploads, any approval state, newest first."""
        queryset = Note.objects.filter(uploaded_by=user).sorted_by(None)
        return self._page(queryset, page, limit)

    def get(self, note_id):
        """Count a view, then return the note. Every call counts."""
        Note.objects.bump_views(note_id)
        return self._fetch(note_id)

    def related(self, note_id, limit=None):
        note = self._fetch(note_id)
        limit = limit or self.related_limit
        return list(Note.objects.with_uploader().related_to(note, limit))

    def _fetch(self, note_id):
        try:
            return Note.objects.with_uploader().get(pk=note_id)
        except Note.DoesNotExist:
            raise NoteNotFound()

    # ------------------------------------------------------------------
    # Engagement
    # ------------------------------------------------------------------

    def download(self, note_id, user):
        """
        Open the note's file, count the download and record it in the
        user's history (once per note).

        Raises:
            NoteNotFound: no such note
            NoteFileMissing: the note's file is gone from storage
        """
        note = self._fetch(note_id)
        try:
            stream = self.file_store.open(note.file_path)
        except StorageFailure as e:
            metrics.note_downloads_total.labels(result='file_missing').inc()
            log_note_file_missing(note, operation='download')
            raise NoteFileMissing() from e

        try:
            Note.objects.bump_downloads(note.pk)
            NoteDownload.objects.get_or_create(user=user, note=note)
        except Exception:
            stream.close()
            raise

        metrics.note_downloads_total.labels(result='success').inc()
        log_domain_event(
            'note_downloaded',
            entity_type='Note',
            entity_id=str(note.id),
            entity_ids={'actor_id': str(user.pk)},
        )
        return NoteDownloadHandle(note=note, stream=stream, file_name=note.file_name)

    def toggle_like(self, note_id, user):
        """Like the note if ``user`` has not, otherwise remove the like."""
        if not Note.objects.filter(pk=note_id).exists():
            raise NoteNotFound()

        with transaction.atomic():
            removed, _ = NoteLike.objects.filter(note_id=note_id, user=user).delete()
            liked = not removed
            if liked:
                try:
                    with transaction.atomic():
                        NoteLike.objects.create(note_id=note_id, user=user)
                except IntegrityError:
                    # A concurrent request from the same user already liked it
                    pass
            Note.objects.filter(pk=note_id).update(updated_at=timezone.now())

        likes_count = NoteLike.objects.filter(note_id=note_id).count()
        metrics.note_likes_toggled_total.labels(state='liked' if liked else 'unliked').inc()
        log_domain_event(
            'note_like_toggled',
            entity_type='Note',
            entity_id=str(note_id),
            entity_ids={'actor_id': str(user.pk)},
            liked=liked,
        )
        return LikeState(liked=liked, likes_count=likes_count)

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def _owned(self, note_id, requester, action):
        note = self._fetch(note_id)
        if note.uploaded_by_id != requester.pk:
            logger.warning(
                'Note owner check failed',
                extra={
                    'event': 'note_owner_check_failed',
                    'action': action,
                    'note_id': str(note.id),
                    'actor_id': str(requester.pk),
                }
            )
            raise NotNoteOwner()
        return note

    def update(self, note_id, requester, changes):
        """
        Owner-only metadata edit.

        ``changes`` may carry any of title, subject, class_name, unit,
        description, content and tags; other keys (the file reference
        among them) are ignored. Reading time follows the new content.
        """
        note = self._owned(note_id, requester, action='update')

        merged = {field: getattr(note, field) for field in EDITABLE_FIELDS}
        merged.update({
            field: str(value).strip()
            for field, value in changes.items()
            if field in EDITABLE_FIELDS and value is not None
        })
        errors = self.validate_metadata({**merged, 'tags': changes.get('tags')})
        if errors:
            raise NoteValidationError(errors)

        for field in EDITABLE_FIELDS:
            setattr(note, field, merged[field])
        try:
            with transaction.atomic():
                note.full_clean()
                note.save()
                if 'tags' in changes:
                    note.tags.set(self._tags_for(parse_tags(changes['tags'])))
        except ValidationError as e:
            raise NoteValidationError(errors_from_model_validation(e)) from e

        log_domain_event(
            'note_updated',
            entity_type='Note',
            entity_id=str(note.id),
            fields=sorted(set(changes) & (set(EDITABLE_FIELDS) | {'tags'})),
        )
        return self._fetch(note.pk)

    def delete(self, note_id, requester):
        """
        Owner-only delete: remove the stored file, then the record.

        A file that cannot be removed is logged and does not block the
        record deletion. Likes, download history and the owner's upload
        list go with the record.
        """
        try:
            note = self._owned(note_id, requester, action='delete')
        except NotNoteOwner:
            metrics.notes_deleted_total.labels(result='forbidden').inc()
            raise

        file_removed = True
        try:
            self.file_store.delete(note.file_path)
        except StorageFailure as e:
            file_removed = False
            logger.error(
                'Could not remove note file',
                extra={'event': 'note_file_delete_failed', 'note_id': str(note.id), 'error': str(e)}
            )

        note_pk, owner_pk = note.pk, note.uploaded_by_id
        note.delete()

        metrics.notes_deleted_total.labels(result='success' if file_removed else 'file_missing').inc()
        log_note_deleted(note_pk, owner_pk, file_removed)
