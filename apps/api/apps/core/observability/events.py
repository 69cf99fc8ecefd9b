"""
Domain events logging helpers.

Provides structured event logging for note and account operations.
"""
from typing import Dict, Optional
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'note_uploaded', 'note_deleted')
        entity_type: Type of entity (e.g., 'Note', 'User')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, etc.)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'note_uploaded',
            entity_type='Note',
            entity_id=str(note.id),
            entity_ids={'uploaded_by': str(user.id)},
            file_size=note.file_size,
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    # Sanitize extra fields
    sanitized_extra = sanitize_dict(extra_fields)
    event_data.update(sanitized_extra)

    # Log at appropriate level based on result
    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'rejected']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_note_uploaded(note):
    """Log a committed note upload."""
    log_domain_event(
        'note_uploaded',
        entity_type='Note',
        entity_id=str(note.id),
        entity_ids={'uploaded_by': str(note.uploaded_by_id)},
        file_size=note.file_size,
        subject=note.subject,
    )


def log_upload_cleanup(stored_name, reason, **extra):
    """Log removal of a stored file after a later upload step failed."""
    log_domain_event(
        'note_upload_cleanup',
        entity_type='NoteFile',
        entity_id=stored_name,
        result='warning',
        reason=reason,
        **extra
    )


def log_note_deleted(note_id, owner_id, file_removed):
    """Log a note deletion by its owner."""
    log_domain_event(
        'note_deleted',
        entity_type='Note',
        entity_id=str(note_id),
        entity_ids={'uploaded_by': str(owner_id)},
        file_removed=file_removed,
    )


def log_note_file_missing(note, operation):
    """Log a note whose stored file is gone from disk."""
    log_domain_event(
        'note_file_missing',
        entity_type='Note',
        entity_id=str(note.id),
        result='error',
        operation=operation,
        file_path=note.file_path,
    )
