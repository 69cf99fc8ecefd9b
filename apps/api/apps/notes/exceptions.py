"""
Note service errors.

Each class carries the HTTP status it maps to; the API exception handler
renders them as ``{"error": ..., "errors": [...]}``.
"""
from rest_framework import status

from apps.core.exceptions import ServiceError


class NoteServiceError(ServiceError):
    """Base class for every error raised by the note service."""


class NoteValidationError(NoteServiceError):
    """Metadata or file failed validation. ``errors`` lists each problem."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Validation failed'

    def __init__(self, errors=None, message=None):
        errors = list(errors or [])
        if message is None and errors:
            message = errors[0]['message']
        super().__init__(message=message, errors=errors)


class UnsupportedFileType(NoteValidationError):
    default_message = 'Invalid file type. Only PDF, DOC, DOCX, TXT, PPT, PPTX files are allowed.'

    def __init__(self, message=None):
        message = message or self.default_message
        super().__init__(errors=[{'field': 'file', 'message': message}], message=message)


class FileTooLarge(NoteValidationError):
    default_message = 'File size exceeds the maximum allowed'

    def __init__(self, max_bytes):
        self.max_bytes = max_bytes
        message = f'File size exceeds the maximum of {max_bytes / (1024 * 1024):g}MB'
        super().__init__(errors=[{'field': 'file', 'message': message}], message=message)


class InvalidQuery(NoteValidationError):
    default_message = 'Search query is required'

    def __init__(self, message=None):
        message = message or self.default_message
        super().__init__(errors=[{'field': 'q', 'message': message}], message=message)


class NoteNotFound(NoteServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Note not found'


class NotNoteOwner(NoteServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Not authorized'


class StorageFailure(NoteServiceError):
    """The file store could not complete an operation. Details stay in the logs."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'File storage operation failed'
    expose = False


class NoteFileMissing(StorageFailure):
    """A note record exists but its stored file does not."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'File not found'
    expose = True
