"""
Notes URLs
"""
from django.urls import path

from .views import (
    NoteDetailView,
    NoteDownloadView,
    NoteLikeView,
    NoteListView,
    NoteSearchView,
    NoteUploadView,
    RelatedNotesView,
)

urlpatterns = [
    path('notes', NoteListView.as_view(), name='note-list'),
    path('notes/upload', NoteUploadView.as_view(), name='note-upload'),
    path('notes/search', NoteSearchView.as_view(), name='note-search'),
    path('notes/<uuid:pk>', NoteDetailView.as_view(), name='note-detail'),
    path('notes/<uuid:pk>/download', NoteDownloadView.as_view(), name='note-download'),
    path('notes/<uuid:pk>/like', NoteLikeView.as_view(), name='note-like'),
    path('notes/<uuid:pk>/related', RelatedNotesView.as_view(), name='note-related'),
]
