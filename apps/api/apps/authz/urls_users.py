"""
Authz URLs - user profiles
"""
from django.urls import path

from .views_users import (
    DownloadHistoryView,
    MyNotesView,
    ProfileUpdateView,
    PublicProfileView,
    UserStatsView,
)

urlpatterns = [
    path('profile', ProfileUpdateView.as_view(), name='user-profile-update'),
    path('profile/<str:username>', PublicProfileView.as_view(), name='user-profile'),
    path('notes', MyNotesView.as_view(), name='user-notes'),
    path('downloads', DownloadHistoryView.as_view(), name='user-downloads'),
    path('stats', UserStatsView.as_view(), name='user-stats'),
]
