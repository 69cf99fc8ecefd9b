"""
Authz URLs - authentication
"""
from django.urls import path

from .views import (
    CurrentUserView,
    LoginView,
    LogoutView,
    RegisterView,
    VerifyEmailView,
    VerifyMobileView,
)

urlpatterns = [
    path('register', RegisterView.as_view(), name='auth-register'),
    path('login', LoginView.as_view(), name='auth-login'),
    path('logout', LogoutView.as_view(), name='auth-logout'),
    path('me', CurrentUserView.as_view(), name='auth-me'),
    path('verify-email', VerifyEmailView.as_view(), name='auth-verify-email'),
    path('verify-mobile', VerifyMobileView.as_view(), name='auth-verify-mobile'),
]
