"""
Authentication views: register, login, logout, current user, verification.
"""
from django.db import IntegrityError
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.authentication import clear_auth_cookie, issue_access_token, set_auth_cookie
from apps.authz.models import User
from apps.authz.serializers import (
    AccountSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSummarySerializer,
)
from apps.core.observability import get_sanitized_logger, log_domain_event, metrics

logger = get_sanitized_logger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'


def _token_response(user, message, status_code):
    token = issue_access_token(user)
    response = Response(
        {'message': message, 'token': token, 'user': UserSummarySerializer(user).data},
        status=status_code,
    )
    return set_auth_cookie(response, token)


class RegisterView(APIView):
    """
    POST /api/auth/register

    Creates the account, issues a token, and sets the auth cookie.
    Duplicate email, username or mobile number answer 400.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            metrics.users_registered_total.labels(result='rejected').inc()
            serializer.is_valid(raise_exception=True)

        try:
            user = serializer.save()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same identity
            metrics.users_registered_total.labels(result='conflict').inc()
            return Response(
                {'error': 'Account already registered'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        metrics.users_registered_total.labels(result='success').inc()
        log_domain_event(
            'user_registered',
            entity_type='User',
            entity_id=str(user.id),
        )
        return _token_response(user, 'User registered successfully', status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/auth/login

    ``username`` may hold either the username or the email address.
    Unknown accounts and wrong passwords produce the same 401 body.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        login = serializer.validated_data['username']
        password = serializer.validated_data['password']

        try:
            user = User.objects.get_by_login(login)
        except (User.DoesNotExist, User.MultipleObjectsReturned):
            user = None

        if user is None or not user.is_active or not user.check_password(password):
            metrics.auth_logins_total.labels(result='rejected').inc()
            logger.info('Login rejected', extra={'event': 'login_rejected'})
            return Response({'error': INVALID_CREDENTIALS}, status=status.HTTP_401_UNAUTHORIZED)

        metrics.auth_logins_total.labels(result='success').inc()
        return _token_response(user, 'Login successful', status.HTTP_200_OK)


class LogoutView(APIView):
    """POST /api/auth/logout - clears the auth cookie."""
    permission_classes = [AllowAny]

    def post(self, request):
        response = Response({'message': 'Logged out successfully'})
        return clear_auth_cookie(response)


class CurrentUserView(APIView):
    """GET /api/auth/me - the authenticated account without its password hash."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(AccountSerializer(request.user).data)


class VerifyEmailView(APIView):
    """
    POST /api/auth/verify-email

    Marks the caller's email as verified. No code is exchanged; delivery
    of verification messages is handled outside this service.
    """
    permission_classes = [IsAuthenticated]
    flag = 'is_email_verified'
    message = 'Email verified successfully'

    def post(self, request):
        user = request.user
        setattr(user, self.flag, True)
        user.save(update_fields=[self.flag, 'updated_at'])
        log_domain_event(
            'user_verified',
            entity_type='User',
            entity_id=str(user.id),
            channel=self.flag,
        )
        return Response({'message': self.message})


class VerifyMobileView(VerifyEmailView):
    """POST /api/auth/verify-mobile"""
    flag = 'is_mobile_verified'
    message = 'Mobile number verified successfully'
