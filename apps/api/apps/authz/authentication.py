"""
JWT authentication reading the access token from the Authorization header
or, for browser clients, from the auth cookie.
"""
from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken
from rest_framework_simplejwt.tokens import AccessToken

from apps.core.observability import get_sanitized_logger
from apps.core.observability.correlation import set_user_context

logger = get_sanitized_logger(__name__)


class CookieJWTAuthentication(JWTAuthentication):
    """
    Bearer header first, then the ``AUTH_COOKIE_NAME`` cookie.

    An invalid or expired token resolves to an anonymous request instead of
    failing outright: public endpoints keep working with a stale cookie, and
    gated endpoints still answer 401 through their IsAuthenticated check.
    """

    def authenticate(self, request):
        try:
            raw_token = self._raw_token(request)
            if raw_token is None:
                return None
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except (InvalidToken, AuthenticationFailed) as exc:
            logger.info(
                'Discarding invalid credential',
                extra={'event': 'auth_token_rejected', 'reason': exc.__class__.__name__}
            )
            return None

        set_user_context(user)
        return user, validated_token

    def _raw_token(self, request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
            if raw_token is not None:
                return raw_token

        cookie = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
        if cookie:
            return cookie.encode()
        return None


def issue_access_token(user):
    """Return a signed access token string for ``user``."""
    return str(AccessToken.for_user(user))


def set_auth_cookie(response, token):
    """Attach the access token cookie to ``response``."""
    lifetime = settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME']
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME, samesite=settings.AUTH_COOKIE_SAMESITE)
    return response
