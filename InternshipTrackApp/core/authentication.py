"""Bearer-token authentication resolving tokens to active portal subjects."""

from typing import Any

from rest_framework.request import Request
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from InternshipTrackApp.core.exceptions import AuthenticationError
from InternshipTrackApp.domain.services.directory_service import get_active_subject


def decode_access_token(raw: str | bytes) -> AccessToken:
    try:
        return AccessToken(raw)
    except TokenError as exc:
        raise AuthenticationError("Not authorized, token failed.") from exc


def _subject_id(token: AccessToken) -> Any:
    try:
        return token[api_settings.USER_ID_CLAIM]
    except KeyError:
        raise AuthenticationError("Token contained no recognizable user identification.") from None


def resolve_token(raw: str | bytes) -> Any:
    """Subject id carried by a valid access token."""
    return _subject_id(decode_access_token(raw))


class SubjectJWTAuthentication(JWTAuthentication):
    """JWT authentication that also refuses deactivated accounts."""

    def authenticate(self, request: Request):
        header = self.get_header(request)
        if header is None:
            return None
        raw = self.get_raw_token(header)
        if raw is None:
            return None
        token = decode_access_token(raw)
        return get_active_subject(_subject_id(token)), token
