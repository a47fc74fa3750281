"""Request gate resolving the caller identity from a session token."""

import logging

from fastapi import Request

from ..errors import AuthError
from .tokens import TokenService

logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"
BEARER_SCHEME = "Bearer"
TOKEN_COOKIE = "token"


class AuthGate:
    """FastAPI dependency that admits only requests carrying a valid token.

    The ``token`` cookie is consulted first; the ``Authorization: Bearer``
    header is only read when the cookie is absent or empty. On success the
    subject is stored on ``request.state`` under :data:`USER_ID_KEY`.
    """

    def __init__(self, cookie_name: str = TOKEN_COOKIE) -> None:
        self.cookie_name = cookie_name

    def extract_token(self, request: Request) -> str:
        """Return the raw token carried by ``request`` or raise :class:`AuthError`."""
        token = request.cookies.get(self.cookie_name)
        if token:
            return token

        header = request.headers.get("Authorization")
        if not header:
            raise AuthError("authentication token not provided")
        parts = header.split(" ")
        if len(parts) != 2 or parts[0] != BEARER_SCHEME:
            raise AuthError("malformed Authorization header, expected 'Bearer <token>'")
        return parts[1]

    def __call__(self, request: Request) -> str:
        token_service: TokenService = request.app.state.token_service
        try:
            subject = token_service.verify(self.extract_token(request))
        except AuthError as exc:
            logger.debug("rejected %s %s: %s", request.method, request.url.path, exc.message)
            raise
        setattr(request.state, USER_ID_KEY, subject)
        return subject


require_user = AuthGate()


def current_user_id(request: Request) -> str | None:
    """Identity attached by :class:`AuthGate`, or ``None`` for ungated requests."""
    return getattr(request.state, USER_ID_KEY, None)
