"""Issuing and validating application JWTs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt

from ..errors import AuthError

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "HS256"
# Only the HMAC family is accepted; anything else in the header is rejected.
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]
REQUIRED_CLAIMS = ["sub", "iat", "nbf", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified contents of a session token."""

    subject: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": self.subject,
            "iat": int(self.issued_at.timestamp()),
            "nbf": int(self.not_before.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenClaims":
        return cls(
            subject=str(payload["sub"]),
            issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc),
            not_before=datetime.fromtimestamp(payload["nbf"], timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
        )


class TokenService:
    """Signs and verifies stateless bearer tokens with a shared HMAC secret."""

    def __init__(
        self,
        secret: str | None,
        *,
        algorithm: str = SIGNING_ALGORITHM,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Keep the signing secret; ``None`` leaves the service unusable but importable."""
        if algorithm not in ACCEPTED_ALGORITHMS:
            raise ValueError(f"unsupported signing algorithm: {algorithm}")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock

    def _require_secret(self) -> str:
        if not self._secret:
            logger.error("token signing secret is not configured")
            raise AuthError("token signing is not configured")
        return self._secret

    def issue(self, subject_id: int | str, ttl_hours: int) -> str:
        """Create a signed JWT for an authenticated account.

        Parameters
        ----------
        subject_id:
            Account identifier embedded in the ``sub`` claim.
        ttl_hours:
            Token lifetime; ``exp`` is set this many hours after ``iat``.

        Returns
        -------
        str
            The encoded JWT.

        Raises
        ------
        AuthError
            When no signing secret is configured.
        """
        secret = self._require_secret()
        now = self._clock()
        claims = TokenClaims(
            subject=str(subject_id),
            issued_at=now,
            not_before=now,
            expires_at=now + timedelta(hours=ttl_hours),
        )
        return jwt.encode(claims.to_payload(), secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        """Verify ``token`` and return its claim set.

        Raises
        ------
        AuthError
            On a bad signature, a non-HMAC algorithm, a token that is not yet
            valid or already expired, or any structural defect.
        """
        secret = self._require_secret()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=ACCEPTED_ALGORITHMS,
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
            claims = TokenClaims.from_payload(payload)
        except jwt.InvalidAlgorithmError as exc:
            raise AuthError("token signing algorithm is not accepted") from exc
        except jwt.InvalidSignatureError as exc:
            raise AuthError("token signature is invalid") from exc
        except (jwt.PyJWTError, TypeError, ValueError, OverflowError, OSError) as exc:
            raise AuthError("token is invalid") from exc

        # nbf/exp are checked against the same clock that stamps them in issue().
        now = self._clock()
        if now < claims.not_before:
            raise AuthError("token is not yet valid")
        if now > claims.expires_at:
            raise AuthError("token has expired")
        return claims

    def verify(self, token: str) -> str:
        """Return the subject identifier of a valid token."""
        return self.decode(token).subject
