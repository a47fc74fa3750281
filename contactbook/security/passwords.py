"""Password hashing backed by bcrypt."""

from __future__ import annotations

import bcrypt

from ..errors import InternalError

BCRYPT_ROUNDS = 10
# bcrypt only consumes the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted, one-way password digests with a fixed bcrypt cost."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Return a bcrypt digest of ``password`` using a fresh random salt."""
        try:
            digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds))
        except ValueError as exc:
            raise InternalError("password hashing failed") from exc
        return digest.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a stored bcrypt digest.

        A mismatch returns ``False``; a stored value that is not a bcrypt
        digest raises :class:`InternalError`.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError as exc:
            raise InternalError("stored password hash is malformed") from exc
