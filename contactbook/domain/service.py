"""Account service orchestrating password hashing, persistence, and token issuance."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from prometheus_client import Counter

from .account import Account
from .contracts import CreateAccountInput, RegisterAccountInput
from ..errors import AuthError, ConflictError, InternalError, NotFoundError, ValidationError
from ..repository import AccountRepository
from ..security.passwords import MAX_PASSWORD_BYTES, PasswordHasher
from ..security.tokens import TokenService

logger = logging.getLogger(__name__)

LOGIN_ATTEMPTS = Counter(
    "contactbook_login_attempts_total",
    "Login attempts partitioned by outcome.",
    ["outcome"],
)

INVALID_CREDENTIALS = "invalid username or password"


@dataclass(slots=True)
class LoginResult:
    """Token issued at login together with the authenticated account."""

    token: str
    account: Account


class AccountService:
    """Registration, login and identity lookup backed by Postgres storage."""

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        *,
        token_ttl_hours: int = 24,
    ) -> None:
        """Store the collaborators used by the account workflows."""
        self._repository = repository
        self._hasher = hasher
        self._tokens = tokens
        self._token_ttl_hours = token_ttl_hours

    def register(self, payload: RegisterAccountInput) -> Account:
        """Create an account after rejecting duplicate usernames."""
        if len(payload.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        if self._repository.get_account_by_username(payload.username) is not None:
            raise ConflictError("username already exists")

        account = self._repository.create_account(
            CreateAccountInput(
                username=payload.username,
                email=payload.email,
                password_hash=self._hasher.hash(payload.password),
                nickname=payload.nickname,
            )
        )
        logger.info("registered account %s (%s)", account.id, account.username)
        return account

    def login(self, username: str, password: str) -> LoginResult:
        """Check credentials and issue a session token.

        Unknown usernames and wrong passwords fail identically so the
        response does not reveal which accounts exist.
        """
        account = self._repository.get_account_by_username(username)
        if account is None or not self._hasher.verify(password, account.password_hash):
            LOGIN_ATTEMPTS.labels(outcome="rejected").inc()
            logger.info("login rejected for %r", username)
            raise AuthError(INVALID_CREDENTIALS)

        try:
            token = self._tokens.issue(account.id, self._token_ttl_hours)
        except AuthError as exc:
            LOGIN_ATTEMPTS.labels(outcome="error").inc()
            raise InternalError("failed to generate token") from exc

        LOGIN_ATTEMPTS.labels(outcome="success").inc()
        logger.info("account %s logged in", account.id)
        return LoginResult(token=token, account=account)

    def get_account(self, account_id: int | str) -> Account:
        """Re-fetch the account behind a resolved token subject."""
        try:
            key = int(account_id)
        except (TypeError, ValueError) as exc:
            raise AuthError("token subject is not an account identifier") from exc
        account = self._repository.get_account(key)
        if account is None:
            raise NotFoundError("user not found")
        return account
