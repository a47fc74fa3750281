from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from contactbook.config import Settings
from contactbook.domain.account import Account
from contactbook.domain.contact import Contact
from contactbook.domain.contacts import ContactService
from contactbook.domain.contracts import ContactInput, CreateAccountInput
from contactbook.domain.service import AccountService
from contactbook.errors import ConflictError
from contactbook.main import create_app
from contactbook.security.passwords import PasswordHasher
from contactbook.security.tokens import TokenService

TEST_SECRET = "test-signing-secret-" + "0123456789abcdef" * 4


class FakeAccountRepository:
    """In-memory repository mimicking the Postgres account table."""

    def __init__(self) -> None:
        self.accounts: dict[int, Account] = {}
        self._seq = 0

    def create_account(self, payload: CreateAccountInput) -> Account:
        for existing in self.accounts.values():
            if existing.username == payload.username:
                raise ConflictError("username already exists")
            if existing.email == payload.email:
                raise ConflictError("email already exists")
        self._seq += 1
        now = datetime.now(timezone.utc)
        account = Account(
            id=self._seq,
            username=payload.username,
            email=payload.email,
            password_hash=payload.password_hash,
            nickname=payload.nickname,
            created_at=now,
            updated_at=now,
        )
        self.accounts[account.id] = account
        return account

    def get_account(self, account_id: int) -> Account | None:
        return self.accounts.get(account_id)

    def get_account_by_username(self, username: str) -> Account | None:
        for account in self.accounts.values():
            if account.username == username:
                return account
        return None


class FakeContactRepository:
    """In-memory contact table with soft deletes."""

    def __init__(self) -> None:
        self.contacts: dict[int, Contact] = {}
        self._seq = 0

    def _live(self, contact_id: int) -> Contact | None:
        contact = self.contacts.get(contact_id)
        if contact is None or contact.deleted_at is not None:
            return None
        return contact

    def list_contacts(self) -> list[Contact]:
        return [c for _, c in sorted(self.contacts.items()) if c.deleted_at is None]

    def create_contact(self, payload: ContactInput) -> Contact:
        self._seq += 1
        now = datetime.now(timezone.utc)
        contact = Contact(
            id=self._seq,
            first_name=payload.first_name,
            second_name=payload.second_name,
            email=payload.email,
            phone=payload.phone,
            created_at=now,
            updated_at=now,
        )
        self.contacts[contact.id] = contact
        return contact

    def get_contact(self, contact_id: int) -> Contact | None:
        return self._live(contact_id)

    def update_contact(self, contact_id: int, payload: ContactInput) -> Contact | None:
        contact = self._live(contact_id)
        if contact is None:
            return None
        updated = replace(
            contact,
            first_name=payload.first_name,
            second_name=payload.second_name,
            email=payload.email,
            phone=payload.phone,
            updated_at=datetime.now(timezone.utc),
        )
        self.contacts[contact_id] = updated
        return updated

    def delete_contact(self, contact_id: int) -> bool:
        contact = self._live(contact_id)
        if contact is None:
            return False
        contact.deleted_at = datetime.now(timezone.utc)
        return True


def build_test_app(secret: str | None = TEST_SECRET):
    """Application with in-memory repositories and a fast bcrypt cost."""
    settings = Settings(jwt_secret=secret, auto_migrate=False)
    app = create_app(settings, with_datastore=False)
    accounts = FakeAccountRepository()
    contacts = FakeContactRepository()
    app.state.account_service = AccountService(
        accounts,
        PasswordHasher(rounds=4),
        app.state.token_service,
        token_ttl_hours=settings.token_ttl_hours,
    )
    app.state.contact_service = ContactService(contacts)
    return app, accounts, contacts


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def api_client():
    """Provide a FastAPI test client with isolated in-memory state."""
    app, accounts, contacts = build_test_app()
    with TestClient(app) as client:
        yield client, accounts, contacts


@pytest.fixture
def signing_secret() -> str:
    return TEST_SECRET


@pytest.fixture
def make_app():
    """Factory for apps with non-default construction, e.g. a missing secret."""
    return build_test_app
