"""Database repositories for accounts and contacts."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import psycopg
from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contact import Contact
from .domain.contracts import ContactInput, CreateAccountInput
from .errors import ConflictError, InternalError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

_ACCOUNT_COLUMNS = "id, username, email, password, nickname, created_at, updated_at, deleted_at"
_CONTACT_COLUMNS = "id, first_name, second_name, email, phone, created_at, updated_at, deleted_at"


@contextmanager
def _datastore_errors(action: str) -> Iterator[None]:
    """Translate driver failures into the application error taxonomy."""
    try:
        yield
    except errors.UniqueViolation as exc:
        constraint = exc.diag.constraint_name or ""
        field = "email" if "email" in constraint else "username"
        raise ConflictError(f"{field} already exists") from exc
    except psycopg.Error as exc:
        logger.exception("datastore failure while trying to %s", action)
        raise InternalError(f"failed to {action}") from exc


def apply_schema(pool: ConnectionPool, path: Path = SCHEMA_PATH) -> None:
    """Create tables and indexes that do not exist yet."""
    ddl = path.read_text(encoding="utf-8")
    with _datastore_errors("apply schema"):
        with pool.connection() as conn:
            conn.execute(ddl)
            conn.commit()
    logger.info("database schema is up to date")


class AccountRepository:
    """Postgres-backed account persistence. Soft-deleted rows are invisible."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def create_account(self, payload: CreateAccountInput) -> Account:
        """Insert an account and return the stored row."""
        with _datastore_errors("create user"):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO users (username, email, password, nickname)
                        VALUES (%s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (payload.username, payload.email, payload.password_hash, payload.nickname),
                    )
                    row = cur.fetchone()
                conn.commit()
        return self._map_record(row)

    def get_account(self, account_id: int) -> Account | None:
        """Fetch a live account by surrogate id or return ``None``."""
        return self._fetch_one("id = %s", account_id)

    def get_account_by_username(self, username: str) -> Account | None:
        """Fetch a live account by username or return ``None``."""
        return self._fetch_one("username = %s", username)

    def _fetch_one(self, predicate: str, value: object) -> Account | None:
        with _datastore_errors("fetch user"):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_ACCOUNT_COLUMNS}
                        FROM users
                        WHERE {predicate} AND deleted_at IS NULL
                        """,
                        (value,),
                    )
                    row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            id=row[0],
            username=row[1],
            email=row[2],
            password_hash=row[3],
            nickname=row[4],
            created_at=row[5],
            updated_at=row[6],
            deleted_at=row[7],
        )


class ContactRepository:
    """Postgres-backed contact persistence with soft deletes."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_contacts(self) -> list[Contact]:
        with _datastore_errors("fetch contacts"):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_CONTACT_COLUMNS}
                        FROM contacts
                        WHERE deleted_at IS NULL
                        ORDER BY id
                        """
                    )
                    rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def create_contact(self, payload: ContactInput) -> Contact:
        with _datastore_errors("create contact"):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO contacts (first_name, second_name, email, phone)
                        VALUES (%s, %s, %s, %s)
                        RETURNING {_CONTACT_COLUMNS}
                        """,
                        (payload.first_name, payload.second_name, payload.email, payload.phone),
                    )
                    row = cur.fetchone()
                conn.commit()
        return self._map_record(row)

    def get_contact(self, contact_id: int) -> Contact | None:
        with _datastore_errors("fetch contact"):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_CONTACT_COLUMNS}
                        FROM contacts
                        WHERE id = %s AND deleted_at IS NULL
                        """,
                        (contact_id,),
                    )
                    row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def update_contact(self, contact_id: int, payload: ContactInput) -> Contact | None:
        """Replace the contact's fields; ``None`` when no live row matches."""
        with _datastore_errors("update contact"):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        UPDATE contacts
                        SET first_name = %s, second_name = %s, email = %s, phone = %s, updated_at = NOW()
                        WHERE id = %s AND deleted_at IS NULL
                        RETURNING {_CONTACT_COLUMNS}
                        """,
                        (
                            payload.first_name,
                            payload.second_name,
                            payload.email,
                            payload.phone,
                            contact_id,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        if not row:
            return None
        return self._map_record(row)

    def delete_contact(self, contact_id: int) -> bool:
        """Soft-delete a contact, returning whether a live row was marked."""
        with _datastore_errors("delete contact"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE contacts
                        SET deleted_at = NOW()
                        WHERE id = %s AND deleted_at IS NULL
                        """,
                        (contact_id,),
                    )
                    deleted = cur.rowcount == 1
                conn.commit()
        return deleted

    def _map_record(self, row: tuple) -> Contact:
        return Contact(
            id=row[0],
            first_name=row[1],
            second_name=row[2],
            email=row[3],
            phone=row[4],
            created_at=row[5],
            updated_at=row[6],
            deleted_at=row[7],
        )
