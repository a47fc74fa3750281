from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Registered user identity. ``password_hash`` never leaves the service."""

    id: int
    username: str
    email: str
    password_hash: str
    nickname: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
