from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Contact:
    """Address book entry."""

    id: int
    first_name: str
    second_name: str
    email: str
    phone: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
