"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterAccountInput:
    """Registration fields as submitted by the client."""

    username: str
    password: str
    email: str
    nickname: str = ""


@dataclass(slots=True)
class CreateAccountInput:
    """Validated account fields ready for persistence."""

    username: str
    email: str
    password_hash: str
    nickname: str = ""


@dataclass(slots=True)
class ContactInput:
    """Fields required to create or replace a contact."""

    first_name: str
    second_name: str
    email: str
    phone: str
