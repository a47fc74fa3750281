"""Contact workflows; thin pass-through to the repository."""

from __future__ import annotations

from .contact import Contact
from .contracts import ContactInput
from ..errors import NotFoundError
from ..repository import ContactRepository


class ContactService:
    def __init__(self, repository: ContactRepository) -> None:
        self._repository = repository

    def list_contacts(self) -> list[Contact]:
        return self._repository.list_contacts()

    def create_contact(self, payload: ContactInput) -> Contact:
        return self._repository.create_contact(payload)

    def get_contact(self, contact_id: int) -> Contact:
        contact = self._repository.get_contact(contact_id)
        if contact is None:
            raise NotFoundError("contact not found")
        return contact

    def update_contact(self, contact_id: int, payload: ContactInput) -> Contact:
        contact = self._repository.update_contact(contact_id, payload)
        if contact is None:
            raise NotFoundError("contact not found")
        return contact

    def delete_contact(self, contact_id: int) -> None:
        if not self._repository.delete_contact(contact_id):
            raise NotFoundError("contact not found")
