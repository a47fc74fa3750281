"""HTTP routes for contact records."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from ..domain.contact import Contact
from ..domain.contacts import ContactService
from ..domain.contracts import ContactInput

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


class ContactResponse(BaseModel):
    id: int
    first_name: str
    second_name: str
    email: str
    phone: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, contact: Contact) -> "ContactResponse":
        return cls(
            id=contact.id,
            first_name=contact.first_name,
            second_name=contact.second_name,
            email=contact.email,
            phone=contact.phone,
            created_at=contact.created_at.isoformat(),
            updated_at=contact.updated_at.isoformat(),
        )


class ContactRequest(BaseModel):
    """Body for creating or replacing a contact; every field is required."""

    first_name: str = Field(..., min_length=1)
    second_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)

    def to_input(self) -> ContactInput:
        return ContactInput(
            first_name=self.first_name,
            second_name=self.second_name,
            email=self.email,
            phone=self.phone,
        )


class ContactEnvelope(BaseModel):
    msg: str
    data: ContactResponse


class ContactListEnvelope(BaseModel):
    msg: str
    data: list[ContactResponse]


class MessageEnvelope(BaseModel):
    msg: str


def get_contact_service(request: Request) -> ContactService:
    service: ContactService = request.app.state.contact_service
    return service


@router.get("/", response_model=ContactListEnvelope)
def list_contacts(service: ContactService = Depends(get_contact_service)) -> ContactListEnvelope:
    contacts = service.list_contacts()
    return ContactListEnvelope(
        msg="Fetched contacts successfully!",
        data=[ContactResponse.from_domain(contact) for contact in contacts],
    )


@router.post("/", response_model=ContactEnvelope, status_code=status.HTTP_201_CREATED)
def create_contact(
    payload: ContactRequest,
    service: ContactService = Depends(get_contact_service),
) -> ContactEnvelope:
    contact = service.create_contact(payload.to_input())
    return ContactEnvelope(msg="Contact created successfully!", data=ContactResponse.from_domain(contact))


@router.get("/{contact_id}", response_model=ContactEnvelope)
def get_contact(
    contact_id: int,
    service: ContactService = Depends(get_contact_service),
) -> ContactEnvelope:
    contact = service.get_contact(contact_id)
    return ContactEnvelope(msg="Fetched contact successfully!", data=ContactResponse.from_domain(contact))


@router.put("/{contact_id}", response_model=ContactEnvelope)
def update_contact(
    contact_id: int,
    payload: ContactRequest,
    service: ContactService = Depends(get_contact_service),
) -> ContactEnvelope:
    """Replace every field of an existing contact."""
    contact = service.update_contact(contact_id, payload.to_input())
    return ContactEnvelope(msg="Contact updated successfully!", data=ContactResponse.from_domain(contact))


@router.delete("/{contact_id}", response_model=MessageEnvelope)
def delete_contact(
    contact_id: int,
    service: ContactService = Depends(get_contact_service),
) -> MessageEnvelope:
    service.delete_contact(contact_id)
    return MessageEnvelope(msg="Contact deleted successfully!")
