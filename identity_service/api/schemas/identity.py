"""Request and response models for the identity endpoints.

Field names mirror the public JSON contract, hence the camelCase.
"""

from datetime import datetime

from pydantic import BaseModel, StrictInt, StrictStr

from identity_service.domain.models.identity import IdentityView


class IdentifyRequest(BaseModel):
    """Identify request; at least one field must be present."""

    email: StrictStr | None = None
    phoneNumber: StrictStr | StrictInt | None = None


class IdentifiedContact(BaseModel):
    """Consolidated contact returned by /identify."""

    primaryContactId: int
    emails: list[str]
    phoneNumbers: list[str]
    secondaryContactIds: list[int]

    @classmethod
    def from_view(cls, view: IdentityView) -> "IdentifiedContact":
        return cls(
            primaryContactId=view.primary_id,
            emails=view.emails,
            phoneNumbers=view.phone_numbers,
            secondaryContactIds=view.secondary_ids,
        )


class IdentifyResponse(BaseModel):
    """Identify response."""

    contact: IdentifiedContact


class ContactRecord(BaseModel):
    """Raw contact row as stored."""

    id: int
    phonenumber: str | None
    email: str | None
    linkedid: int | None
    linkprecedence: str
    createdat: datetime
    updatedat: datetime
    deletedat: datetime | None

    @classmethod
    def from_contact(cls, contact) -> "ContactRecord":
        return cls(
            id=contact.id,
            phonenumber=contact.phone_number,
            email=contact.email,
            linkedid=contact.linked_id,
            linkprecedence=contact.link_precedence,
            createdat=contact.created_at,
            updatedat=contact.updated_at,
            deletedat=contact.deleted_at,
        )


class DeleteContactResponse(BaseModel):
    """Single contact deletion response."""

    success: bool = True
    message: str
    deletedContactId: int
    deletedContactIds: list[int]


class DeleteAllContactsResponse(BaseModel):
    """Bulk deletion response."""

    success: bool = True
    message: str
    deletedCount: int


class StoreProbeResponse(BaseModel):
    """Store connectivity probe response."""

    now: datetime | str
    version: str


class ErrorResponse(BaseModel):
    """Error body for every failed request."""

    error: str
