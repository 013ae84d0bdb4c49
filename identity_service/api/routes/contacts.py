"""Contacts API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.api.schemas.identity import (
    ContactRecord,
    DeleteAllContactsResponse,
    DeleteContactResponse,
    ErrorResponse,
)
from identity_service.domain.services.contact_lifecycle_service import ContactLifecycleService
from identity_service.persistence.database import get_db

router = APIRouter()


@router.get("", response_model=list[ContactRecord])
async def list_contacts(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[ContactRecord]:
    """List every active contact ordered by ID."""
    lifecycle_service = ContactLifecycleService(db)

    contacts = await lifecycle_service.list_active()

    return [ContactRecord.from_contact(c) for c in contacts]


@router.delete(
    "",
    response_model=DeleteAllContactsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def delete_all_contacts(
    db: Annotated[AsyncSession, Depends(get_db)],
    confirm: Annotated[str | None, Query()] = None,
) -> DeleteAllContactsResponse:
    """Soft-delete every active contact. Requires ?confirm=true."""
    lifecycle_service = ContactLifecycleService(db)

    count = await lifecycle_service.delete_all(confirmed=confirm == "true")

    return DeleteAllContactsResponse(
        message=f"Deleted {count} contacts",
        deletedCount=count,
    )


@router.delete(
    "/{contact_id}",
    response_model=DeleteContactResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_contact(
    contact_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DeleteContactResponse:
    """Soft-delete a contact; deleting a primary removes its whole identity."""
    lifecycle_service = ContactLifecycleService(db)

    outcome = await lifecycle_service.delete_one(contact_id)

    if outcome.was_primary:
        message = f"Deleted primary contact {contact_id} and {len(outcome.deleted_ids) - 1} linked contacts"
    else:
        message = f"Deleted contact {contact_id}"

    return DeleteContactResponse(
        message=message,
        deletedContactId=contact_id,
        deletedContactIds=outcome.deleted_ids,
    )
