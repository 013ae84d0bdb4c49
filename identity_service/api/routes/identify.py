"""Identify API endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.api.schemas.identity import (
    ErrorResponse,
    IdentifiedContact,
    IdentifyRequest,
    IdentifyResponse,
)
from identity_service.domain.services.identity_projector import project
from identity_service.domain.services.identity_service import IdentityService
from identity_service.persistence.database import get_db

router = APIRouter()


@router.post(
    "/identify",
    response_model=IdentifyResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def identify(
    request: IdentifyRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> IdentifyResponse:
    """Resolve an email/phone pair into its consolidated contact."""
    identity_service = IdentityService(db)

    cluster = await identity_service.resolve(
        email=request.email,
        phone_number=request.phoneNumber,
    )

    return IdentifyResponse(contact=IdentifiedContact.from_view(project(cluster)))
