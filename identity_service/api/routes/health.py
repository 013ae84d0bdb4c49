"""Health and store connectivity endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.api.schemas.identity import ErrorResponse, StoreProbeResponse
from identity_service.core.exceptions import StoreUnavailable
from identity_service.domain.services.contact_lifecycle_service import ContactLifecycleService
from identity_service.persistence.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness check; does not touch the store."""
    return {"status": "healthy"}


@router.get(
    "/testdb",
    response_model=StoreProbeResponse,
    responses={500: {"model": ErrorResponse}},
)
async def probe_store(
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Check store connectivity."""
    lifecycle_service = ContactLifecycleService(db)

    try:
        probe = await lifecycle_service.probe()
    except StoreUnavailable:
        logger.error("Store connectivity probe failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Database connection failed"},
        )

    return StoreProbeResponse(now=probe.now, version=probe.version)
