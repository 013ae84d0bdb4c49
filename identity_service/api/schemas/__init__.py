"""API schemas."""

from identity_service.api.schemas.identity import (
    ContactRecord,
    DeleteAllContactsResponse,
    DeleteContactResponse,
    ErrorResponse,
    IdentifiedContact,
    IdentifyRequest,
    IdentifyResponse,
    StoreProbeResponse,
)

__all__ = [
    "ContactRecord",
    "DeleteAllContactsResponse",
    "DeleteContactResponse",
    "ErrorResponse",
    "IdentifiedContact",
    "IdentifyRequest",
    "IdentifyResponse",
    "StoreProbeResponse",
]
