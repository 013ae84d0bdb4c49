"""Domain services."""

from identity_service.domain.services.contact_lifecycle_service import ContactLifecycleService
from identity_service.domain.services.identity_projector import project
from identity_service.domain.services.identity_service import IdentityService

__all__ = ["ContactLifecycleService", "IdentityService", "project"]
