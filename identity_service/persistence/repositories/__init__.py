"""Repository implementations."""

from identity_service.persistence.repositories.base import BaseRepository
from identity_service.persistence.repositories.contact_repository import ContactRepository

__all__ = ["BaseRepository", "ContactRepository"]
