"""Database models."""

from identity_service.persistence.models.contact import PRIMARY, SECONDARY, Contact

__all__ = [
    "Contact",
    "PRIMARY",
    "SECONDARY",
]
