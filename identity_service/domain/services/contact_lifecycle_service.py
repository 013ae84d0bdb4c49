"""Contact lifecycle service: listing and soft deletion."""

import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.core.exceptions import ConfirmationRequired, NotFound
from identity_service.domain.models.identity import DeletionOutcome, StoreProbe
from identity_service.persistence.database import transaction
from identity_service.persistence.models.contact import Contact
from identity_service.persistence.repositories.contact_repository import ContactRepository

logger = logging.getLogger(__name__)

_VERSION_QUERIES = {
    "postgresql": "SELECT version()",
    "sqlite": "SELECT 'SQLite ' || sqlite_version()",
}


class ContactLifecycleService:
    """Service for reading and retiring contacts."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize lifecycle service."""
        self.session = session
        self.contact_repo = ContactRepository(session)

    async def list_active(self) -> list[Contact]:
        """List every active contact ordered by ID."""
        async with transaction(self.session):
            return await self.contact_repo.list_active()

    async def delete_one(self, contact_id: int) -> DeletionOutcome:
        """Soft-delete one contact.

        Deleting a primary also deletes every active secondary linked to it.
        Deleting a secondary leaves the rest of its cluster untouched; no
        other contact is promoted.

        Args:
            contact_id: Contact ID

        Returns:
            DeletionOutcome listing every deleted ID

        Raises:
            NotFound: If no active contact has that ID
        """
        async with transaction(self.session):
            contact = await self.contact_repo.get_active_by_id(contact_id)
            if contact is None:
                raise NotFound(f"Contact {contact_id} not found")

            if contact.is_primary:
                cluster = await self.contact_repo.get_cluster(contact.id)
                deleted_ids = [c.id for c in cluster]
            else:
                deleted_ids = [contact.id]

            await self.contact_repo.soft_delete_ids(deleted_ids)

        logger.info(
            "Soft-deleted contact",
            extra={
                "contact_id": contact_id,
                "was_primary": contact.is_primary,
                "deleted_ids": deleted_ids,
            },
        )
        return DeletionOutcome(
            contact_id=contact_id,
            was_primary=contact.is_primary,
            deleted_ids=sorted(deleted_ids),
        )

    async def delete_all(self, confirmed: bool) -> int:
        """Soft-delete every active contact.

        Args:
            confirmed: Explicit confirmation from the caller

        Returns:
            Number of contacts deleted

        Raises:
            ConfirmationRequired: If confirmed is not True
        """
        if confirmed is not True:
            raise ConfirmationRequired()

        async with transaction(self.session):
            count = await self.contact_repo.soft_delete_all()

        logger.warning("Soft-deleted all contacts", extra={"deleted_count": count})
        return count

    async def probe(self) -> StoreProbe:
        """Check store connectivity; returns store time and version."""
        dialect = self.session.get_bind().dialect.name
        version_sql = _VERSION_QUERIES.get(dialect)

        async with transaction(self.session):
            now = (await self.session.execute(select(func.current_timestamp()))).scalar_one()
            if version_sql is None:
                version = dialect
            else:
                version = (await self.session.execute(text(version_sql))).scalar_one()

        return StoreProbe(now=now, version=str(version))
