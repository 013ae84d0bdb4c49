"""Contact repository."""

from collections.abc import Iterable

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.persistence.models.contact import PRIMARY, SECONDARY, Contact, utcnow
from identity_service.persistence.repositories.base import BaseRepository


class ContactRepository(BaseRepository[Contact]):
    """Repository for Contact entities.

    Every query except get_by_id ignores soft-deleted rows.
    """

    def __init__(self, session: AsyncSession):
        """Initialize contact repository."""
        super().__init__(Contact, session)

    async def get_active_by_id(self, id: int) -> Contact | None:
        """Get active contact by ID.

        Args:
            id: Contact ID

        Returns:
            Contact or None if not found or soft-deleted
        """
        stmt = select(Contact).where(
            Contact.id == id,
            Contact.deleted_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_by_ids(self, ids: Iterable[int]) -> list[Contact]:
        """Get the active contacts among the given IDs, oldest first."""
        ids = list(ids)
        if not ids:
            return []

        stmt = (
            select(Contact)
            .where(Contact.id.in_(ids), Contact.deleted_at.is_(None))
            .order_by(Contact.created_at, Contact.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_active_matches(
        self, email: str | None = None, phone_number: str | None = None
    ) -> list[Contact]:
        """Get every active contact sharing the email OR the phone number.

        Absent inputs never match, so a missing phone does not pull in
        every contact stored without one.

        Args:
            email: Optional email to search
            phone_number: Optional phone number to search

        Returns:
            Matching contacts, oldest first
        """
        conditions = []
        if email is not None:
            conditions.append(Contact.email == email)
        if phone_number is not None:
            conditions.append(Contact.phone_number == phone_number)
        if not conditions:
            return []

        stmt = (
            select(Contact)
            .where(Contact.deleted_at.is_(None), or_(*conditions))
            .order_by(Contact.created_at, Contact.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_cluster(self, primary_id: int) -> list[Contact]:
        """Get the primary and every active contact linked to it, oldest first.

        Rows are reloaded from the store even if already in the session.
        """
        stmt = (
            select(Contact)
            .where(
                or_(Contact.id == primary_id, Contact.linked_id == primary_id),
                Contact.deleted_at.is_(None),
            )
            .order_by(Contact.created_at, Contact.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active(self) -> list[Contact]:
        """List every active contact ordered by ID."""
        stmt = select(Contact).where(Contact.deleted_at.is_(None)).order_by(Contact.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_primary(
        self, email: str | None, phone_number: str | None
    ) -> Contact:
        """Insert a contact that starts a new identity."""
        return await self.create(
            email=email,
            phone_number=phone_number,
            link_precedence=PRIMARY,
            linked_id=None,
        )

    async def create_secondary(
        self, email: str | None, phone_number: str | None, primary_id: int
    ) -> Contact:
        """Insert an alias contact linked to an existing primary."""
        return await self.create(
            email=email,
            phone_number=phone_number,
            link_precedence=SECONDARY,
            linked_id=primary_id,
        )

    async def demote_to_secondary(self, contact_ids: list[int], primary_id: int) -> int:
        """Rewrite primaries as secondaries of another primary.

        Returns:
            Number of rows updated
        """
        if not contact_ids:
            return 0

        stmt = (
            update(Contact)
            .where(Contact.id.in_(contact_ids), Contact.deleted_at.is_(None))
            .values({
                Contact.link_precedence: SECONDARY,
                Contact.linked_id: primary_id,
                Contact.updated_at: utcnow(),
            })
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def relink_secondaries(self, from_primary_ids: list[int], to_primary_id: int) -> int:
        """Point every active secondary of the given primaries at another primary.

        Returns:
            Number of rows updated
        """
        if not from_primary_ids:
            return 0

        stmt = (
            update(Contact)
            .where(
                Contact.linked_id.in_(from_primary_ids),
                Contact.deleted_at.is_(None),
            )
            .values({
                Contact.linked_id: to_primary_id,
                Contact.updated_at: utcnow(),
            })
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def soft_delete_ids(self, contact_ids: list[int]) -> int:
        """Mark the given active contacts as deleted.

        Returns:
            Number of rows updated
        """
        if not contact_ids:
            return 0

        now = utcnow()
        stmt = (
            update(Contact)
            .where(Contact.id.in_(contact_ids), Contact.deleted_at.is_(None))
            .values({Contact.deleted_at: now, Contact.updated_at: now})
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def soft_delete_all(self) -> int:
        """Mark every active contact as deleted.

        Returns:
            Number of rows updated
        """
        now = utcnow()
        stmt = (
            update(Contact)
            .where(Contact.deleted_at.is_(None))
            .values({Contact.deleted_at: now, Contact.updated_at: now})
        )
        result = await self.session.execute(stmt)
        return result.rowcount
