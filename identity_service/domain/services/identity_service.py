"""Identity resolution: link contacts that share an email or a phone number."""

import logging

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.core.exceptions import InvalidRequest, InvariantViolation, StoreUnavailable
from identity_service.domain.models.identity import ClusterResult
from identity_service.persistence.database import transaction
from identity_service.persistence.models.contact import EMAIL_MAX_LENGTH, PHONE_MAX_LENGTH, Contact
from identity_service.persistence.repositories.contact_repository import ContactRepository
from identity_service.settings import settings

logger = logging.getLogger(__name__)

# Serialization failure and deadlock; the losing transaction can simply rerun
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def normalize_contact_value(value: str | int | None) -> str | None:
    """Strip a submitted email or phone number; blank counts as absent."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def is_retryable_conflict(exc: BaseException | None) -> bool:
    """Check whether a store error came from losing a race with another request."""
    if isinstance(exc, IntegrityError):
        return True
    if isinstance(exc, DBAPIError):
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        return sqlstate in RETRYABLE_SQLSTATES
    return False


class IdentityService:
    """Service resolving observed (email, phone) pairs into identity clusters."""

    def __init__(self, session: AsyncSession, max_attempts: int | None = None) -> None:
        """Initialize identity service."""
        self.session = session
        self.contact_repo = ContactRepository(session)
        self.max_attempts = max(1, max_attempts or settings.resolve_max_attempts)

    async def resolve(
        self, email: str | None = None, phone_number: str | int | None = None
    ) -> ClusterResult:
        """Resolve an observed pair into its identity cluster.

        Creates a new primary, attaches a new secondary, or merges clusters
        bridged by the pair. Everything happens in one transaction; a
        resolution that loses a race against a concurrent one is rerun.

        Args:
            email: Observed email
            phone_number: Observed phone number

        Returns:
            The full cluster after resolution

        Raises:
            InvalidRequest: If both values are absent or a value is too long
            StoreUnavailable: If the store fails or conflicts persist
            InvariantViolation: If stored clusters are inconsistent
        """
        email = normalize_contact_value(email)
        phone_number = normalize_contact_value(phone_number)
        if email is None and phone_number is None:
            raise InvalidRequest("Email or phoneNumber required")
        if email is not None and len(email) > EMAIL_MAX_LENGTH:
            raise InvalidRequest(f"email must be at most {EMAIL_MAX_LENGTH} characters")
        if phone_number is not None and len(phone_number) > PHONE_MAX_LENGTH:
            raise InvalidRequest(f"phoneNumber must be at most {PHONE_MAX_LENGTH} characters")

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with transaction(self.session):
                    return await self._resolve_once(email, phone_number)
            except StoreUnavailable as e:
                if attempt >= self.max_attempts or not is_retryable_conflict(e.__cause__):
                    raise
                logger.warning(
                    "Identity resolution conflicted with a concurrent request, retrying",
                    extra={"attempt": attempt, "max_attempts": self.max_attempts},
                )

        # Loop always returns or raises
        raise StoreUnavailable()

    async def _resolve_once(
        self, email: str | None, phone_number: str | None
    ) -> ClusterResult:
        """One resolution attempt inside an open transaction."""
        matches = await self.contact_repo.find_active_matches(email, phone_number)

        if not matches:
            contact = await self.contact_repo.create_primary(email, phone_number)
            logger.info("Created primary contact", extra={"contact_id": contact.id})
            return ClusterResult(primary=contact, created=contact)

        primaries = await self._load_primaries(matches)
        survivor = primaries[0]
        demoted_ids = [p.id for p in primaries[1:]]

        if demoted_ids:
            await self.contact_repo.demote_to_secondary(demoted_ids, survivor.id)
            relinked = await self.contact_repo.relink_secondaries(demoted_ids, survivor.id)
            logger.info(
                "Merged identity clusters",
                extra={
                    "primary_id": survivor.id,
                    "demoted_ids": demoted_ids,
                    "relinked_count": relinked,
                },
            )

        records = await self.contact_repo.get_cluster(survivor.id)
        cluster = ClusterResult.from_records(records, demoted_ids=demoted_ids)

        if self._has_new_information(cluster, email, phone_number):
            created = await self.contact_repo.create_secondary(email, phone_number, survivor.id)
            cluster.secondaries.append(created)
            cluster.created = created
            logger.info(
                "Created secondary contact",
                extra={"contact_id": created.id, "primary_id": survivor.id},
            )

        return cluster

    async def _load_primaries(self, matches: list[Contact]) -> list[Contact]:
        """Get the primaries the matched contacts belong to, oldest first."""
        primary_ids = {c.id if c.is_primary else c.linked_id for c in matches}
        primaries = await self.contact_repo.get_active_by_ids(
            pid for pid in primary_ids if pid is not None
        )

        found_ids = {p.id for p in primaries if p.is_primary}
        if None in primary_ids or found_ids != primary_ids:
            logger.critical(
                "Matched contacts reference missing or non-primary contacts",
                extra={
                    "match_ids": [c.id for c in matches],
                    "expected_primary_ids": sorted(pid for pid in primary_ids if pid is not None),
                    "found_primary_ids": sorted(found_ids),
                },
            )
            raise InvariantViolation("matched contacts reference no active primary")

        return sorted(primaries, key=lambda c: c.creation_key)

    @staticmethod
    def _has_new_information(
        cluster: ClusterResult, email: str | None, phone_number: str | None
    ) -> bool:
        """Check whether the pair carries a value the cluster has not seen."""
        records = cluster.records
        emails = {c.email for c in records}
        phone_numbers = {c.phone_number for c in records}
        return (
            (email is not None and email not in emails)
            or (phone_number is not None and phone_number not in phone_numbers)
        )
