"""Data models for resolved identity clusters."""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel

from identity_service.persistence.models.contact import Contact


@dataclass
class ClusterResult:
    """One identity cluster as it stands after a resolution."""

    primary: Contact | None
    secondaries: list[Contact] = field(default_factory=list)
    created: Contact | None = None  # Contact inserted by this resolution
    demoted_ids: list[int] = field(default_factory=list)  # Primaries merged away

    @classmethod
    def from_records(
        cls,
        records: list[Contact],
        created: Contact | None = None,
        demoted_ids: list[int] | None = None,
    ) -> "ClusterResult":
        """Split a fetched cluster into its primary and its secondaries."""
        ordered = sorted(records, key=lambda c: c.creation_key)
        primary = next((c for c in ordered if c.is_primary), None)
        return cls(
            primary=primary,
            secondaries=[c for c in ordered if c is not primary],
            created=created,
            demoted_ids=list(demoted_ids or []),
        )

    @property
    def records(self) -> list[Contact]:
        """Primary first, then secondaries oldest first."""
        head = [self.primary] if self.primary is not None else []
        return head + self.secondaries


class IdentityView(BaseModel):
    """Consolidated view of one identity."""

    primary_id: int
    emails: list[str]
    phone_numbers: list[str]
    secondary_ids: list[int]


@dataclass
class DeletionOutcome:
    """Result of soft-deleting one contact."""

    contact_id: int
    was_primary: bool
    deleted_ids: list[int]


@dataclass
class StoreProbe:
    """Connectivity check result."""

    now: datetime | str
    version: str
