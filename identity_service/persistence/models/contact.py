"""Contact model."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, func

from identity_service.persistence.database import Base

PRIMARY = "primary"
SECONDARY = "secondary"

EMAIL_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 20


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the contact table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Contact(Base):
    """One observed (email, phone) pair and its place in an identity cluster."""

    __tablename__ = "contact"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone_number = Column("phonenumber", String(PHONE_MAX_LENGTH), nullable=True, index=True)
    email = Column(String(EMAIL_MAX_LENGTH), nullable=True, index=True)
    linked_id = Column("linkedid", Integer, ForeignKey("contact.id"), nullable=True, index=True)
    link_precedence = Column("linkprecedence", String(20), nullable=False, default=PRIMARY)
    created_at = Column("createdat", DateTime, default=utcnow, nullable=False)
    updated_at = Column("updatedat", DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column("deletedat", DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "linkprecedence IN ('primary', 'secondary')",
            name="ck_contact_link_precedence",
        ),
        CheckConstraint(
            "(linkprecedence = 'primary' AND linkedid IS NULL) OR "
            "(linkprecedence = 'secondary' AND linkedid IS NOT NULL)",
            name="ck_contact_secondary_linked",
        ),
    )

    @property
    def is_primary(self) -> bool:
        return self.link_precedence == PRIMARY

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def creation_key(self) -> tuple[datetime, int]:
        """Sort key for "oldest wins": creation time, then id."""
        return (self.created_at, self.id)

    def __repr__(self) -> str:
        return (
            f"<Contact(id={self.id}, email={self.email}, phone={self.phone_number}, "
            f"precedence={self.link_precedence}, linked_id={self.linked_id})>"
        )


# One active row per (email, phone) pair; NULLs compare equal through coalesce
Index(
    "uq_contact_active_pair",
    func.coalesce(Contact.email, ""),
    func.coalesce(Contact.phone_number, ""),
    unique=True,
    postgresql_where=Contact.deleted_at.is_(None),
    sqlite_where=Contact.deleted_at.is_(None),
)
