"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from identity_service.persistence.database import Base, get_db
from identity_service.persistence.models import *  # noqa: F401, F403
from identity_service.persistence.models.contact import PRIMARY, SECONDARY, Contact


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def test_client(db_session):
    """Create a test API client bound to the test session."""
    from identity_service.main import app

    app.dependency_overrides[get_db] = lambda: db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_contact(db_session):
    """Insert a contact directly, bypassing identity resolution."""

    async def _make(
        email: str | None = None,
        phone_number: str | None = None,
        linked_to: Contact | None = None,
        created_at=None,
        deleted_at=None,
    ) -> Contact:
        contact = Contact(
            email=email,
            phone_number=phone_number,
            link_precedence=SECONDARY if linked_to is not None else PRIMARY,
            linked_id=linked_to.id if linked_to is not None else None,
            deleted_at=deleted_at,
        )
        if created_at is not None:
            contact.created_at = created_at
        db_session.add(contact)
        await db_session.commit()
        return contact

    return _make
