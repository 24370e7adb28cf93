"""
Pytest configuration and shared fixtures.
"""
import os

# Every test database is a fresh in-memory SQLite; set before settings load
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio

from user_service.db.connection import init_db, close_db
from user_service.domain.entities import Address, User
from user_service.domain.value_objects import UserRole
from user_service.infrastructure.cache_service import user_cache


@pytest_asyncio.fixture(scope="function")
async def database():
    """
    Fresh database for each test.

    StaticPool keeps a single connection, so the in-memory database lives
    exactly as long as the engine.
    """
    await init_db()
    await user_cache.clear()

    yield

    await close_db()
    await user_cache.clear()


@pytest.fixture
def make_user():
    """Build a valid, unsaved user (optionally with an address)"""

    def _make_user(
        name="John Doe",
        email="john.doe@example.com",
        role=UserRole.ATTENDEE,
        phone_number=None,
        city="New York",
    ) -> User:
        user = User.create(name, email, role)
        if phone_number is not None:
            user = user.with_address(Address.create(
                user,
                line1="123 Main Street",
                line2="Apt 4B",
                city=city,
                state="NY",
                postal_code="10001",
                country="United States",
                phone_number=phone_number,
            ))
        return user

    return _make_user
