"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.profile import Profile
from domain.services.query_cache import QueryCache


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.products = AsyncMock()
        self.locations = AsyncMock()
        self.entered = 0
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        self.entered += 1
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            await self.rollback()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache(stale_seconds=60)


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def profile(user_id: UUID) -> Profile:
    """A stored profile for ``user_id``."""
    return Profile(
        id=user_id,
        full_name="Ana Souza",
        email="ana@example.com",
        phone="+351900000000",
        city="Porto",
        username="ana",
    )
