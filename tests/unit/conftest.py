"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Mock database session
- Mock session maker (async context manager yielding the mock session)
- Helper to fake the sponsor chain walk
"""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_session():
    """
    Mock async database session.

    ``session.begin()`` works as an async context manager.

    Returns:
        MagicMock: Mocked async session for database operations
    """
    session = MagicMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.begin.return_value.__aenter__ = AsyncMock(return_value=None)
    session.begin.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def mock_session_maker(mock_session):
    """
    Mock async_sessionmaker returning ``mock_session``.

    Returns:
        MagicMock: Callable usable as ``async with session_maker() as s``
    """
    session_maker = MagicMock()
    session_maker.return_value.__aenter__ = AsyncMock(
        return_value=mock_session
    )
    session_maker.return_value.__aexit__ = AsyncMock(return_value=False)
    return session_maker


@pytest.fixture
def fake_walk():
    """
    Build a replacement for SponsorChainWalker.walk.

    Returns:
        Callable taking a list of ancestor IDs (nearest first)
    """
    def _make(ancestors):
        async def walk(start_user_id, max_levels):
            for level, ancestor_id in enumerate(ancestors, start=1):
                if level > max_levels:
                    return
                yield level, ancestor_id

        return walk

    return _make
