"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from unittest.mock import AsyncMock

import pytest

from clarity_refinement.persistence.store import StoreResult


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests (async)."""
    mock = AsyncMock()
    mock.setex = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    mock.mget = AsyncMock(return_value=[])
    mock.zadd = AsyncMock(return_value=1)
    mock.zrange = AsyncMock(return_value=[])
    mock.expire = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_store():
    """Mock execution log store that accepts every insert."""
    mock = AsyncMock()
    mock.insert = AsyncMock(return_value=StoreResult(data={"id": "log-1"}))
    mock.select_by_brief = AsyncMock(return_value=StoreResult(data=[]))
    return mock
