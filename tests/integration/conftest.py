"""Integration test fixtures (service checks and prerequisites).

Integration tests wire the real orchestrator, loop and execution logger
together. Tests that need Redis are skipped if it is not running.
"""

from typing import Any

import pytest
import pytest_asyncio
from redis import Redis
from redis.asyncio import Redis as AsyncRedis

from clarity_refinement.persistence.store import RedisExecutionLogStore, StoreResult


class InMemoryExecutionLogStore:
    """Execution log store keeping rows in a dict, for tests without Redis."""

    def __init__(self):
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self._next_id = 0

    async def insert(self, table: str, record: dict[str, Any]) -> StoreResult:
        self._next_id += 1
        row = {"id": f"row-{self._next_id}", **record}
        self.rows.setdefault(table, []).append(row)
        return StoreResult(data={"id": row["id"]})

    async def select_by_brief(self, table: str, brief_id: str) -> StoreResult:
        rows = [r for r in self.rows.get(table, []) if r["brief_id"] == brief_id]
        return StoreResult(data=sorted(rows, key=lambda r: r["started_at"]))


@pytest.fixture
def memory_store() -> InMemoryExecutionLogStore:
    return InMemoryExecutionLogStore()


@pytest.fixture(scope="session")
def check_redis():
    """Check if Redis is available at localhost:6379.

    Skips tests if Redis is not reachable.
    """
    try:
        client = Redis.from_url("redis://localhost:6379/0")
        client.ping()
        client.close()
    except Exception as e:
        pytest.skip(f"Redis not available: {e}")


@pytest_asyncio.fixture
async def redis_store(check_redis, test_settings):
    """RedisExecutionLogStore on a throwaway table, cleaned up afterwards."""
    test_settings.EXECUTION_LOGS_TABLE = "test_agent_execution_logs"
    client = AsyncRedis.from_url(test_settings.REDIS_URL, decode_responses=True)
    yield RedisExecutionLogStore(client, test_settings)

    keys = [key async for key in client.scan_iter(match="test_agent_execution_logs:*")]
    if keys:
        await client.delete(*keys)
    await client.aclose()
