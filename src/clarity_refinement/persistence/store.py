"""
Execution log store contract and its Redis implementation.

The execution logger only needs two operations from a datastore:
- insert a flat record and get the generated row id back (insert -> select
  id -> single row)
- list the rows of one brief, oldest first

Both return a StoreResult instead of raising, mirroring hosted-database
clients that report failures as an error descriptor next to the data.

Redis layout:
- Row: String "<table>:row:<id>" holding the JSON record (with TTL)
- Brief index: Sorted set "<table>:brief:<brief_id>" (score = started_at)
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict
from redis.asyncio import Redis as AsyncRedis

from clarity_refinement.config import Settings
from clarity_refinement.logging_config import get_logger

logger = get_logger(__name__)


class StoreResult(BaseModel):
    """Data or error descriptor returned by a store call."""
    model_config = ConfigDict(frozen=True)

    data: Optional[Any] = None
    error: Optional[dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ExecutionLogStore(Protocol):
    """Narrow datastore interface consumed by the execution logger."""

    async def insert(self, table: str, record: dict[str, Any]) -> StoreResult:
        """Insert one record; ``data`` is ``{"id": <row id>}`` on success."""
        ...

    async def select_by_brief(self, table: str, brief_id: str) -> StoreResult:
        """Rows for a brief ordered by ``started_at``; ``data`` is a list."""
        ...


class RedisExecutionLogStore:
    """
    Execution log store backed by async Redis.

    Rows expire after EXECUTION_LOG_TTL_SECONDS; the brief index shares
    that TTL and is refreshed on every insert.
    """

    def __init__(self, redis_client: AsyncRedis, settings: Settings):
        """
        Initialize store.

        Args:
            redis_client: AsyncRedis client instance
            settings: Application settings
        """
        self.redis = redis_client
        self.settings = settings
        self.ttl = settings.EXECUTION_LOG_TTL_SECONDS

    @staticmethod
    def row_key(table: str, row_id: str) -> str:
        return f"{table}:row:{row_id}"

    @staticmethod
    def brief_index_key(table: str, brief_id: str) -> str:
        return f"{table}:brief:{brief_id}"

    async def insert(self, table: str, record: dict[str, Any]) -> StoreResult:
        """Insert a record and return its generated id."""
        row_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        row = {"id": row_id, **record, "created_at": now.isoformat()}

        try:
            await self.redis.setex(
                name=self.row_key(table, row_id),
                time=self.ttl,
                value=json.dumps(row, default=str),
            )

            brief_id = record.get("brief_id")
            if brief_id:
                started_at = record.get("started_at")
                timestamp = (
                    datetime.fromisoformat(started_at).timestamp()
                    if isinstance(started_at, str)
                    else now.timestamp()
                )
                index_key = self.brief_index_key(table, brief_id)
                await self.redis.zadd(index_key, {row_id: timestamp})
                await self.redis.expire(index_key, self.ttl)

            logger.debug("Inserted execution log row", table=table, row_id=row_id)
            return StoreResult(data={"id": row_id})

        except Exception as e:
            logger.error(
                "Failed to insert execution log row",
                table=table,
                error=str(e),
                exc_info=True,
            )
            return StoreResult(error={"message": str(e), "type": type(e).__name__})

    async def select_by_brief(self, table: str, brief_id: str) -> StoreResult:
        """Return the rows of one brief, oldest first."""
        try:
            row_ids = await self.redis.zrange(self.brief_index_key(table, brief_id), 0, -1)
            if not row_ids:
                return StoreResult(data=[])

            raw_rows = await self.redis.mget([self.row_key(table, row_id) for row_id in row_ids])

            # Rows can expire before the index does
            rows = [json.loads(raw) for raw in raw_rows if raw is not None]
            return StoreResult(data=rows)

        except Exception as e:
            logger.error(
                "Failed to read execution log rows",
                table=table,
                brief_id=brief_id,
                error=str(e),
                exc_info=True,
            )
            return StoreResult(error={"message": str(e), "type": type(e).__name__})
