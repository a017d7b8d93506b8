"""
Persistence layer for execution telemetry.

- redis_client.py: Async Redis connection pooling
- store.py: ExecutionLogStore contract and its Redis implementation

Storage Strategy:
- Each log row stored as JSON with TTL (default 30 days)
- Per-brief sorted-set index ordered by start time
- Failures returned as StoreResult.error, never raised
"""

from clarity_refinement.persistence.redis_client import (
    RedisClient,
    get_async_redis_client,
)
from clarity_refinement.persistence.store import (
    ExecutionLogStore,
    RedisExecutionLogStore,
    StoreResult,
)

__all__ = [
    "ExecutionLogStore",
    "RedisClient",
    "RedisExecutionLogStore",
    "StoreResult",
    "get_async_redis_client",
]
