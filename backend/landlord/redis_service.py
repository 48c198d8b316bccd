"""Redis service for snapshot persistence and per-player locking."""
import json
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import redis.asyncio as redis

from landlord.config import settings
from landlord.errors import ErrorCode, GameError


@dataclass
class LockMetrics:
    """Metrics from lock acquisition for telemetry."""

    acquire_ms: float
    wait_retries: int


class RedisService:
    """Redis client implementing the game snapshot store and player locking."""

    # Key prefixes
    LOCK_PREFIX = "lock:player:"
    SAVE_KEY = settings.save_key

    # TTLs in seconds
    LOCK_TTL = settings.lock_ttl_seconds
    STATE_TTL = settings.player_state_ttl_seconds

    # Token-safe lock release (compare-and-delete)
    RELEASE_LOCK_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis_url: str | None = None):
        self._url = redis_url or settings.redis_url
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=True)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client, raise if not connected."""
        if self._client is None:
            raise RuntimeError("Redis not connected")
        return self._client

    def _save_key(self, player_id: str) -> str:
        return f"{self.SAVE_KEY}:{player_id}"

    async def acquire_player_lock(self, player_id: str) -> str | None:
        """
        Attempt to acquire per-player lock with unique token.

        Returns token string if lock acquired, None if already locked.
        """
        key = f"{self.LOCK_PREFIX}{player_id}"
        token = str(uuid.uuid4())
        acquired = await self.client.set(key, token, nx=True, ex=self.LOCK_TTL)
        return token if acquired is True else None

    async def release_player_lock(self, player_id: str, token: str) -> bool:
        """
        Release per-player lock only if token matches.

        Returns True if lock was released, False if token didn't match.
        """
        key = f"{self.LOCK_PREFIX}{player_id}"
        result = await self.client.eval(self.RELEASE_LOCK_SCRIPT, 1, key, token)
        return result == 1

    @asynccontextmanager
    async def player_lock(self, player_id: str):
        """
        Context manager serializing one player's actions.

        Raises ROUND_IN_PROGRESS if lock cannot be acquired.
        Releases the lock on exit. Yields LockMetrics for telemetry.
        """
        t0 = time.monotonic()
        token = await self.acquire_player_lock(player_id)
        if token is None:
            raise GameError(
                ErrorCode.ROUND_IN_PROGRESS,
                "Another action is in progress for this player.",
            )
        metrics = LockMetrics(acquire_ms=(time.monotonic() - t0) * 1000, wait_retries=0)
        try:
            yield metrics
        finally:
            await self.release_player_lock(player_id, token)

    async def load_snapshot(self, player_id: str) -> Any | None:
        """
        Load a player's saved snapshot.

        Returns None if nothing is stored. The decoded value is returned
        as-is; shape validation belongs to the caller.

        Raises ValueError if the stored text is not JSON.
        """
        cached = await self.client.get(self._save_key(player_id))
        if cached is None:
            return None
        return json.loads(cached)

    async def save_snapshot(self, player_id: str, snapshot: dict[str, Any]) -> None:
        """Save a player's snapshot with TTL."""
        await self.client.setex(
            self._save_key(player_id), self.STATE_TTL, json.dumps(snapshot)
        )

    async def clear_snapshot(self, player_id: str) -> None:
        """Delete a player's snapshot."""
        await self.client.delete(self._save_key(player_id))


# Global instance
redis_service = RedisService()
