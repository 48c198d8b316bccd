"""Per-player locking tests."""
import pytest
from fastapi.testclient import TestClient

from landlord.errors import ErrorCode, GameError
from landlord.redis_service import RedisService
from tests.conftest import MockRedis, RecordingMockRedis

PLAYER_ID = "test-player-locking"


class TestLocking:
    """Locking as seen through the HTTP interface."""

    def test_lock_released_after_spin(self, client_with_mock_redis: TestClient):
        """Lock must be released after a spin completes, allowing the next one."""
        response1 = client_with_mock_redis.post("/spin", headers={"X-Player-Id": PLAYER_ID})
        assert response1.status_code == 200

        response2 = client_with_mock_redis.post("/spin", headers={"X-Player-Id": PLAYER_ID})
        assert response2.status_code == 200

    def test_different_players_not_blocked(self, client_with_mock_redis: TestClient):
        response1 = client_with_mock_redis.post("/spin", headers={"X-Player-Id": "player-1"})
        assert response1.status_code == 200

        response2 = client_with_mock_redis.post("/spin", headers={"X-Player-Id": "player-2"})
        assert response2.status_code == 200

    def test_held_lock_rejects_action(
        self, client_with_mock_redis: TestClient, mock_redis: MockRedis
    ):
        """A request arriving while the player's lock is held gets ROUND_IN_PROGRESS."""
        mock_redis._store[f"{RedisService.LOCK_PREFIX}{PLAYER_ID}"] = "someone-else"

        response = client_with_mock_redis.post(
            "/action",
            headers={"X-Player-Id": PLAYER_ID},
            json={"type": "ADD_COINS", "payload": 5},
        )

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "ROUND_IN_PROGRESS"
        assert error["recoverable"] is True

    def test_lock_wraps_load_and_save(
        self, client_with_recording_redis: tuple[TestClient, RecordingMockRedis]
    ):
        """Snapshot reads and writes happen inside the lock."""
        client, recording_redis = client_with_recording_redis
        client.post(
            "/action",
            headers={"X-Player-Id": PLAYER_ID},
            json={"type": "ADD_COINS", "payload": 5},
        )

        ops = recording_redis.operations
        assert ops[0] == "lock_set_nx"
        assert ops[-1] == "lock_eval"
        assert "save_get" in ops
        assert "save_setex" in ops


class TestLockingUnit:
    """Unit tests for locking behavior."""

    @pytest.mark.asyncio
    async def test_acquire_lock_succeeds_when_free(self, redis_service_with_mock: RedisService):
        token = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token is not None

    @pytest.mark.asyncio
    async def test_acquire_lock_sets_ttl(
        self, mock_redis: MockRedis, redis_service_with_mock: RedisService
    ):
        await redis_service_with_mock.acquire_player_lock("player-1")
        assert mock_redis._last_set_ex == RedisService.LOCK_TTL

    @pytest.mark.asyncio
    async def test_acquire_lock_fails_when_held(self, redis_service_with_mock: RedisService):
        token1 = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token1 is not None

        token2 = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token2 is None

    @pytest.mark.asyncio
    async def test_release_lock_allows_reacquisition(self, redis_service_with_mock: RedisService):
        token = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token is not None

        released = await redis_service_with_mock.release_player_lock("player-1", token)
        assert released is True

        token2 = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token2 is not None

    @pytest.mark.asyncio
    async def test_release_with_wrong_token_keeps_lock(
        self, redis_service_with_mock: RedisService
    ):
        token = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token is not None

        released = await redis_service_with_mock.release_player_lock("player-1", "stale-token")
        assert released is False
        assert await redis_service_with_mock.acquire_player_lock("player-1") is None

    @pytest.mark.asyncio
    async def test_player_lock_context_manager_releases(self, redis_service_with_mock: RedisService):
        async with redis_service_with_mock.player_lock("player-1") as metrics:
            assert metrics.acquire_ms >= 0

        token = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token is not None

    @pytest.mark.asyncio
    async def test_player_lock_context_manager_releases_on_exception(
        self, redis_service_with_mock: RedisService
    ):
        class TestException(Exception):
            pass

        with pytest.raises(TestException):
            async with redis_service_with_mock.player_lock("player-1"):
                raise TestException("test")

        token = await redis_service_with_mock.acquire_player_lock("player-1")
        assert token is not None

    @pytest.mark.asyncio
    async def test_player_lock_raises_round_in_progress(
        self, redis_service_with_mock: RedisService
    ):
        await redis_service_with_mock.acquire_player_lock("player-1")

        with pytest.raises(GameError) as exc_info:
            async with redis_service_with_mock.player_lock("player-1"):
                pass

        assert exc_info.value.code == ErrorCode.ROUND_IN_PROGRESS
        assert exc_info.value.status_code == 409
        assert exc_info.value.recoverable is True


class TestSnapshotStore:
    """RedisService as a snapshot store."""

    @pytest.mark.asyncio
    async def test_missing_snapshot_is_none(self, redis_service_with_mock: RedisService):
        assert await redis_service_with_mock.load_snapshot("nobody") is None

    @pytest.mark.asyncio
    async def test_save_then_load(self, redis_service_with_mock: RedisService):
        await redis_service_with_mock.save_snapshot("player-1", {"coins": 3})
        assert await redis_service_with_mock.load_snapshot("player-1") == {"coins": 3}

    @pytest.mark.asyncio
    async def test_snapshots_keyed_per_player(
        self, mock_redis: MockRedis, redis_service_with_mock: RedisService
    ):
        await redis_service_with_mock.save_snapshot("player-1", {"coins": 3})
        assert f"{RedisService.SAVE_KEY}:player-1" in mock_redis._store
        assert await redis_service_with_mock.load_snapshot("player-2") is None

    @pytest.mark.asyncio
    async def test_unreadable_text_raises_value_error(
        self, mock_redis: MockRedis, redis_service_with_mock: RedisService
    ):
        mock_redis._store[f"{RedisService.SAVE_KEY}:player-1"] = "{oops"
        with pytest.raises(ValueError):
            await redis_service_with_mock.load_snapshot("player-1")

    @pytest.mark.asyncio
    async def test_clear_snapshot(self, redis_service_with_mock: RedisService):
        await redis_service_with_mock.save_snapshot("player-1", {"coins": 3})
        await redis_service_with_mock.clear_snapshot("player-1")
        assert await redis_service_with_mock.load_snapshot("player-1") is None

    def test_not_connected_raises(self):
        with pytest.raises(RuntimeError):
            RedisService().client
