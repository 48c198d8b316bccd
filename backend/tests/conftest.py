"""Pytest fixtures for backend tests."""
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from landlord.logic.engine import GameEngine
from landlord.logic.models import GRID_CELLS, Grid
from landlord.logic.reducer import GameReducer
from landlord.logic.rng import SeededRNG
from landlord.logic.symbols import catalog
from landlord.main import app
from landlord.redis_service import RedisService
from landlord.telemetry import LoggingTelemetrySink, telemetry_service


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (run whole simulated games)"
    )


def make_grid(cells: dict[int, str]) -> Grid:
    """Build a grid from {index: symbol_id}; every other cell is empty."""
    grid: Grid = [None] * GRID_CELLS
    for index, symbol_id in cells.items():
        grid[index] = catalog.instance(symbol_id)
    return grid


class MockRedis:
    """Mock Redis client for testing."""

    def __init__(self):
        self._store: dict[str, str] = {}
        self._last_set_ex: int | None = None

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(
        self, key: str, value: str, nx: bool = False, ex: int | None = None
    ) -> bool | None:
        if nx and key in self._store:
            return None
        self._store[key] = value
        self._last_set_ex = ex
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._store[key] = value
        return True

    async def delete(self, key: str) -> int:
        if key in self._store:
            del self._store[key]
            return 1
        return 0

    async def eval(self, script: str, numkeys: int, *args) -> int:
        """
        Execute Lua script (simplified mock for compare-and-delete).

        - KEYS[1] = args[0] (key)
        - ARGV[1] = args[1] (expected value)
        Returns 1 if deleted, 0 if value didn't match.
        """
        key = args[0]
        expected_value = args[1]
        if self._store.get(key) == expected_value:
            del self._store[key]
            return 1
        return 0

    async def close(self) -> None:
        pass

    def clear(self) -> None:
        self._store.clear()
        self._last_set_ex = None


class RecordingMockRedis(MockRedis):
    """Mock Redis that records operation order."""

    def __init__(self):
        super().__init__()
        self.operations: list[str] = []

    async def get(self, key: str) -> str | None:
        self.operations.append(self._classify_key(key, "get"))
        return await super().get(key)

    async def set(
        self, key: str, value: str, nx: bool = False, ex: int | None = None
    ) -> bool | None:
        self.operations.append(self._classify_key(key, "set_nx" if nx else "set"))
        return await super().set(key, value, nx=nx, ex=ex)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.operations.append(self._classify_key(key, "setex"))
        return await super().setex(key, ttl, value)

    async def delete(self, key: str) -> int:
        self.operations.append(self._classify_key(key, "delete"))
        return await super().delete(key)

    async def eval(self, script: str, numkeys: int, *args) -> int:
        self.operations.append(self._classify_key(args[0], "eval"))
        return await super().eval(script, numkeys, *args)

    def _classify_key(self, key: str, operation: str) -> str:
        """Classify operation by key type for easier assertion."""
        if key.startswith(RedisService.LOCK_PREFIX):
            return f"lock_{operation}"
        elif key.startswith(f"{RedisService.SAVE_KEY}:"):
            return f"save_{operation}"
        return f"unknown_{operation}"

    def clear(self) -> None:
        super().clear()
        self.operations.clear()


class BrokenRedis(MockRedis):
    """Mock Redis whose reads fail as if the server were unreachable."""

    async def get(self, key: str) -> str | None:
        raise RedisConnectionError("connection refused")


class RecordingTelemetrySink:
    """Sink that keeps emitted events in memory."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))

    def named(self, event_name: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event_name]


@pytest.fixture
def seeded_engine() -> GameEngine:
    return GameEngine(rng=SeededRNG(seed=2026), shop_rng=SeededRNG(seed=2027))


@pytest.fixture
def reducer(seeded_engine: GameEngine) -> GameReducer:
    return GameReducer(seeded_engine)


@pytest.fixture
def mock_redis() -> MockRedis:
    """Create a fresh mock Redis for each test."""
    return MockRedis()


@pytest.fixture
def recording_mock_redis() -> RecordingMockRedis:
    """Create a RecordingMockRedis that logs operation order."""
    return RecordingMockRedis()


@pytest.fixture
def redis_service_with_mock(mock_redis: MockRedis) -> Generator[RedisService, None, None]:
    """Create RedisService with mock client."""
    service = RedisService()
    service._client = mock_redis
    yield service
    mock_redis.clear()


@pytest.fixture
def recording_telemetry() -> Generator[RecordingTelemetrySink, None, None]:
    """Route the global telemetry service into an in-memory sink."""
    sink = RecordingTelemetrySink()
    telemetry_service.set_sink(sink)
    yield sink
    telemetry_service.set_sink(LoggingTelemetrySink())


def _client_with(redis_client: MockRedis) -> Generator[TestClient, None, None]:
    from landlord.redis_service import redis_service

    original_client = redis_service._client
    redis_service._client = redis_client

    with TestClient(app) as client:
        yield client

    redis_service._client = original_client
    redis_client.clear()


@pytest.fixture
def client_with_mock_redis(mock_redis: MockRedis) -> Generator[TestClient, None, None]:
    """Create TestClient with mocked Redis."""
    yield from _client_with(mock_redis)


@pytest.fixture
def client_with_recording_redis(
    recording_mock_redis: RecordingMockRedis,
) -> Generator[tuple[TestClient, RecordingMockRedis], None, None]:
    """Create TestClient with recording Redis."""
    for client in _client_with(recording_mock_redis):
        yield client, recording_mock_redis
