"""Server-side telemetry events."""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Protocol for telemetry sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a telemetry event."""
        ...


class LoggingTelemetrySink:
    """Default sink that logs telemetry events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Log telemetry event."""
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class GameLoadedEvent:
    """game_loaded: a player's game was restored or started fresh."""

    player_id: str
    restored: bool
    fallback_reason: str | None  # "missing" | "corrupt" | "store_error" | None
    floor: int
    coins: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SpinProcessedEvent:
    """spin_processed: one full spin cycle was applied."""

    player_id: str
    config_hash: str
    floor: int
    turn: int
    base_coins: int
    bonus_coins: int
    triggered_cells: int
    coins_after: int
    lock_acquire_ms: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RentSettledEvent:
    """rent_settled: a floor's rent was checked."""

    player_id: str
    floor: int
    success: bool
    victory: bool
    remaining_coins: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class TelemetryService:
    """Service for emitting server telemetry events."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0  # Counter for sink failures

    def set_sink(self, sink: TelemetrySink) -> None:
        """Set the telemetry sink (useful for testing)."""
        self._sink = sink

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """
        Emit event with exception safety.

        Sink failures MUST NOT break game requests.
        """
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_game_loaded(self, event: GameLoadedEvent) -> None:
        self._safe_emit("game_loaded", event.to_dict())

    def emit_spin_processed(self, event: SpinProcessedEvent) -> None:
        self._safe_emit("spin_processed", event.to_dict())

    def emit_rent_settled(self, event: RentSettledEvent) -> None:
        self._safe_emit("rent_settled", event.to_dict())


# Global instance
telemetry_service = TelemetryService()
