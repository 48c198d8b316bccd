"""Snapshot serialization for persisted game state."""
import json
from typing import Any

from pydantic import ValidationError

from landlord.errors import ErrorCode, GameError
from landlord.logic.models import GameState


def serialize_state(state: GameState) -> dict[str, Any]:
    """Full JSON-compatible snapshot of a game state."""
    return state.model_dump(mode="json")


def deserialize_state(snapshot: Any) -> GameState:
    """
    Rebuild a game state from a snapshot.

    Accepts a dict or its JSON text. is_spinning is always restored as
    False; a snapshot taken mid-spin resumes idle.

    Raises INVALID_SNAPSHOT when the snapshot does not describe a valid state.
    """
    if isinstance(snapshot, (str, bytes)):
        try:
            snapshot = json.loads(snapshot)
        except ValueError as e:
            raise GameError(ErrorCode.INVALID_SNAPSHOT, f"Snapshot is not JSON: {e}")

    if not isinstance(snapshot, dict):
        raise GameError(
            ErrorCode.INVALID_SNAPSHOT,
            f"Snapshot must be an object, got {type(snapshot).__name__}",
        )

    try:
        state = GameState.model_validate(snapshot)
    except ValidationError as e:
        raise GameError(
            ErrorCode.INVALID_SNAPSHOT,
            f"Snapshot failed validation ({e.error_count()} errors)",
        )

    if state.is_spinning:
        state = state.model_copy(update={"is_spinning": False})
    return state
