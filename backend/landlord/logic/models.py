"""Game state models for the grid economy."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from landlord.config import settings

GRID_CELLS = settings.grid_size * settings.grid_size


class Rarity(str, Enum):
    """Symbol rarity, used by shop offer weighting."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


class GamePhase(str, Enum):
    """Rent/floor progression state."""
    PLAYING = "PLAYING"
    LOST = "LOST"
    WON = "WON"


class SymbolInstance(BaseModel):
    """
    A symbol owned by the player or placed on the grid.

    Carries only data; effect behaviour is looked up in the catalog by id.
    bonus_value is transient and rewritten on every spin.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str = ""
    value: int = Field(ge=0)
    rarity: Rarity = Rarity.COMMON
    bonus_value: int = 0


Grid = list[SymbolInstance | None]


class RentTier(BaseModel):
    """One floor of the rent schedule."""
    model_config = ConfigDict(frozen=True)

    rent: int = Field(ge=0)
    turns: int = Field(gt=0)


DEFAULT_RENT_SCHEDULE: tuple[RentTier, ...] = tuple(
    RentTier(rent=rent, turns=turns)
    for rent, turns in [
        (25, 4),
        (50, 4),
        (100, 5),
        (150, 5),
        (225, 6),
        (300, 6),
        (350, 7),
        (425, 7),
        (575, 8),
        (625, 8),
        (675, 9),
        (777, 9),
        (1000, 9),
        (1000, 9),
    ]
)


def empty_grid() -> Grid:
    return [None] * GRID_CELLS


class GameState(BaseModel):
    """
    Player game state.

    Tracks:
    - coin balance
    - turn counter within the current floor and the floor index
    - owned symbols and the last resolved grid
    - terminal flags (lost / won)
    - UI-facing flags (spinning, shop, sound)

    Transitions never mutate a state in place; they return copies.
    """
    model_config = ConfigDict(frozen=True)

    coins: int = 0
    turn: int = Field(default=0, ge=0)
    floor: int = Field(default=0, ge=0)
    symbols: list[SymbolInstance] = Field(default_factory=list)
    grid: Grid = Field(default_factory=empty_grid)
    rent_schedule: list[RentTier] = Field(
        default_factory=lambda: list(DEFAULT_RENT_SCHEDULE)
    )

    lost: bool = False
    won: bool = False

    # Presentation flags, no economic meaning
    is_spinning: bool = False
    shop_open: bool = False
    sound_enabled: bool = True

    @model_validator(mode="after")
    def _check_shape(self) -> "GameState":
        if len(self.grid) != GRID_CELLS:
            raise ValueError(f"grid must have {GRID_CELLS} cells, got {len(self.grid)}")
        if not self.rent_schedule:
            raise ValueError("rent_schedule must not be empty")
        if self.floor > len(self.rent_schedule):
            raise ValueError(
                f"floor {self.floor} outside rent schedule of {len(self.rent_schedule)}"
            )
        return self

    @property
    def phase(self) -> GamePhase:
        if self.lost:
            return GamePhase.LOST
        if self.won or self.floor >= len(self.rent_schedule):
            return GamePhase.WON
        return GamePhase.PLAYING

    @property
    def is_terminal(self) -> bool:
        return self.phase != GamePhase.PLAYING

    @property
    def current_tier(self) -> RentTier | None:
        """Rent tier governing the current floor, None once every floor is cleared."""
        if self.floor < len(self.rent_schedule):
            return self.rent_schedule[self.floor]
        return None

    @property
    def turns_left(self) -> int:
        tier = self.current_tier
        if tier is None:
            return 0
        return max(tier.turns - self.turn, 0)


class SpinResult(BaseModel):
    """Result of a spin computation."""
    grid: Grid = Field(default_factory=empty_grid)
    base_coins: int = 0
    bonus_coins: int = 0

    @property
    def total_coins(self) -> int:
        return self.base_coins + self.bonus_coins


class RentOutcome(BaseModel):
    """Result of settling the rent for one floor."""
    success: bool
    game_over: bool
    victory: bool
    message: str
    new_floor: int
    remaining_coins: int
    next_rent: int = 0
    next_turns: int = 0
