"""Spin resolution and rent/floor progression."""
import logging

from landlord.config import settings
from landlord.logic.grid import occupied_cells, place_grid
from landlord.logic.models import (
    GameState,
    Grid,
    RentOutcome,
    RentTier,
    SpinResult,
    SymbolInstance,
)
from landlord.logic.rng import ProductionRNG, RNGBase
from landlord.logic.symbols import EFFECT_HANDLERS, SymbolCatalog, SymbolDef, catalog

logger = logging.getLogger(__name__)

# === CONFIG VALUES (via settings) ===
SPIN_COST = settings.spin_cost


class GameEngine:
    """
    Grid economy engine.

    Implements:
    - Grid placement with fresh randomness per spin
    - Base value summation
    - Catalog effect evaluation against a static grid snapshot
    - Fresh game creation
    """

    def __init__(
        self,
        rng: RNGBase | None = None,
        symbols: SymbolCatalog | None = None,
        shop_rng: RNGBase | None = None,
    ):
        self.rng = rng or ProductionRNG()
        self.catalog = symbols or catalog
        # Shop draws use their own generator so buying never shifts placement
        self.shop_rng = shop_rng or ProductionRNG()

    def new_game_state(self) -> GameState:
        """Fresh game: floor 0, no coins, starting symbols placed on a grid."""
        starting = self.catalog.starting_symbols()
        return GameState(symbols=starting, grid=place_grid(starting, self.rng))

    def draw_offers(self, count: int) -> list[SymbolDef]:
        """Rarity-weighted shop offers, drawn from the shop generator."""
        return self.catalog.draw_offers(self.shop_rng, count)

    def resolve_spin(self, owned: list[SymbolInstance]) -> SpinResult:
        """
        Execute a spin and return result.

        Args:
            owned: The player's owned symbols (any count)

        Returns:
            SpinResult with the placed grid and its base/bonus coins
        """
        grid = place_grid(owned, self.rng)
        return self.evaluate_grid(grid)

    def evaluate_grid(self, grid: Grid) -> SpinResult:
        """
        Score a placed grid.

        Every effect sees the same snapshot with bonus values cleared, so the
        result does not depend on evaluation order. Bonus values are written
        onto the returned grid only after all effects have run.
        """
        snapshot: Grid = [
            cell.model_copy(update={"bonus_value": 0}) if cell is not None else None
            for cell in grid
        ]

        base_coins = 0
        for _, cell in occupied_cells(snapshot):
            base_coins += cell.value

        bonuses: dict[int, int] = {}
        for index, cell in occupied_cells(snapshot):
            bonus = self._effect_bonus(snapshot, index, cell)
            if bonus:
                bonuses[index] = bonus

        resolved: Grid = [
            cell.model_copy(update={"bonus_value": bonuses[i]}) if i in bonuses else cell
            for i, cell in enumerate(snapshot)
        ]

        return SpinResult(
            grid=resolved,
            base_coins=base_coins,
            bonus_coins=sum(bonuses.values()),
        )

    def _effect_bonus(self, grid: Grid, index: int, cell: SymbolInstance) -> int:
        """
        Bonus for one cell, or 0 when the symbol has no effect.

        A failing or misbehaving effect is a local fault: it is logged and
        contributes 0 instead of aborting the spin.
        """
        symbol_def = self.catalog.get(cell.id)
        if symbol_def is None or symbol_def.effect is None:
            return 0

        handler = EFFECT_HANDLERS.get(symbol_def.effect.kind)
        if handler is None:
            return 0

        try:
            bonus = handler(grid, index, symbol_def.effect)
        except Exception as e:
            logger.warning("Effect failed for %s at cell %d: %s", cell.id, index, e)
            return 0

        if isinstance(bonus, bool) or not isinstance(bonus, int) or bonus < 0:
            logger.warning(
                "Effect for %s at cell %d returned invalid bonus %r", cell.id, index, bonus
            )
            return 0
        return bonus


def settle_rent(coins: int, floor: int, schedule: list[RentTier]) -> RentOutcome:
    """
    Settle the rent for the current floor.

    Affordability compares the balance before deduction with >=, so paying
    exactly the rent passes. Rent is deducted before the victory check: when
    the last floor is paid both happen in the same settlement.
    """
    if floor >= len(schedule):
        return RentOutcome(
            success=True,
            game_over=True,
            victory=True,
            message=f"All {len(schedule)} floors are already cleared.",
            new_floor=len(schedule),
            remaining_coins=coins,
        )

    rent = schedule[floor].rent
    if coins < rent:
        return RentOutcome(
            success=False,
            game_over=True,
            victory=False,
            message=f"Game Over! You couldn't pay the rent of {rent} coins.",
            new_floor=floor,
            remaining_coins=coins,
            next_rent=rent,
        )

    new_floor = floor + 1
    remaining = coins - rent

    if new_floor == len(schedule):
        return RentOutcome(
            success=True,
            game_over=True,
            victory=True,
            message=(
                f"Congratulations! You've completed all {len(schedule)} floors "
                "and won the game!"
            ),
            new_floor=new_floor,
            remaining_coins=remaining,
        )

    next_tier = schedule[new_floor]
    return RentOutcome(
        success=True,
        game_over=False,
        victory=False,
        message=(
            f"You've advanced to floor {new_floor + 1}! Next rent: "
            f"{next_tier.rent} coins in {next_tier.turns} spins."
        ),
        new_floor=new_floor,
        remaining_coins=remaining,
        next_rent=next_tier.rent,
        next_turns=next_tier.turns,
    )
