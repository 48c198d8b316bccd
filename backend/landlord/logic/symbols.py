"""Symbol catalog and effect registry.

Effects are data: each catalog entry may carry an EffectSpec whose kind
selects a pure handler from EFFECT_HANDLERS. Handlers receive the whole
resolved grid and the cell index of the symbol being scored, and return a
non-negative bonus. Instances never carry behaviour; the engine looks the
effect up by symbol id when it scores a grid.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from landlord.logic.grid import CORNER_INDICES, adjacent_indices
from landlord.logic.models import Grid, Rarity, SymbolInstance
from landlord.logic.rng import RNGBase


class EffectKind(str, Enum):
    """Bonus effect variants."""
    ADJACENT_SYMBOL = "adjacent_symbol"
    ADJACENT_ANY = "adjacent_any"
    ADJACENT_EMPTY = "adjacent_empty"
    SAME_SYMBOL = "same_symbol"
    CORNER = "corner"


@dataclass(frozen=True)
class EffectSpec:
    """Parameters for one effect variant."""
    kind: EffectKind
    amount: int
    targets: tuple[str, ...] = ()


@dataclass(frozen=True)
class SymbolDef:
    """Immutable catalog template."""
    id: str
    name: str
    emoji: str
    value: int
    rarity: Rarity
    effect: EffectSpec | None = None
    effect_description: str | None = None

    def instance(self) -> SymbolInstance:
        return SymbolInstance(
            id=self.id,
            name=self.name,
            emoji=self.emoji,
            value=self.value,
            rarity=self.rarity,
        )


EffectHandler = Callable[[Grid, int, EffectSpec], int]


def _adjacent_symbol(grid: Grid, index: int, spec: EffectSpec) -> int:
    hits = 0
    for n in adjacent_indices(index):
        cell = grid[n]
        if cell is not None and cell.id in spec.targets:
            hits += 1
    return hits * spec.amount


def _adjacent_any(grid: Grid, index: int, spec: EffectSpec) -> int:
    return sum(spec.amount for n in adjacent_indices(index) if grid[n] is not None)


def _adjacent_empty(grid: Grid, index: int, spec: EffectSpec) -> int:
    return sum(spec.amount for n in adjacent_indices(index) if grid[n] is None)


def _same_symbol(grid: Grid, index: int, spec: EffectSpec) -> int:
    own_id = grid[index].id if grid[index] is not None else None
    others = sum(
        1
        for i, cell in enumerate(grid)
        if i != index and cell is not None and cell.id == own_id
    )
    return others * spec.amount


def _corner(grid: Grid, index: int, spec: EffectSpec) -> int:
    return spec.amount if index in CORNER_INDICES else 0


EFFECT_HANDLERS: dict[EffectKind, EffectHandler] = {
    EffectKind.ADJACENT_SYMBOL: _adjacent_symbol,
    EffectKind.ADJACENT_ANY: _adjacent_any,
    EffectKind.ADJACENT_EMPTY: _adjacent_empty,
    EffectKind.SAME_SYMBOL: _same_symbol,
    EffectKind.CORNER: _corner,
}


# Rarity weights for shop offers
RARITY_WEIGHTS: dict[Rarity, int] = {
    Rarity.COMMON: 70,
    Rarity.UNCOMMON: 25,
    Rarity.RARE: 5,
}

STARTING_SYMBOL_IDS = ("coin", "cherry", "pearl", "flower", "cat")


SYMBOL_DEFS: tuple[SymbolDef, ...] = (
    SymbolDef("coin", "Coin", "🪙", 1, Rarity.COMMON),
    SymbolDef("cherry", "Cherry", "🍒", 1, Rarity.COMMON),
    SymbolDef("pearl", "Pearl", "🦪", 1, Rarity.COMMON),
    SymbolDef("flower", "Flower", "🌼", 1, Rarity.COMMON),
    SymbolDef("milk", "Milk", "🥛", 1, Rarity.COMMON),
    SymbolDef("banana", "Banana", "🍌", 1, Rarity.COMMON),
    SymbolDef(
        "cat", "Cat", "🐱", 1, Rarity.COMMON,
        effect=EffectSpec(EffectKind.ADJACENT_SYMBOL, 9, ("milk",)),
        effect_description="Gives 9 coins for each adjacent Milk.",
    ),
    SymbolDef(
        "bee", "Bee", "🐝", 1, Rarity.UNCOMMON,
        effect=EffectSpec(EffectKind.ADJACENT_SYMBOL, 2, ("flower",)),
        effect_description="Gives 2 coins for each adjacent Flower.",
    ),
    SymbolDef(
        "monkey", "Monkey", "🐒", 1, Rarity.UNCOMMON,
        effect=EffectSpec(EffectKind.ADJACENT_SYMBOL, 3, ("banana",)),
        effect_description="Gives 3 coins for each adjacent Banana.",
    ),
    SymbolDef(
        "dog", "Dog", "🐶", 1, Rarity.UNCOMMON,
        effect=EffectSpec(EffectKind.ADJACENT_ANY, 1),
        effect_description="Gives 1 coin for each adjacent symbol.",
    ),
    SymbolDef(
        "hermit", "Hermit", "🧙", 1, Rarity.UNCOMMON,
        effect=EffectSpec(EffectKind.ADJACENT_EMPTY, 2),
        effect_description="Gives 2 coins for each adjacent empty space.",
    ),
    SymbolDef(
        "clover", "Clover", "🍀", 1, Rarity.UNCOMMON,
        effect=EffectSpec(EffectKind.CORNER, 4),
        effect_description="Gives 4 coins when placed in a corner.",
    ),
    SymbolDef(
        "diamond", "Diamond", "💎", 5, Rarity.RARE,
        effect=EffectSpec(EffectKind.SAME_SYMBOL, 1),
        effect_description="Gives 1 coin for each other Diamond.",
    ),
    SymbolDef(
        "sun", "Sun", "☀️", 3, Rarity.RARE,
        effect=EffectSpec(EffectKind.ADJACENT_SYMBOL, 5, ("flower",)),
        effect_description="Gives 5 coins for each adjacent Flower.",
    ),
)


class SymbolCatalog:
    """Read-only registry of symbol templates keyed by id."""

    def __init__(self, defs: tuple[SymbolDef, ...] = SYMBOL_DEFS):
        self._defs: dict[str, SymbolDef] = {}
        for symbol_def in defs:
            if symbol_def.id in self._defs:
                raise ValueError(f"Duplicate symbol id: {symbol_def.id}")
            self._defs[symbol_def.id] = symbol_def

    def __contains__(self, symbol_id: str) -> bool:
        return symbol_id in self._defs

    def __len__(self) -> int:
        return len(self._defs)

    def all(self) -> list[SymbolDef]:
        return list(self._defs.values())

    def get(self, symbol_id: str) -> SymbolDef | None:
        """Template for an id, or None when the id is not in the catalog."""
        return self._defs.get(symbol_id)

    def instance(self, symbol_id: str) -> SymbolInstance:
        """Fresh instance of a catalog symbol. Raises KeyError for unknown ids."""
        return self._defs[symbol_id].instance()

    def starting_symbols(self) -> list[SymbolInstance]:
        return [self.instance(symbol_id) for symbol_id in STARTING_SYMBOL_IDS]

    def draw_offers(self, rng: RNGBase, count: int) -> list[SymbolDef]:
        """
        Draw distinct symbols for the shop, weighted by rarity.

        Returns fewer than count only when the catalog is smaller.
        """
        pool = self.all()
        offers: list[SymbolDef] = []
        while pool and len(offers) < count:
            total = sum(RARITY_WEIGHTS[d.rarity] for d in pool)
            r = rng.random() * total
            for i, candidate in enumerate(pool):
                r -= RARITY_WEIGHTS[candidate.rarity]
                if r < 0:
                    break
            # float drift can leave r >= 0 after the loop; i is then the last slot
            offers.append(pool.pop(i))
        return offers


catalog = SymbolCatalog()
