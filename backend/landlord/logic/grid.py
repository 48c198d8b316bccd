"""Grid geometry and random symbol placement."""
from landlord.config import settings
from landlord.logic.models import GRID_CELLS, Grid, SymbolInstance
from landlord.logic.rng import RNGBase

GRID_SIZE = settings.grid_size
MAX_SYMBOLS_ON_GRID = settings.max_symbols_on_grid

CORNER_INDICES = frozenset({0, GRID_SIZE - 1, GRID_CELLS - GRID_SIZE, GRID_CELLS - 1})


def adjacent_indices(index: int) -> list[int]:
    """
    Orthogonal neighbours of a cell, in up/right/down/left order.

    Neighbours outside the grid are dropped; there is no wraparound.
    """
    row, col = divmod(index, GRID_SIZE)
    neighbours: list[int] = []

    if row > 0:
        neighbours.append(index - GRID_SIZE)
    if col < GRID_SIZE - 1:
        neighbours.append(index + 1)
    if row < GRID_SIZE - 1:
        neighbours.append(index + GRID_SIZE)
    if col > 0:
        neighbours.append(index - 1)

    return neighbours


def place_grid(owned: list[SymbolInstance], rng: RNGBase) -> Grid:
    """
    Place owned symbols on random distinct cells.

    At most MAX_SYMBOLS_ON_GRID symbols are placed; when more are owned a
    uniformly random subset is kept. Placed instances are fresh copies with
    bonus_value reset, so per-spin bookkeeping never touches the owned list.
    """
    grid: Grid = [None] * GRID_CELLS

    to_place = rng.shuffle(owned)[:MAX_SYMBOLS_ON_GRID]
    positions = rng.shuffle(list(range(GRID_CELLS)))

    for symbol, position in zip(to_place, positions):
        grid[position] = symbol.model_copy(update={"bonus_value": 0}, deep=True)

    return grid


def occupied_cells(grid: Grid) -> list[tuple[int, SymbolInstance]]:
    """(index, instance) pairs for every occupied cell, in index order."""
    return [(i, cell) for i, cell in enumerate(grid) if cell is not None]


def count_triggered_cells(grid: Grid) -> int:
    """Count cells whose symbol earned a bonus on the last spin."""
    return sum(1 for cell in grid if cell is not None and cell.bonus_value > 0)
