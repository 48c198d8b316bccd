#!/usr/bin/env python3
"""
Headless game simulation.

Plays whole games with a seeded RNG and writes a one-row CSV report of how
far players get through the rent schedule.

Usage:
    python -m scripts.simulate --games 10000 --seed SIM_2026 --out out/sim.csv
    python -m scripts.simulate --games 10000 --seed SIM_2026 --strategy first --out out/sim_buy.csv
"""
import argparse
import csv
import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from landlord.config import settings
from landlord.config_hash import get_config_hash
from landlord.logic.engine import GameEngine
from landlord.logic.models import DEFAULT_RENT_SCHEDULE, GameState
from landlord.logic.reducer import Action, ActionType, GameReducer
from landlord.logic.rng import SeededRNG

STRATEGIES = ("none", "first")


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    games: int = 0
    wins: int = 0
    total_spins: int = 0
    total_earned: int = 0
    floors_reached: list[int] = field(default_factory=list)

    def floor_distribution(self) -> dict[int, int]:
        dist: dict[int, int] = {}
        for floor in self.floors_reached:
            dist[floor] = dist.get(floor, 0) + 1
        return dict(sorted(dist.items()))


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def play_game(reducer: GameReducer, strategy: str) -> tuple[GameState, int, int]:
    """
    Play one game to its end.

    Returns (final state, spins taken, coins earned from spins).
    """
    engine = reducer.engine
    state = engine.new_game_state()
    spins = 0
    earned = 0

    while not state.is_terminal:
        state = reducer.reduce(state, Action(type=ActionType.START_SPIN))
        result = engine.resolve_spin(state.symbols)
        state = reducer.reduce(state, Action(type=ActionType.UPDATE_GRID, payload=result.grid))
        state = reducer.reduce(state, Action(type=ActionType.ADD_COINS, payload=result.total_coins))
        state = reducer.reduce(state, Action(type=ActionType.STOP_SPIN))
        state = reducer.reduce(state, Action(type=ActionType.DECREASE_TURNS))
        spins += 1
        earned += result.total_coins

        if strategy == "first" and not state.is_terminal:
            offers = engine.draw_offers(settings.shop_offer_count)
            if offers:
                state = reducer.reduce(
                    state, Action(type=ActionType.ADD_SYMBOL, payload=offers[0].instance())
                )
        state = reducer.reduce(state, Action(type=ActionType.CLOSE_SHOP))

    return state, spins, earned


def run_simulation(
    games: int,
    seed_str: str,
    strategy: str = "none",
    verbose: bool = False,
) -> SimulationStats:
    """
    Run headless simulation.

    Args:
        games: Number of games to play
        seed_str: Seed string for reproducibility
        strategy: 'none' never buys, 'first' buys the first shop offer after every spin
        verbose: Print progress

    Returns:
        SimulationStats with aggregated results
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy}")

    reducer = GameReducer(
        GameEngine(
            rng=SeededRNG(seed=seed_to_int(seed_str)),
            shop_rng=SeededRNG(seed=seed_to_int(f"{seed_str}:shop")),
        )
    )
    stats = SimulationStats()

    progress_interval = max(1, games // 100)
    for game in range(games):
        if verbose and game % progress_interval == 0:
            print(f"\rProgress: {game / games * 100:.1f}%", end="", flush=True)

        state, spins, earned = play_game(reducer, strategy)
        stats.games += 1
        stats.wins += int(state.won)
        stats.total_spins += spins
        stats.total_earned += earned
        stats.floors_reached.append(state.floor)

    if verbose:
        print("\rProgress: 100.0%")

    return stats


def generate_csv(
    games: int,
    seed_str: str,
    strategy: str,
    stats: SimulationStats,
    output_path: str,
) -> None:
    """Write the simulation report CSV."""
    win_rate = (stats.wins / stats.games * 100) if stats.games > 0 else 0
    avg_floor = (sum(stats.floors_reached) / stats.games) if stats.games > 0 else 0
    avg_spins = (stats.total_spins / stats.games) if stats.games > 0 else 0
    avg_earned = (stats.total_earned / stats.games) if stats.games > 0 else 0

    row = {
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "config_hash": get_config_hash(),
        "games": games,
        "seed": seed_str,
        "strategy": strategy,
        "floors_total": len(DEFAULT_RENT_SCHEDULE),
        "win_rate": f"{win_rate:.4f}",
        "avg_floor": f"{avg_floor:.4f}",
        "max_floor": max(stats.floors_reached, default=0),
        "avg_spins": f"{avg_spins:.2f}",
        "avg_earned": f"{avg_earned:.2f}",
        "floor_distribution": "|".join(
            f"{floor}:{count}" for floor, count in stats.floor_distribution().items()
        ),
    }

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=row.keys())
        writer.writeheader()
        writer.writerow(row)

    print(f"CSV written to: {output_path}")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Headless rent economy simulation")
    parser.add_argument("--games", type=int, required=True, help="Number of games to play")
    parser.add_argument("--seed", type=str, required=True, help="Seed string for reproducibility")
    parser.add_argument("--out", type=str, required=True, help="Output CSV path")
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default="none",
        help="Shop behaviour: 'none' never buys, 'first' buys the first offer",
    )
    parser.add_argument("--verbose", action="store_true", help="Show progress")

    args = parser.parse_args()

    print(f"Running simulation: games={args.games}, seed={args.seed}, strategy={args.strategy}")
    print(f"Config hash: {get_config_hash()}")

    stats = run_simulation(
        games=args.games,
        seed_str=args.seed,
        strategy=args.strategy,
        verbose=args.verbose,
    )
    generate_csv(args.games, args.seed, args.strategy, stats, args.out)

    # Floors never run past the schedule
    if max(stats.floors_reached, default=0) > len(DEFAULT_RENT_SCHEDULE):
        print("ASSERTION FAILED: floor reached beyond rent schedule")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
