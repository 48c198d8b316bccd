"""Config hash of the game economy.

Shared by:
- scripts/simulate.py (CSV report)
- telemetry.py (spin_processed event)

The hash MUST be computed identically in both locations.
"""
import hashlib
import json

from landlord.config import settings
from landlord.logic.models import DEFAULT_RENT_SCHEDULE
from landlord.logic.symbols import catalog


def get_config_hash() -> str:
    """
    Hash of the settings, rent schedule and symbol values that drive the economy.

    Returns 16-char hex hash of config snapshot.
    """
    config_snapshot = {
        "grid_size": settings.grid_size,
        "max_symbols_on_grid": settings.max_symbols_on_grid,
        "spin_cost": settings.spin_cost,
        "rent_schedule": [[t.rent, t.turns] for t in DEFAULT_RENT_SCHEDULE],
        "symbols": {
            d.id: [
                d.value,
                d.rarity.value,
                [d.effect.kind.value, d.effect.amount, list(d.effect.targets)]
                if d.effect
                else None,
            ]
            for d in catalog.all()
        },
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
