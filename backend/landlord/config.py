"""Application configuration derived from environment."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings with game defaults."""

    model_config = SettingsConfigDict(env_prefix="LANDLORD_")

    # Server
    debug: bool = False
    log_level: str = "INFO"
    redis_url: str = "redis://localhost:6379/0"

    # Protocol
    protocol_version: str = "1.0"

    # Grid economy
    grid_size: int = 5
    max_symbols_on_grid: int = 20
    spin_cost: int = 1
    shop_offer_count: int = 3

    # Persistence - one snapshot per player under "{save_key}:{player_id}"
    save_key: str = "landlordLuckSave"
    player_state_ttl_seconds: int = 604800  # 7 days

    # Per-player action lock, auto-expires if the process crashes mid-dispatch
    lock_ttl_seconds: int = 30


settings = Settings()
