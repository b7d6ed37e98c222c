from functools import lru_cache
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="NAIL_",
        populate_by_name=True,
    )

    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string",
    )
    mongodb_db_name: str = Field(
        default="nail_arena",
        description="Name of the MongoDB database",
    )
    use_memory_store: bool = Field(
        default=False,
        description="Skip MongoDB and serve everything from the in-memory store",
    )
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to access the API",
    )

    jwt_secret: str = Field(default="dev-secret-change-me")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=60 * 24)

    # Starting balances for lazily created profiles.
    starting_soul: int = Field(default=100, ge=0)
    starting_dream_points: int = Field(default=0, ge=0)
    starting_masks: int = Field(default=3, ge=0)
    starting_coins: int = Field(default=0, ge=0)

    # Cases and loot.
    case_costs: Dict[str, int] = Field(
        default_factory=lambda: {"basic": 50, "legendary": 150, "plain": 100}
    )
    loot_weight_base: float = Field(default=100.0, gt=0)
    loot_weight_decay: float = Field(default=1.6, gt=1)
    bonus_variant_chance: float = Field(default=0.10, ge=0, le=1)
    strip_length: int = Field(default=50, ge=1)
    strip_winner_offset: int = Field(default=5, ge=1)

    # Shop.
    mask_cost: int = Field(default=20, ge=0)
    mask_currency: str = Field(default="soul")
    conversion_rates: Dict[str, int] = Field(
        default_factory=lambda: {"soul:dream_points": 100, "soul:coins": 10},
        description="'cheap:premium' pairs mapped to units of cheap per unit of premium",
    )
    admin_code_length: int = Field(default=8, ge=4)
    trade_code_length: int = Field(default=8, ge=4)

    # Timing bar.
    tick_interval_ms: int = Field(default=20, gt=0)
    bar_speed: float = Field(default=2.75, gt=0)
    perfect_zone_start: float = Field(default=45.0)
    perfect_zone_size: float = Field(default=10.0)
    perfect_zone_size_thread: float = Field(default=15.0)
    good_zone_start: float = Field(default=35.0)
    good_zone_end: float = Field(default=65.0)
    perfect_multiplier: float = Field(default=2.5)
    good_multiplier: float = Field(default=1.5)
    miss_multiplier: float = Field(default=0.5)

    # Combat.
    player_max_health: int = Field(default=100, gt=0)
    player_damage_roll: int = Field(default=10, gt=0)
    enemy_damage_roll: int = Field(default=8, gt=0)
    soul_reward_roll: int = Field(default=20, gt=0)
    dream_reward_roll: int = Field(default=10, gt=0)
    dodge_chance: float = Field(default=0.15, ge=0, le=1)
    damage_reduction: float = Field(default=0.20, ge=0, le=1)
    reflect_ratio: float = Field(default=0.25, ge=0)
    death_save_health: int = Field(default=30, gt=0)


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


settings = get_settings()
