"""Engine configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UNIT_RATE = 289.0
MINUTES_PER_UNIT = 15


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLAIM_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Allocation
    allocator_strategy: Literal["rule_based", "delegated"] = "rule_based"
    default_unit_rate: float = DEFAULT_UNIT_RATE
    minutes_per_unit: int = MINUTES_PER_UNIT

    # Language model used by the delegated allocator
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.3

    # Practice whose letterhead is used on appeals
    practice_id: int = 1


@lru_cache
def get_settings() -> EngineSettings:
    """Return the process-wide settings."""
    return EngineSettings()
