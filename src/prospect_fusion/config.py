"""
Configuration management for prospect_fusion.

Uses pydantic-settings so every knob can be overridden from the environment
(prefix ``PROSPECT_FUSION_``) or a local ``.env`` file.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for a fusion run."""

    model_config = SettingsConfigDict(
        env_prefix="PROSPECT_FUSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    match_threshold: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Minimum identity score for two records to share a cluster",
    )
    grouping_strategy: Literal["seed", "transitive"] = Field(
        default="seed",
        description="seed: compare against the cluster seed only; transitive: union-find closure",
    )
    blocking_enabled: bool = Field(
        default=False,
        description="Only compare records sharing a blocking key (name prefix, email, phone)",
    )
    id_prefix: str = Field(
        default="prospect",
        description="Prefix for generated entity ids",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level used by the CLI",
    )

    @field_validator("grouping_strategy", mode="before")
    @classmethod
    def lower_strategy(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("id_prefix")
    @classmethod
    def non_empty_prefix(cls, v: str) -> str:
        v = v.strip()
        return v or "prospect"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; call ``get_settings.cache_clear()`` in tests."""
    return Settings()
