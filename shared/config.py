"""
Shared configuration management for the document store caching layer.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATASOURCE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class DataSourceConfig(BaseConfig):
    """Caching and batching options for collection data sources."""

    # Cache backend
    cache_backend: Literal["memory", "redis"] = Field(default="memory")
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_namespace: str = Field(default="db:mongo")
    memory_cache_max_size: int = Field(default=10_000, gt=0)

    # Facade behaviour
    allow_flushing_collection_cache: bool = Field(default=False)
    debug: bool = Field(default=False)
    memoize_loads: bool = Field(default=False)


def get_config(**overrides) -> DataSourceConfig:
    """Get data source configuration, environment first, then overrides."""
    return DataSourceConfig(**overrides)
