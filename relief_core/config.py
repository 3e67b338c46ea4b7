"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration
of the disaster coordination core:
- geocoding providers (API keys, timeouts, worker pool)
- location cache (TTL and sweep interval)
- location extraction (LLM endpoint)
- event broadcasting and record store retries
- logging

Configuration can be overridden via environment variables:
- RELIEF_GEO_GOOGLE_API_KEY=...
- RELIEF_CACHE_DEFAULT_TTL_SECONDS=600
- RELIEF_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeocodingConfig(BaseSettings):
    """Geocoding provider configuration.

    Environment variables prefixed with RELIEF_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_GEO_")

    google_api_key: Optional[str] = None
    user_agent: str = "DisasterResponsePlatform/1.0"
    timeout_seconds: int = 10
    provider_timeout_seconds: float = 5.0
    max_workers: int = 8
    rate_limit_delay: float = 1.0
    max_retries: int = 1
    error_wait_seconds: float = 1.0


class CacheConfig(BaseSettings):
    """Location cache configuration.

    Environment variables prefixed with RELIEF_CACHE_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_CACHE_")

    default_ttl_seconds: float = 3600.0
    sweep_interval_seconds: float = 3600.0
    max_size: Optional[int] = None


class ExtractionConfig(BaseSettings):
    """Location extraction configuration.

    Environment variables prefixed with RELIEF_EXTRACT_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_EXTRACT_")

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 10.0


class EventsConfig(BaseSettings):
    """Real-time event configuration.

    Environment variables prefixed with RELIEF_EVENTS_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_EVENTS_")

    event_name: str = "disaster_updated"


class StoreConfig(BaseSettings):
    """Record store configuration.

    Environment variables prefixed with RELIEF_STORE_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_STORE_")

    max_update_retries: int = 3


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with RELIEF_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.geocoding.provider_timeout_seconds)
        print(config.cache.default_ttl_seconds)

    Environment variables prefixed with RELIEF_.
    """

    model_config = SettingsConfigDict(env_prefix="RELIEF_")

    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
