"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_float, env_int, env_str, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .pipeline import PipelineConfig, get_pipeline_config, parse_enabled_sources
from .sources import (
    ArdbConfig,
    MahcksConfig,
    MetaForgeConfig,
    RaidTheoryConfig,
    SourcesConfig,
    get_sources_config,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ArdbConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MahcksConfig",
    "MetaForgeConfig",
    "MissingConfigurationError",
    "PipelineConfig",
    "RaidTheoryConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SourcesConfig",
    "StorageConfig",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "get_database_config",
    "get_pipeline_config",
    "get_sources_config",
    "get_storage_config",
    "parse_enabled_sources",
    "require_env_vars",
]
