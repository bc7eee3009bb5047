"""Application configuration helpers."""

from __future__ import annotations

from .app import AppConfig, get_app_config
from .discord import DiscordConfig, default_discord_resilience, get_discord_config
from .env import int_env_var, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .tracking import DepartedPolicy, TrackingConfig, get_tracking_config
from .validation import validate_configuration

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DepartedPolicy",
    "DiscordConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "TrackingConfig",
    "configure_logging",
    "default_discord_resilience",
    "get_app_config",
    "get_database_config",
    "get_database_uri",
    "get_discord_config",
    "get_storage_config",
    "get_tracking_config",
    "int_env_var",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
    "validate_configuration",
]
