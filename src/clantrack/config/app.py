"""Aggregate application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .discord import DiscordConfig, get_discord_config
from .storage import DatabaseConfig, get_database_config
from .tracking import TrackingConfig, get_tracking_config


@dataclass(frozen=True, slots=True)
class AppConfig:
    tracking: TrackingConfig
    discord: DiscordConfig
    database: DatabaseConfig


def get_app_config() -> AppConfig:
    return AppConfig(
        tracking=get_tracking_config(),
        discord=get_discord_config(),
        database=get_database_config(),
    )
