"""Semantic validation of loaded configuration values.

Loading (``get_app_config``) only checks presence and types. This module checks
that the values make sense before any cycle runs: placeholder values copied from
the example environment file, out-of-range retry settings and malformed URLs are
rejected together so the operator can fix everything in one pass.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final
from urllib.parse import urlparse

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .app import AppConfig
    from .discord import DiscordConfig
    from .storage import DatabaseConfig
    from .tracking import TrackingConfig

log = logging.getLogger(__name__)

PLACEHOLDER_TOKEN: Final[str] = "your_bot_token_here"
PLACEHOLDER_CHANNEL_ID: Final[int] = 123456789012345678
PLACEHOLDER_ROLE_ID: Final[int] = 987654321098765432
MIN_TOKEN_LENGTH: Final[int] = 50
MIN_RETRY_DELAY_MS: Final[int] = 100
MAX_RECOMMENDED_RETRY_DELAY_MS: Final[int] = 30_000
MAX_RECOMMENDED_RETRY_ATTEMPTS: Final[int] = 10


def _validate_discord(discord: DiscordConfig, errors: list[str], warnings: list[str]) -> None:
    token = discord.token.strip()
    if not token:
        errors.append("DISCORD_TOKEN is required. Provide a valid Discord bot token.")
    elif token == PLACEHOLDER_TOKEN:
        errors.append(
            "DISCORD_TOKEN still holds the placeholder value; replace it with the bot token."
        )
    elif len(token) < MIN_TOKEN_LENGTH:
        warnings.append(
            "DISCORD_TOKEN looks too short; Discord bot tokens are usually longer "
            f"than {MIN_TOKEN_LENGTH} characters."
        )

    if discord.guild_id <= 0:
        errors.append("DISCORD_GUILD_ID must be a Discord server id (18-19 digit number).")

    if discord.channel_id <= 0:
        errors.append("DISCORD_CHANNEL_ID must be a Discord channel id (18-19 digit number).")
    elif discord.channel_id == PLACEHOLDER_CHANNEL_ID:
        errors.append("DISCORD_CHANNEL_ID still holds the placeholder value.")

    if discord.role_id <= 0:
        errors.append("DISCORD_ROLE_ID must be a Discord role id (18-19 digit number).")
    elif discord.role_id == PLACEHOLDER_ROLE_ID:
        errors.append("DISCORD_ROLE_ID still holds the placeholder value.")


def _validate_tracking(tracking: TrackingConfig, errors: list[str], warnings: list[str]) -> None:
    parsed = urlparse(tracking.clan_url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        errors.append("CLAN_URL must be an absolute http or https URL.")
    elif "warthunder.com" not in parsed.netloc:
        warnings.append(
            "CLAN_URL does not point to warthunder.com; make sure it is a squadron page."
        )

    if tracking.retry_attempts < 1:
        errors.append("CLAN_RETRY_ATTEMPTS must be at least 1 (recommended: 3).")
    elif tracking.retry_attempts > MAX_RECOMMENDED_RETRY_ATTEMPTS:
        warnings.append("CLAN_RETRY_ATTEMPTS is high; a value between 3 and 5 is usually enough.")

    if tracking.retry_delay_ms < MIN_RETRY_DELAY_MS:
        errors.append(
            f"CLAN_RETRY_DELAY_MS must be at least {MIN_RETRY_DELAY_MS} (recommended: 1000)."
        )
    elif tracking.retry_delay_ms > MAX_RECOMMENDED_RETRY_DELAY_MS:
        warnings.append("CLAN_RETRY_DELAY_MS is high; 1000-5000 ms is usually enough.")


def _validate_database(database: DatabaseConfig, errors: list[str]) -> None:
    if not database.uri.strip():
        errors.append("DATABASE_URI must not be blank.")


def validate_configuration(config: AppConfig) -> list[str]:
    """Validate ``config`` and return the warnings; raise on any error."""

    errors: list[str] = []
    warnings: list[str] = []

    _validate_discord(config.discord, errors, warnings)
    _validate_tracking(config.tracking, errors, warnings)
    _validate_database(config.database, errors)

    for warning in warnings:
        log.warning("Configuration warning: %s", warning)

    if errors:
        numbered = "\n".join(f"  {index}. {error}" for index, error in enumerate(errors, start=1))
        raise ConfigurationError(f"Configuration validation failed:\n{numbered}")

    log.info("Configuration validated with %s warning(s)", len(warnings))
    return warnings
