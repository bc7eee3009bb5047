"""Squadron tracking configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import int_env_var, optional_env_var, require_env_var
from .errors import ConfigurationError
from .http_resilience import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY_MS, RetryPolicy


class DepartedPolicy(StrEnum):
    """What happens to a member that disappears from the squadron page."""

    DELETE = "delete"
    DEACTIVATE = "deactivate"


@dataclass(frozen=True, slots=True)
class TrackingConfig:
    """Holds squadron page and retry configuration values."""

    clan_url: str
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    departed_policy: DepartedPolicy = DepartedPolicy.DELETE
    snapshot_file: str | None = None

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy.from_milliseconds(
            attempts=self.retry_attempts,
            base_delay_ms=self.retry_delay_ms,
        )

    @property
    def source(self) -> str:
        """Where the snapshot is read from: a local file when configured, else the URL."""

        return self.snapshot_file or self.clan_url


def _parse_policy(value: str | None) -> DepartedPolicy:
    if value is None:
        return DepartedPolicy.DELETE
    try:
        return DepartedPolicy(value.lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in DepartedPolicy)
        raise ConfigurationError(
            f"CLAN_DEPARTED_POLICY must be one of: {allowed} (got {value!r})"
        ) from exc


def get_tracking_config() -> TrackingConfig:
    return TrackingConfig(
        clan_url=require_env_var("CLAN_URL"),
        retry_attempts=int_env_var("CLAN_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS),
        retry_delay_ms=int_env_var("CLAN_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS),
        departed_policy=_parse_policy(optional_env_var("CLAN_DEPARTED_POLICY")),
        snapshot_file=optional_env_var("CLAN_SNAPSHOT_FILE"),
    )
