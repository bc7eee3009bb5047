"""Fetch squadron snapshots from the War Thunder website or a saved copy of it."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import httpx

from clantrack.adapters.http_resilience import (
    ResilientClient,
    is_transient_http_error,
    retry_after_seconds,
)
from clantrack.common import retry_async
from clantrack.config.http_resilience import ResilienceConfig, RetryPolicy
from clantrack.domain.errors import FetchError

from .parser import parse_squadron_members

if TYPE_CHECKING:
    from collections.abc import Callable

    from clantrack.common.retry import Sleep
    from clantrack.domain.types import Observation

log = getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
)
_DEFAULT_TIMEOUT_SECONDS = 30.0


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="warthunder",
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        default_headers={"User-Agent": BROWSER_USER_AGENT},
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def is_remote_source(source: str) -> bool:
    return urlsplit(source).scheme.lower() in {"http", "https"}


@dataclass(slots=True)
class SquadronPageFetcher:
    """Snapshot fetcher for the squadron members page.

    A source without an ``http(s)`` scheme is read as a local HTML file, which is
    how deployments behind the site's bot protection feed a saved page in.
    Transient failures are retried; when retries run out the cycle sees an empty
    snapshot. Anything else (a 404, an unreadable file) raises ``FetchError``.
    """

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    sleep: Sleep = asyncio.sleep
    clock: Callable[[], datetime] = _utcnow

    def __call__(self, source: str) -> list[Observation]:
        log.info("Starting squadron member extraction from %s", source)
        html = self._download(source) if is_remote_source(source) else self._read_file(source)
        if html is None:
            return []
        return parse_squadron_members(html, observed_at=self.clock())

    def _read_file(self, source: str) -> str:
        path = Path(source).expanduser()
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FetchError(f"Could not read squadron snapshot file {path}: {exc}") from exc

    def _download(self, url: str) -> str | None:
        try:
            return asyncio.run(self._download_async(url))
        except httpx.HTTPError as exc:
            if is_transient_http_error(exc, self.retry):
                log.error("Giving up on %s after %s attempt(s): %s", url, self.retry.attempts, exc)
                return None
            raise FetchError(f"Could not fetch squadron page {url}: {exc}") from exc

    async def _download_async(self, url: str) -> str:
        async with self.client_factory(self.resilience) as client:

            async def fetch_page() -> str:
                response = await client.get(url)
                response.raise_for_status()
                return response.text

            return await retry_async(
                fetch_page,
                attempts=self.retry.attempts,
                base_delay=self.retry.base_delay_seconds,
                is_transient=partial(is_transient_http_error, policy=self.retry),
                operation_name=f"GET {url}",
                sleep=self.sleep,
                min_delay=partial(retry_after_seconds, policy=self.retry),
            )


if TYPE_CHECKING:
    from clantrack.domain.ports.fetching import SnapshotFetcher

    _fetcher_check: SnapshotFetcher = SquadronPageFetcher()
