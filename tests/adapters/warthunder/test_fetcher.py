from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003

import httpx
import pytest

from clantrack.adapters.http_resilience import ResilientClient
from clantrack.adapters.warthunder import BROWSER_USER_AGENT, SquadronPageFetcher
from clantrack.config import ResilienceConfig, RetryPolicy
from clantrack.domain.errors import FetchError
from tests.adapters.warthunder.pages import member_row, squadron_page

URL = "https://warthunder.com/en/community/claninfo/Example"
NOW = datetime(2024, 5, 4, 6, 0, tzinfo=UTC)
PAGE = squadron_page(member_row(1, "Ace_Pilot", "2345"), member_row(2, "Wingman", "1800"))


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


async def _no_sleep(_delay: float) -> None:
    return None


def _fetcher(handler: Callable[[httpx.Request], httpx.Response]) -> SquadronPageFetcher:
    return SquadronPageFetcher(
        retry=RetryPolicy(attempts=3, base_delay_seconds=0.0),
        client_factory=_make_client_factory(handler),
        sleep=_no_sleep,
        clock=lambda: NOW,
    )


def test_fetches_and_parses_page_with_browser_user_agent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=PAGE)

    observations = _fetcher(handler)(URL)

    assert [(item.username, item.rating) for item in observations] == [
        ("Ace_Pilot", 2345),
        ("Wingman", 1800),
    ]
    assert observations[0].observed_at == NOW
    assert seen[0].headers["User-Agent"] == BROWSER_USER_AGENT
    assert str(seen[0].url) == URL


def test_transient_errors_are_retried() -> None:
    responses = [httpx.Response(503), httpx.Response(429), httpx.Response(200, text=PAGE)]

    def handler(_request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    observations = _fetcher(handler)(URL)

    assert len(observations) == 2
    assert responses == []


def test_exhausted_retries_yield_empty_snapshot() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ConnectError("connection refused", request=request)

    assert _fetcher(handler)(URL) == []
    assert len(calls) == 3


def test_client_errors_raise_fetch_error_without_retry() -> None:
    calls: list[int] = []

    def handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(404, text="not found")

    with pytest.raises(FetchError, match="404"):
        _fetcher(handler)(URL)
    assert len(calls) == 1


def test_local_file_is_read_instead_of_fetching(tmp_path: Path) -> None:
    page = tmp_path / "index.html"
    page.write_text(PAGE, encoding="utf-8")

    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no HTTP request expected")

    observations = _fetcher(handler)(str(page))

    assert [item.username for item in observations] == ["Ace_Pilot", "Wingman"]


def test_missing_local_file_raises_fetch_error(tmp_path: Path) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no HTTP request expected")

    with pytest.raises(FetchError, match="snapshot file"):
        _fetcher(handler)(str(tmp_path / "missing.html"))


def test_rate_limited_download_waits_for_retry_after() -> None:
    responses = [
        httpx.Response(429, headers={"Retry-After": "7"}),
        httpx.Response(200, text=PAGE),
    ]
    delays: list[float] = []

    async def record_sleep(delay: float) -> None:
        delays.append(delay)

    fetcher = SquadronPageFetcher(
        retry=RetryPolicy(attempts=3, base_delay_seconds=1.0),
        client_factory=_make_client_factory(lambda _request: responses.pop(0)),
        sleep=record_sleep,
        clock=lambda: NOW,
    )

    assert len(fetcher(URL)) == 2
    assert delays == [7.0]
