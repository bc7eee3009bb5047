"""Read squadron members out of the War Thunder squadron page.

The page renders its member table as a flat CSS grid: every cell is a ``div``
carrying the ``squadrons-members__grid-item`` class, the first six cells are the
column headers and every following run of six cells is one member row.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from logging import getLogger
from typing import TYPE_CHECKING, Final

from clantrack.domain.types import Observation

if TYPE_CHECKING:
    from datetime import datetime

log = getLogger(__name__)

GRID_ITEM_CLASS: Final = "squadrons-members__grid-item"
HEADER_COUNT: Final = 6
PLAYER_COLUMN: Final = "player"
RATING_COLUMN: Final = "personal clan rating"

MIN_USERNAME_LENGTH: Final = 2
MAX_USERNAME_LENGTH: Final = 100
MAX_RATING: Final = 50_000

_RATING_FORMATTING = str.maketrans("", "", ",. ")
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass(slots=True)
class GridCell:
    text_parts: list[str] = field(default_factory=list[str])
    link_parts: list[str] | None = None

    @property
    def text(self) -> str:
        return "".join(self.text_parts).strip()

    @property
    def link_text(self) -> str | None:
        if self.link_parts is None:
            return None
        return "".join(self.link_parts).strip()


class _GridCollector(HTMLParser):
    """Collects the text of every grid cell, plus the text of its first link."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.cells: list[GridCell] = []
        self._current: GridCell | None = None
        self._div_depth = 0
        self._in_link = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._current is not None:
            if tag == "div":
                self._div_depth += 1
            elif tag == "a" and self._current.link_parts is None:
                self._current.link_parts = []
                self._in_link = True
            return
        if tag != "div":
            return
        classes = dict(attrs).get("class") or ""
        if GRID_ITEM_CLASS in classes:
            self._current = GridCell()
            self._div_depth = 1

    def handle_endtag(self, tag: str) -> None:
        if self._current is None:
            return
        if tag == "a":
            self._in_link = False
        elif tag == "div":
            self._div_depth -= 1
            if self._div_depth == 0:
                self.cells.append(self._current)
                self._current = None
                self._in_link = False

    def handle_data(self, data: str) -> None:
        if self._current is None:
            return
        self._current.text_parts.append(data)
        if self._in_link and self._current.link_parts is not None:
            self._current.link_parts.append(data)


def extract_grid_cells(html: str) -> list[GridCell]:
    collector = _GridCollector()
    collector.feed(html)
    collector.close()
    return collector.cells


def is_valid_username(candidate: str) -> bool:
    return (
        MIN_USERNAME_LENGTH <= len(candidate) <= MAX_USERNAME_LENGTH
        and "Rating" not in candidate
        and "Score" not in candidate
    )


def parse_username(cell: GridCell) -> str | None:
    """Prefer the player link text and fall back to the whole cell text."""

    link_text = cell.link_text
    if link_text and is_valid_username(link_text):
        return link_text
    text = cell.text
    if text and is_valid_username(text):
        return text
    return None


def parse_rating(text: str) -> int | None:
    """Parse a rating such as ``"1,234"`` or ``"1 234"``; ``None`` when out of range."""

    cleaned = text.strip().translate(_RATING_FORMATTING)
    if not _INTEGER.fullmatch(cleaned):
        return None
    rating = int(cleaned)
    if not 0 <= rating <= MAX_RATING:
        return None
    return rating


def parse_squadron_members(html: str, *, observed_at: datetime) -> list[Observation]:
    """Return one observation per readable member row, in page order."""

    cells = extract_grid_cells(html)
    if len(cells) < HEADER_COUNT:
        log.warning("No member grid found on the squadron page; the page layout may have changed")
        return []

    headers = [cell.text for cell in cells[:HEADER_COUNT]]
    log.info("Detected headers: %s", ", ".join(headers))
    columns = {" ".join(header.split()).lower(): index for index, header in enumerate(headers)}
    player_index = columns.get(PLAYER_COLUMN)
    rating_index = columns.get(RATING_COLUMN)
    if player_index is None or rating_index is None:
        log.warning(
            "Squadron page lacks the %r or %r column; nothing parsed", PLAYER_COLUMN, RATING_COLUMN
        )
        return []

    observations: list[Observation] = []
    for start in range(HEADER_COUNT, len(cells) - HEADER_COUNT + 1, HEADER_COUNT):
        username = parse_username(cells[start + player_index])
        rating = parse_rating(cells[start + rating_index].text)
        if username is None or rating is None:
            log.warning("Skipping unreadable member row at cell %s", start)
            continue
        observations.append(Observation(username=username, rating=rating, observed_at=observed_at))

    log.info("Parsed %s squadron member(s)", len(observations))
    return observations
