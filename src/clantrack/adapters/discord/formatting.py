"""Render roster updates as Discord markdown messages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from clantrack.domain.types import Observation, RatingChange

MESSAGE_LIMIT: Final = 2000
TIMESTAMP_FORMAT: Final = "%Y-%m-%d %H:%M"

HIGH_RATING: Final = 2000
MEDIUM_RATING: Final = 1000


def _change_line(change: RatingChange) -> str:
    sign = "+" if change.change > 0 else ""
    return (
        f"• **{change.username}**: {change.old_rating} → {change.new_rating} "
        f"({sign}{change.change})"
    )


def format_rating_changes(changes: Sequence[RatingChange], *, now: datetime) -> str:
    if not changes:
        return "📊 **Daily Clan Rating Update**\n\nNo rating changes detected today."

    lines = ["📊 **Daily Clan Rating Update**", ""]

    increases = sorted(
        (change for change in changes if change.change > 0),
        key=lambda change: change.change,
        reverse=True,
    )
    decreases = sorted(
        (change for change in changes if change.change < 0),
        key=lambda change: change.change,
    )

    if increases:
        lines.append("📈 **Rating Increases:**")
        lines.extend(_change_line(change) for change in increases)
        lines.append("")
    if decreases:
        lines.append("📉 **Rating Decreases:**")
        lines.extend(_change_line(change) for change in decreases)
        lines.append("")

    lines.append(f"*Updated: {now:{TIMESTAMP_FORMAT}} UTC*")
    return "\n".join(lines)


def _rating_group(
    title: str,
    members: Sequence[Observation],
    *,
    limit: int,
    overflow_label: str,
) -> list[str]:
    if not members:
        return []
    lines = [title]
    lines.extend(f"• **{member.username}**: {member.rating}" for member in members[:limit])
    if len(members) > limit:
        lines.append(f"• *... and {len(members) - limit} more {overflow_label}*")
    lines.append("")
    return lines


def format_initial_snapshot(observations: Sequence[Observation], *, now: datetime) -> str:
    """Baseline message listing members by rating band, with clan statistics."""

    ranked = sorted(observations, key=lambda observation: observation.rating, reverse=True)
    high = [member for member in ranked if member.rating >= HIGH_RATING]
    medium = [member for member in ranked if MEDIUM_RATING <= member.rating < HIGH_RATING]
    low = [member for member in ranked if member.rating < MEDIUM_RATING]

    lines = [
        "🎯 **Initial Clan Member Data**",
        f"*Tracking started for {len(observations)} clan members*",
        "",
    ]
    lines += _rating_group(
        "🏆 **High Rating Members (2000+):**",
        high,
        limit=10,
        overflow_label="high-rating members",
    )
    lines += _rating_group(
        "⭐ **Medium Rating Members (1000-1999):**",
        medium,
        limit=15,
        overflow_label="medium-rating members",
    )
    lines += _rating_group(
        "🌟 **Developing Members (<1000):**",
        low,
        limit=10,
        overflow_label="developing members",
    )

    if ranked:
        average = sum(member.rating for member in ranked) // len(ranked)
        lines += [
            "📊 **Clan Statistics:**",
            f"• **Total Members**: {len(observations)}",
            f"• **Average Rating**: {average}",
            f"• **Highest Rating**: {ranked[0].rating} ({ranked[0].username})",
            f"• **Lowest Rating**: {ranked[-1].rating} ({ranked[-1].username})",
            "",
        ]

    lines += [
        f"*Clan tracking initialized: {now:{TIMESTAMP_FORMAT}} UTC*",
        "*Future updates will show rating changes from this baseline.*",
    ]
    return "\n".join(lines)


def split_message(text: str, *, limit: int = MESSAGE_LIMIT) -> list[str]:
    """Split ``text`` into chunks Discord accepts, breaking at line ends where possible."""

    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks
