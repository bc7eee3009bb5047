"""Ports for announcing roster changes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from clantrack.domain.types import Observation, RatingChange


@runtime_checkable
class RosterNotifier(Protocol):
    """Publishes summaries and manages the member role.

    Every method retries transient failures internally. Granting a role the member
    already has, or revoking one they do not have, is a no-op.
    """

    def publish_rating_changes(self, changes: Sequence[RatingChange]) -> None: ...

    def publish_initial_snapshot(self, observations: Sequence[Observation]) -> None: ...

    def grant_marker(self, username: str, marker_id: int) -> None: ...

    def revoke_marker(self, username: str, marker_id: int) -> None: ...
