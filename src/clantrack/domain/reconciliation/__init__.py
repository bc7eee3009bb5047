"""Roster reconciliation: snapshot in, changes and membership moves out."""

from __future__ import annotations

from .engine import ReconciliationEngine, reconcile_roster, unique_observations
from .policy import (
    ArchivePolicy,
    DeactivateDepartedMembers,
    DeleteDepartedMembers,
)

__all__ = [
    "ArchivePolicy",
    "DeactivateDepartedMembers",
    "DeleteDepartedMembers",
    "ReconciliationEngine",
    "reconcile_roster",
    "unique_observations",
]
