"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from clantrack.adapters.discord import DiscordNotifier
from clantrack.adapters.sqlalchemy.errors import persistence_errors
from clantrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyRosterUnitOfWork,
    check_database_health,
    is_started,
    startup,
)
from clantrack.adapters.warthunder import SquadronPageFetcher
from clantrack.config import (
    AppConfig,
    DepartedPolicy,
    get_app_config,
    get_database_config,
    validate_configuration,
)
from clantrack.domain.errors import PersistenceError
from clantrack.domain.ports.unit_of_work import RosterUnitOfWork
from clantrack.domain.reconciliation import (
    ArchivePolicy,
    DeactivateDepartedMembers,
    DeleteDepartedMembers,
    ReconciliationEngine,
)
from clantrack.domain.tracking import CycleSettings, CycleSummary, TrackingCycle

if TYPE_CHECKING:
    from clantrack.config import DatabaseConfig
    from clantrack.domain.model import ClanMember
    from clantrack.domain.ports.fetching import SnapshotFetcher
    from clantrack.domain.ports.notification import RosterNotifier

UnitOfWorkFactory = Callable[[], RosterUnitOfWork]


log = getLogger(__name__)


def archive_policy_for(policy: DepartedPolicy) -> ArchivePolicy:
    if policy is DepartedPolicy.DEACTIVATE:
        return DeactivateDepartedMembers()
    return DeleteDepartedMembers()


def open_roster_store(database: DatabaseConfig) -> None:
    """Start the SQLAlchemy adapter (once) and make sure the store answers."""

    if not is_started():
        with persistence_errors("open the roster database"):
            startup(database_uri=database.uri)
    if not check_database_health():
        raise PersistenceError("Database health check failed; see the log for details")


def build_tracking_cycle(
    config: AppConfig,
    *,
    fetcher: SnapshotFetcher | None = None,
    notifier: RosterNotifier | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> TrackingCycle:
    retry = config.tracking.retry_policy
    engine = ReconciliationEngine(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyRosterUnitOfWork,
        archive_policy=archive_policy_for(config.tracking.departed_policy),
    )
    return TrackingCycle(
        fetcher=fetcher or SquadronPageFetcher(retry=retry),
        engine=engine,
        notifier=notifier or DiscordNotifier(config.discord, retry=retry),
        settings=CycleSettings(
            source=config.tracking.source,
            marker_id=config.discord.role_id,
        ),
    )


def run_tracking_cycle(
    config: AppConfig | None = None,
    *,
    fetcher: SnapshotFetcher | None = None,
    notifier: RosterNotifier | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CycleSummary:
    """Validate configuration, open the store and run one tracking cycle."""

    effective_config = config or get_app_config()
    validate_configuration(effective_config)
    log.info(
        "Starting squadron tracking: source=%s, departed_policy=%s, retry=%s x %sms",
        effective_config.tracking.source,
        effective_config.tracking.departed_policy,
        effective_config.tracking.retry_attempts,
        effective_config.tracking.retry_delay_ms,
    )

    open_roster_store(effective_config.database)
    cycle = build_tracking_cycle(
        effective_config,
        fetcher=fetcher,
        notifier=notifier,
        unit_of_work_factory=unit_of_work_factory,
    )
    return cycle.run()


def list_active_members(
    *,
    database: DatabaseConfig | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ClanMember]:
    """Return the tracked members still on the roster, ordered by name."""

    open_roster_store(database or get_database_config())
    with (unit_of_work_factory or SqlAlchemyRosterUnitOfWork)() as uow:
        return list(uow.repositories.members.list_active())
