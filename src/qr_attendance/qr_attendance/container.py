from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Mapping, Optional

from .attendance.absence_service import AbsenceService
from .attendance.dispatcher import ScanDispatcher
from .attendance.factory import SessionSearchFactory
from .attendance.recorder import AttendanceRecorder
from .attendance.service import ReconciliationEngine
from .attendance.session_finder import OpenSessionFinder
from .attendance.store_attendance_repository import StoreAttendanceRepository
from .common.datetime_utils import TimeSource, parse_hhmm
from .common.validators import normalize_category
from .core import constants
from .database.connection import DatabaseConnection, DBConfig
from .database.memory_tree_store import InMemoryTreeStore
from .database.mysql_tree_store import MySQLTreeStore
from .database.tree_store import TreeStore
from .eligibility.calculator.threshold_calculator import ThresholdEligibilityCalculator
from .eligibility.service import EligibilityService
from .eligibility.thresholds import parse_tier_rules
from .events.resolver import EventResolver
from .events.store_event_catalog import StoreEventCatalog
from .stats.aggregator import StatsAggregator
from .stats.lateness import LatenessPolicy
from .users.store_user_repository import StoreUserRepository


@dataclass(frozen=True)
class EngineSettings:
    store_backend: str = "mysql"
    db_config: Mapping[str, Any] = field(default_factory=dict)
    store_timeout_seconds: int = constants.DEFAULT_STORE_TIMEOUT_SECONDS
    store_retries: int = constants.DEFAULT_STORE_RETRIES
    org_timezone: str = constants.DEFAULT_ORG_TIMEZONE
    late_grace_minutes: int = constants.DEFAULT_LATE_GRACE_MINUTES
    default_expected_start: str = constants.DEFAULT_EXPECTED_START
    expected_start_by_category: Mapping[str, str] = field(default_factory=dict)
    default_category: str = constants.DEFAULT_CATEGORY
    padrino_thresholds: Optional[Mapping[str, Mapping[str, float]]] = None
    padrino_vacuous_categories: tuple[str, ...] = ()

    @classmethod
    def from_module(cls, settings) -> "EngineSettings":
        """Collect the engine settings from a `config.*` module."""
        return cls(
            store_backend=str(getattr(settings, "STORE_BACKEND", "mysql")).lower(),
            db_config=dict(getattr(settings, "DB_CONFIG", {}) or {}),
            store_timeout_seconds=int(getattr(settings, "STORE_TIMEOUT_SECONDS", constants.DEFAULT_STORE_TIMEOUT_SECONDS)),
            store_retries=int(getattr(settings, "STORE_RETRIES", constants.DEFAULT_STORE_RETRIES)),
            org_timezone=str(getattr(settings, "ORG_TIMEZONE", constants.DEFAULT_ORG_TIMEZONE)),
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", constants.DEFAULT_LATE_GRACE_MINUTES)),
            default_expected_start=str(getattr(settings, "DEFAULT_EXPECTED_START", constants.DEFAULT_EXPECTED_START)),
            expected_start_by_category=dict(getattr(settings, "EXPECTED_START_BY_CATEGORY", {}) or {}),
            default_category=str(getattr(settings, "DEFAULT_CATEGORY", constants.DEFAULT_CATEGORY)),
            padrino_thresholds=getattr(settings, "PADRINO_THRESHOLDS", None),
            padrino_vacuous_categories=tuple(getattr(settings, "PADRINO_VACUOUS_CATEGORIES", ()) or ()),
        )


@dataclass(frozen=True)
class Container:
    settings: EngineSettings
    clock: TimeSource
    store: TreeStore

    users_repo: StoreUserRepository
    events_repo: StoreEventCatalog
    attendance_repo: StoreAttendanceRepository

    engine: ReconciliationEngine
    dispatcher: ScanDispatcher
    absence_service: AbsenceService
    eligibility_service: EligibilityService


def _build_store(settings: EngineSettings) -> TreeStore:
    if settings.store_backend == "memory":
        return InMemoryTreeStore()
    if settings.store_backend != "mysql":
        raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend!r}")

    config = DBConfig.from_mapping(settings.db_config, timeout_seconds=settings.store_timeout_seconds)
    return MySQLTreeStore(DatabaseConnection.get_instance(config))


def build_container(
    settings: EngineSettings,
    *,
    store: Optional[TreeStore] = None,
    clock: Optional[TimeSource] = None,
) -> Container:
    clock = clock or TimeSource(settings.org_timezone)
    store = store or _build_store(settings)

    users_repo = StoreUserRepository(store, clock)
    events_repo = StoreEventCatalog(store, clock)
    attendance_repo = StoreAttendanceRepository(store, clock)

    stats = StatsAggregator()
    lateness = LatenessPolicy(
        clock=clock,
        grace_minutes=settings.late_grace_minutes,
        default_start=parse_hhmm(settings.default_expected_start),
        start_by_category={
            normalize_category(k): parse_hhmm(v) if not isinstance(v, time) else v
            for k, v in settings.expected_start_by_category.items()
        },
    )
    finder = OpenSessionFinder(SessionSearchFactory(attendance_repo).default_chain())
    engine = ReconciliationEngine(
        users_repo,
        events_repo,
        EventResolver(events_repo, clock),
        finder,
        AttendanceRecorder(store, attendance_repo),
        stats,
        lateness,
        clock,
        default_category=settings.default_category,
    )
    dispatcher = ScanDispatcher(engine, retries=settings.store_retries)
    absence_service = AbsenceService(store, users_repo, stats, clock)
    eligibility_service = EligibilityService(
        users_repo,
        store,
        calculator=ThresholdEligibilityCalculator(
            parse_tier_rules(settings.padrino_thresholds),
            vacuous_categories=settings.padrino_vacuous_categories,
        ),
    )

    return Container(
        settings=settings,
        clock=clock,
        store=store,
        users_repo=users_repo,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        engine=engine,
        dispatcher=dispatcher,
        absence_service=absence_service,
        eligibility_service=eligibility_service,
    )
