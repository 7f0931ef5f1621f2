from functools import lru_cache
from typing import Any, Dict, Optional

from workspace_diagnostics.core.cqrs.command_bus import CommandBus
from workspace_diagnostics.core.cqrs.query_bus import QueryBus
from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.exceptions import NotConfiguredError
from workspace_diagnostics.core.host import EditorHost
from workspace_diagnostics.domains.diagnostics.registration import register_diagnostics_handlers
from workspace_diagnostics.services.catalog.file_catalog import WorkspaceFileCatalog
from workspace_diagnostics.services.catalog.file_lister import FileLister
from workspace_diagnostics.services.ingestion.pipeline import ChunkedIngestionPipeline
from workspace_diagnostics.services.progress.progress_reporter import ProgressReporter
from workspace_diagnostics.services.progress.warning_notifier import WarningNotifier
from workspace_diagnostics.services.session.diagnostics_session import DiagnosticsSession

from .config import Settings

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    """Settings from the environment / settings.env, built once."""
    return Settings()


def get_command_bus() -> CommandBus:
    if "command_bus" not in _singletons:
        _singletons["command_bus"] = CommandBus()
    return _singletons["command_bus"]


def get_query_bus() -> QueryBus:
    if "query_bus" not in _singletons:
        _singletons["query_bus"] = QueryBus()
    return _singletons["query_bus"]


def get_event_bus() -> DomainEventBus:
    if "event_bus" not in _singletons:
        _singletons["event_bus"] = DomainEventBus()
    return _singletons["event_bus"]


def get_session(operation: str = "get_session") -> DiagnosticsSession:
    session = _singletons.get("session")
    if session is None:
        raise NotConfiguredError(operation)
    return session


def is_configured() -> bool:
    return "session" in _singletons


async def build_session(
    host: EditorHost,
    settings: Settings,
    lister: Optional[FileLister] = None,
) -> DiagnosticsSession:
    """Wire catalog, pipeline, presenters and CQRS handlers into one session."""
    event_bus = get_event_bus()

    catalog = WorkspaceFileCatalog(
        settings.catalog_configuration(), lister=lister, event_bus=event_bus
    )
    pipeline = ChunkedIngestionPipeline(settings.ingestion_configuration(), event_bus=event_bus)
    session = DiagnosticsSession(
        settings.session_configuration(),
        host,
        catalog,
        pipeline,
        event_bus=event_bus,
    )

    await ProgressReporter(
        host,
        mode=settings.progress_mode,
        report_interval_percent=settings.progress_report_interval_percent,
    ).subscribe(event_bus)
    await WarningNotifier(host).subscribe(event_bus)

    register_diagnostics_handlers(get_command_bus(), get_query_bus(), session)

    _singletons["session"] = session
    _singletons["settings"] = settings
    return session


async def teardown_session() -> None:
    """Stop the current session and unregister everything it wired up."""
    session = _singletons.pop("session", None)
    _singletons.pop("settings", None)
    if session is not None:
        await session.close()
    get_command_bus().clear()
    get_query_bus().clear()
    await get_event_bus().unsubscribe_all()


def reset_singletons() -> None:
    """Drop every singleton. Used by tests."""
    _singletons.clear()
    get_settings.cache_clear()
