"""
Public entry points for an editor integration.

Call ``setup(host)`` once the host is available, then forward attach and
detach events with ``on_attach`` / ``on_detach``. Everything else is
user-invoked: ``trigger_buffer``, ``refresh``, ``status``, ``clear_cache``.
Every call routes through the command and query buses.
"""
import asyncio
import logging
from typing import List, Optional

from .config import Settings
from .core.host import BufferId, EditorHost, LanguageClient
from .dependencies import (
    build_session,
    get_command_bus,
    get_query_bus,
    get_session,
    get_settings,
    is_configured,
    teardown_session,
)
from .domains.diagnostics.commands import (
    AttachClientCommand,
    ClearCacheCommand,
    DetachClientCommand,
    RefreshDiagnosticsCommand,
    TriggerClientCommand,
    TriggerDiagnosticsCommand,
)
from .domains.diagnostics.queries import GetStatusQuery
from .models import StatusSnapshot
from .services.catalog.file_lister import FileLister
from .services.session.diagnostics_session import DiagnosticsSession


async def setup(
    host: EditorHost,
    settings: Optional[Settings] = None,
    lister: Optional[FileLister] = None,
) -> DiagnosticsSession:
    """
    Build the diagnostics session for a host.

    Calling setup() again replaces the previous session: its in-flight work
    is cancelled and its handlers unregistered first.
    """
    if is_configured():
        logging.info("Workspace diagnostics already configured, replacing session")
        await teardown_session()

    settings = settings or get_settings()
    session = await build_session(host, settings, lister=lister)

    logging.info(
        f"Workspace diagnostics ready (auto_trigger={settings.auto_trigger}, "
        f"progress={settings.progress_mode}, chunk_size={settings.chunk_size})"
    )
    return session


def _require(operation: str) -> None:
    get_session(operation)


async def trigger(
    client: LanguageClient,
    buffer: Optional[BufferId] = None,
    force_refresh: bool = False,
) -> Optional[asyncio.Task]:
    _require("trigger")
    return await get_command_bus().execute(
        TriggerClientCommand(client=client, buffer=buffer, force_refresh=force_refresh)
    )


async def trigger_buffer(buffer: Optional[BufferId] = None) -> List[asyncio.Task]:
    """Trigger every client attached to the buffer (current buffer when None)."""
    _require("trigger_buffer")
    return await get_command_bus().execute(TriggerDiagnosticsCommand(buffer=buffer))


async def refresh(buffer: Optional[BufferId] = None) -> List[asyncio.Task]:
    _require("refresh")
    return await get_command_bus().execute(RefreshDiagnosticsCommand(buffer=buffer))


async def status() -> StatusSnapshot:
    _require("status")
    return await get_query_bus().execute(GetStatusQuery())


async def clear_cache() -> None:
    _require("clear_cache")
    await get_command_bus().execute(ClearCacheCommand())
    logging.info("Workspace diagnostics cache cleared")


async def on_attach(client_id: int, buffer: BufferId) -> Optional[asyncio.Task]:
    _require("on_attach")
    return await get_command_bus().execute(
        AttachClientCommand(client_id=client_id, buffer=buffer)
    )


async def on_detach(client_id: int) -> None:
    _require("on_detach")
    await get_command_bus().execute(DetachClientCommand(client_id=client_id))


async def shutdown() -> None:
    """Cancel all outstanding work and drop the session."""
    if not is_configured():
        return
    await teardown_session()
    logging.info("Workspace diagnostics shut down")
