"""
Diagnostics Command Handlers
Thin adapters from commands to the DiagnosticsSession.
"""
import asyncio
import logging
from typing import List, Optional

from workspace_diagnostics.core.cqrs.command import CommandHandler
from workspace_diagnostics.domains.diagnostics.commands import (
    AttachClientCommand,
    ClearCacheCommand,
    DetachClientCommand,
    RefreshDiagnosticsCommand,
    TriggerClientCommand,
    TriggerDiagnosticsCommand,
)
from workspace_diagnostics.services.session.diagnostics_session import DiagnosticsSession


class TriggerDiagnosticsCommandHandler(CommandHandler[TriggerDiagnosticsCommand, List[asyncio.Task]]):
    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, command: TriggerDiagnosticsCommand) -> List[asyncio.Task]:
        return await self._session.trigger_buffer(command.buffer)


class RefreshDiagnosticsCommandHandler(CommandHandler[RefreshDiagnosticsCommand, List[asyncio.Task]]):
    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, command: RefreshDiagnosticsCommand) -> List[asyncio.Task]:
        return await self._session.refresh(command.buffer)


class TriggerClientCommandHandler(CommandHandler[TriggerClientCommand, Optional[asyncio.Task]]):
    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, command: TriggerClientCommand) -> Optional[asyncio.Task]:
        return await self._session.trigger(
            command.client, command.buffer, force_refresh=command.force_refresh
        )


class AttachClientCommandHandler(CommandHandler[AttachClientCommand, Optional[asyncio.Task]]):
    """Starts the readiness wait when auto-trigger is enabled."""

    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, command: AttachClientCommand) -> Optional[asyncio.Task]:
        if not self._session.config.auto_trigger:
            logging.debug(f"Auto-trigger disabled, ignoring attach of client {command.client_id}")
            return None
        return self._session.attach(command.client_id, command.buffer)


class DetachClientCommandHandler(CommandHandler[DetachClientCommand, None]):
    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, command: DetachClientCommand) -> None:
        await self._session.detach(command.client_id)


class ClearCacheCommandHandler(CommandHandler[ClearCacheCommand, None]):
    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, command: ClearCacheCommand) -> None:
        await self._session.clear_cache()
