from workspace_diagnostics.core.cqrs.command_bus import CommandBus
from workspace_diagnostics.core.cqrs.query_bus import QueryBus
from workspace_diagnostics.domains.diagnostics.command_handlers import (
    AttachClientCommandHandler,
    ClearCacheCommandHandler,
    DetachClientCommandHandler,
    RefreshDiagnosticsCommandHandler,
    TriggerClientCommandHandler,
    TriggerDiagnosticsCommandHandler,
)
from workspace_diagnostics.domains.diagnostics.commands import (
    AttachClientCommand,
    ClearCacheCommand,
    DetachClientCommand,
    RefreshDiagnosticsCommand,
    TriggerClientCommand,
    TriggerDiagnosticsCommand,
)
from workspace_diagnostics.domains.diagnostics.queries import GetStatusQuery
from workspace_diagnostics.domains.diagnostics.query_handlers import GetStatusQueryHandler
from workspace_diagnostics.services.session.diagnostics_session import DiagnosticsSession


def register_diagnostics_handlers(
    command_bus: CommandBus,
    query_bus: QueryBus,
    session: DiagnosticsSession,
):
    """Register all diagnostics CQRS handlers."""
    command_bus.register(TriggerDiagnosticsCommand, TriggerDiagnosticsCommandHandler(session).handle)
    command_bus.register(RefreshDiagnosticsCommand, RefreshDiagnosticsCommandHandler(session).handle)
    command_bus.register(TriggerClientCommand, TriggerClientCommandHandler(session).handle)
    command_bus.register(AttachClientCommand, AttachClientCommandHandler(session).handle)
    command_bus.register(DetachClientCommand, DetachClientCommandHandler(session).handle)
    command_bus.register(ClearCacheCommand, ClearCacheCommandHandler(session).handle)

    query_bus.register(GetStatusQuery, GetStatusQueryHandler(session).handle)
