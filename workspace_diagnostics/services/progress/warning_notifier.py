import logging

from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.events.ingestion_events import DiagnosticsWarningEvent
from workspace_diagnostics.core.host import EditorHost


class WarningNotifier:
    """Shows soft-failure warnings to the user through the host."""

    def __init__(self, host: EditorHost):
        self._host = host

    async def subscribe(self, event_bus: DomainEventBus) -> None:
        await event_bus.subscribe(DiagnosticsWarningEvent, self.handle_warning)

    async def handle_warning(self, event: DiagnosticsWarningEvent) -> None:
        self._host.notify(event.message, logging.WARNING)
