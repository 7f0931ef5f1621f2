import logging
from typing import Any, Dict, Set

from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.events.ingestion_events import (
    ChunkProcessedEvent,
    IngestionAbortedEvent,
    IngestionCompletedEvent,
    IngestionStartedEvent,
)
from workspace_diagnostics.core.host import EditorHost
from workspace_diagnostics.utils.progress_utils import (
    calculate_progress_percent_int,
    format_progress_message,
    should_report_progress,
)

PROGRESS_TITLE = "Workspace diagnostics"

MODE_PROTOCOL = "protocol"
MODE_NOTIFY = "notify"
MODE_OFF = "off"


class ProgressReporter:
    """
    Turns ingestion events into exactly one start and one closing signal per run.
    The closing signal reports completion, or the reason a run ended early.

    Protocol mode feeds work-done progress (begin/report/end) into the
    client's progress UI, with per-chunk reports throttled to every
    `report_interval_percent`. Notify mode shows two plain messages.
    """

    def __init__(self, host: EditorHost, mode: str = MODE_NOTIFY, report_interval_percent: int = 10):
        if mode not in (MODE_PROTOCOL, MODE_NOTIFY, MODE_OFF):
            raise ValueError(f"Unknown progress mode '{mode}'")
        self._host = host
        self.mode = mode
        self.report_interval_percent = report_interval_percent
        self._tokens: Dict[int, str] = {}
        self._last_reported: Dict[int, int] = {}
        # Clients with a start message shown in notify mode
        self._announced: Set[int] = set()

    async def subscribe(self, event_bus: DomainEventBus) -> None:
        await event_bus.subscribe(IngestionStartedEvent, self.handle_ingestion_started)
        await event_bus.subscribe(ChunkProcessedEvent, self.handle_chunk_processed)
        await event_bus.subscribe(IngestionCompletedEvent, self.handle_ingestion_completed)
        await event_bus.subscribe(IngestionAbortedEvent, self.handle_ingestion_aborted)

    async def handle_ingestion_started(self, event: IngestionStartedEvent) -> None:
        if self.mode == MODE_PROTOCOL:
            token = f"workspace-diagnostics/{event.client_id}/{event.short_id}"
            self._tokens[event.client_id] = token
            self._last_reported[event.client_id] = -1
            self._report(
                event.client_id,
                {
                    "kind": "begin",
                    "title": PROGRESS_TITLE,
                    "message": f"processing {event.total_files} files",
                    "percentage": 0,
                    "cancellable": False,
                },
            )
        elif self.mode == MODE_NOTIFY:
            self._announced.add(event.client_id)
            self._host.notify(
                f"Workspace diagnostics [{event.client_name}]: processing {event.total_files} files...",
                logging.INFO,
            )

    async def handle_chunk_processed(self, event: ChunkProcessedEvent) -> None:
        if self.mode != MODE_PROTOCOL or event.client_id not in self._tokens:
            return

        # The end value covers 100%
        if event.processed >= event.total_files:
            return

        percent = calculate_progress_percent_int(event.processed, event.total_files)
        last = self._last_reported.get(event.client_id, -1)
        if not should_report_progress(percent, last, self.report_interval_percent):
            return

        self._last_reported[event.client_id] = percent
        self._report(
            event.client_id,
            {
                "kind": "report",
                "message": format_progress_message(event.processed, event.total_files),
                "percentage": percent,
            },
        )

    async def handle_ingestion_completed(self, event: IngestionCompletedEvent) -> None:
        if self.mode == MODE_PROTOCOL:
            if event.client_id not in self._tokens:
                return
            self._report(
                event.client_id,
                {"kind": "end", "message": f"complete ({event.total_files} files)"},
            )
            self._drop_token(event.client_id)
        elif self.mode == MODE_NOTIFY:
            self._announced.discard(event.client_id)
            self._host.notify(
                f"Workspace diagnostics [{event.client_name}]: complete ({event.total_files} files)",
                logging.INFO,
            )

    async def handle_ingestion_aborted(self, event: IngestionAbortedEvent) -> None:
        """Close a run that ended early. Runs that never showed a start stay silent."""
        if self.mode == MODE_PROTOCOL:
            if event.client_id not in self._tokens:
                return
            self._report(event.client_id, {"kind": "end", "message": event.reason})
            self._drop_token(event.client_id)
        elif self.mode == MODE_NOTIFY and event.client_id in self._announced:
            self._announced.discard(event.client_id)
            self._host.notify(
                f"Workspace diagnostics [{event.client_name}]: {event.reason} "
                f"({event.processed}/{event.total_files} files)",
                logging.INFO,
            )

    def _drop_token(self, client_id: int) -> None:
        self._tokens.pop(client_id, None)
        self._last_reported.pop(client_id, None)

    def _report(self, client_id: int, value: Dict[str, Any]) -> None:
        self._host.report_progress(client_id, self._tokens[client_id], value)
