import asyncio
import logging
from functools import partial
from typing import Dict, List, Optional

from workspace_diagnostics.core.capabilities import ClientCapabilities
from workspace_diagnostics.core.client_state_machine import ClientStateMachine
from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.events.ingestion_events import DiagnosticsWarningEvent
from workspace_diagnostics.core.host import BufferId, EditorHost, LanguageClient
from workspace_diagnostics.models import ClientPhase, PipelineResult, StatusSnapshot
from workspace_diagnostics.services.catalog.file_catalog import WorkspaceFileCatalog
from workspace_diagnostics.services.ingestion.pipeline import ChunkedIngestionPipeline

from .domain_objects import SessionConfiguration


class DiagnosticsSession:
    """
    Coordinates readiness waits, triggers and pipeline runs for every client.

    Built once by setup() and passed by reference to the command handlers.
    Guarantees at most one pipeline run per client id: the PROCESSING phase
    is set before the first await of a trigger and cleared by the run's
    completion callback (or by cancellation).

    Readiness waits and runs are asyncio tasks owned by the session, so a
    detached client's work is cancelled instead of resolving against a
    vanished client.
    """

    def __init__(
        self,
        config: SessionConfiguration,
        host: EditorHost,
        catalog: WorkspaceFileCatalog,
        pipeline: ChunkedIngestionPipeline,
        state_machine: Optional[ClientStateMachine] = None,
        event_bus: Optional[DomainEventBus] = None,
    ):
        self.config = config
        self._host = host
        self._catalog = catalog
        self._pipeline = pipeline
        self._state_machine = state_machine or ClientStateMachine()
        self._event_bus = event_bus
        self._runs: Dict[int, asyncio.Task] = {}
        self._waiters: Dict[int, asyncio.Task] = {}

        logging.info(
            f"DiagnosticsSession initialized for {', '.join(sorted(config.allowed_client_names)) or 'no clients'}"
        )

    @property
    def state_machine(self) -> ClientStateMachine:
        return self._state_machine

    @property
    def catalog(self) -> WorkspaceFileCatalog:
        return self._catalog

    def run_task(self, client_id: int) -> Optional[asyncio.Task]:
        return self._runs.get(client_id)

    # ------------------------------------------------------------------
    # Attach / readiness
    # ------------------------------------------------------------------

    def attach(self, client_id: int, buffer: BufferId) -> Optional[asyncio.Task]:
        """Host attach event. Starts a readiness wait unless one is running."""
        client = self._host.get_client(client_id)
        if client is None:
            logging.debug(f"Attach for unknown client {client_id} ignored")
            return None

        existing = self._waiters.get(client_id)
        if existing is not None and not existing.done():
            return existing

        task = asyncio.create_task(
            self.wait_for_ready(client, buffer),
            name=f"workspace-diagnostics-ready-{client.name}-{client_id}",
        )
        self._waiters[client_id] = task
        task.add_done_callback(partial(self._on_wait_done, client_id))
        return task

    async def wait_for_ready(
        self, client: LanguageClient, buffer: BufferId
    ) -> Optional[asyncio.Task]:
        """
        Poll until the server reports its capabilities, then trigger.

        Gives up with a warning after `readiness_max_attempts` polls. A client
        that disappears from the host between polls ends the wait silently.

        Returns:
            The run task started by trigger(), or None.
        """
        client_id = client.id
        state = self._state_machine.ensure(client_id, client.name)
        # Already-triggered clients keep their phase, trigger() will no-op
        track_wait = not state.triggered and not state.processing
        if track_wait:
            self._state_machine.transition(
                client_id=client_id, new_phase=ClientPhase.WAITING_FOR_READY
            )

        attempt = 0
        try:
            while True:
                if attempt > self.config.readiness_max_attempts:
                    logging.warning(
                        f"{client.name} not initialized after {attempt - 1} polls, giving up"
                    )
                    self._leave_waiting(client_id, ClientPhase.ABANDONED)
                    await self._warn(
                        f"Workspace diagnostics: {client.name} failed to initialize (timeout)",
                        client_id,
                    )
                    return None

                if ClientCapabilities.from_client(client).initialized:
                    self._leave_waiting(client_id, ClientPhase.IDLE)
                    return await self.trigger(client, buffer, force_refresh=False)

                await asyncio.sleep(self.config.readiness_poll_interval_seconds)

                # Re-check client is still valid
                refreshed = self._host.get_client(client_id)
                if refreshed is None:
                    logging.debug(f"{client.name} went away while waiting for initialization")
                    self._leave_waiting(client_id, ClientPhase.CANCELLED)
                    return None
                client = refreshed
                attempt += 1
        except asyncio.CancelledError:
            self._leave_waiting(client_id, ClientPhase.CANCELLED)
            raise

    def _leave_waiting(self, client_id: int, new_phase: ClientPhase) -> None:
        state = self._state_machine.get(client_id)
        if state is not None and state.phase == ClientPhase.WAITING_FOR_READY:
            self._state_machine.transition(client_id=client_id, new_phase=new_phase)

    # ------------------------------------------------------------------
    # Trigger
    # ------------------------------------------------------------------

    async def trigger(
        self,
        client: LanguageClient,
        buffer: Optional[BufferId] = None,
        force_refresh: bool = False,
    ) -> Optional[asyncio.Task]:
        """
        Start a pipeline run for one client unless a guard says no.

        Guards, in order: already triggered (unless forced), client name not
        allowed, no open/close document sync, run already in flight. Only the
        last one warns.

        Returns:
            The run task, or None when the trigger was a no-op.
        """
        state = self._state_machine.ensure(client.id, client.name)

        if state.triggered and not force_refresh:
            return None

        if client.name not in self.config.allowed_client_names:
            logging.debug(f"Client {client.name} is not in the allowed list, skipping")
            return None

        capabilities = ClientCapabilities.from_client(client)
        if not capabilities.open_close_sync:
            logging.debug(f"Client {client.name} does not support didOpen/didClose, skipping")
            return None

        if state.processing:
            logging.warning(f"Workspace diagnostics already in progress for {client.name}")
            await self._warn(
                f"Workspace diagnostics already in progress for {client.name}", client.id
            )
            return None

        state = self._state_machine.transition(
            client_id=client.id, new_phase=ClientPhase.PROCESSING
        )
        buffer_path = self._host.buffer_path(buffer) if buffer is not None else ""

        task = asyncio.create_task(
            self._ingest(client, capabilities, buffer_path, force_refresh, state.runs),
            name=f"workspace-diagnostics-{client.name}-{client.id}",
        )
        self._runs[client.id] = task
        task.add_done_callback(partial(self._on_run_done, client.id, state.runs))
        return task

    async def trigger_buffer(self, buffer: Optional[BufferId] = None) -> List[asyncio.Task]:
        """Un-forced trigger for every client attached to the buffer."""
        if buffer is None:
            buffer = self._host.current_buffer()
        tasks = []
        for client in self._host.get_clients(buffer):
            task = await self.trigger(client, buffer, force_refresh=False)
            if task is not None:
                tasks.append(task)
        return tasks

    async def _ingest(
        self,
        client: LanguageClient,
        capabilities: ClientCapabilities,
        buffer_path: str,
        force_refresh: bool,
        run_number: int,
    ) -> Optional[PipelineResult]:
        try:
            files = await self._catalog.get(force_refresh=force_refresh)
            return await self._pipeline.run(
                files,
                client,
                capabilities,
                buffer_path,
                on_complete=lambda result: self._finish(client.id, run_number, ClientPhase.COMPLETED),
            )
        except Exception as e:
            logging.error(f"Workspace diagnostics run for {client.name} failed: {e}", exc_info=True)
            self._finish(client.id, run_number, ClientPhase.FAILED)
            return None

    def _finish(self, client_id: int, run_number: int, new_phase: ClientPhase) -> None:
        state = self._state_machine.get(client_id)
        # A reset or a newer run owns the state now
        if state is None or state.runs != run_number or not state.processing:
            return
        self._state_machine.transition(client_id=client_id, new_phase=new_phase)

    # A task cancelled before its first step never runs its own cleanup,
    # so bookkeeping happens in done callbacks.
    def _on_run_done(self, client_id: int, run_number: int, task: asyncio.Task) -> None:
        if self._runs.get(client_id) is task:
            del self._runs[client_id]
        if task.cancelled():
            logging.info(f"Workspace diagnostics run for client {client_id} cancelled")
            self._finish(client_id, run_number, ClientPhase.CANCELLED)

    def _on_wait_done(self, client_id: int, task: asyncio.Task) -> None:
        if self._waiters.get(client_id) is task:
            del self._waiters[client_id]
        if task.cancelled():
            self._leave_waiting(client_id, ClientPhase.CANCELLED)

    # ------------------------------------------------------------------
    # Refresh / detach / status
    # ------------------------------------------------------------------

    async def refresh(self, buffer: Optional[BufferId] = None) -> List[asyncio.Task]:
        """Forget every client and the cached listing, then force a new run."""
        await self._cancel(list(self._runs.values()))
        self._state_machine.clear()
        self._catalog.clear()
        logging.info("Workspace diagnostics state and cache reset")

        if buffer is None:
            buffer = self._host.current_buffer()
        tasks = []
        for client in self._host.get_clients(buffer):
            task = await self.trigger(client, buffer, force_refresh=True)
            if task is not None:
                tasks.append(task)
        return tasks

    async def clear_cache(self) -> None:
        await self._cancel(list(self._runs.values()))
        self._state_machine.clear()
        self._catalog.clear()

    async def detach(self, client_id: int) -> None:
        """Cancel the readiness wait and the in-flight run of a departing client."""
        tasks = [
            task
            for task in (self._waiters.get(client_id), self._runs.get(client_id))
            if task is not None
        ]
        if tasks:
            logging.info(f"Client {client_id} detached, cancelling {len(tasks)} task(s)")
        await self._cancel(tasks)

    def status(self) -> StatusSnapshot:
        processing_names = []
        for client_id in self._state_machine.processing_client_ids():
            client = self._host.get_client(client_id)
            if client is not None:
                processing_names.append(client.name)

        return StatusSnapshot(
            cached_files=self._catalog.cached_count,
            cache_age_seconds=self._catalog.cache_age(),
            processing_clients=processing_names,
            triggered_clients=self._state_machine.triggered_count(),
        )

    async def close(self) -> None:
        await self._cancel(list(self._waiters.values()) + list(self._runs.values()))

    async def _cancel(self, tasks: List[asyncio.Task]) -> None:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _warn(self, message: str, client_id: Optional[int] = None) -> None:
        if self._event_bus:
            await self._event_bus.publish(
                DiagnosticsWarningEvent(message=message, client_id=client_id)
            )
