import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from workspace_diagnostics.core.capabilities import ClientCapabilities
from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.events.ingestion_events import (
    ChunkProcessedEvent,
    IngestionAbortedEvent,
    IngestionCompletedEvent,
    IngestionStartedEvent,
)
from workspace_diagnostics.core.host import LanguageClient
from workspace_diagnostics.models import FileOutcome, PipelineResult

from .domain_objects import IngestionConfiguration, iter_chunks
from .file_reader import read_text_file
from .filetypes import resolve_language_id

DID_OPEN = "textDocument/didOpen"

FileReader = Callable[[str], Awaitable[str]]


def build_did_open_params(path: str, language_id: str, text: str) -> dict:
    return {
        "textDocument": {
            "uri": Path(path).as_uri(),
            "languageId": language_id,
            "version": 0,
            "text": text,
        }
    }


class ChunkedIngestionPipeline:
    """
    Opens a file list in a language client, one chunk at a time.

    Within a chunk every read is issued before any is awaited; the chunk is a
    barrier, so the next chunk starts only after every read of the current
    one has settled. After each chunk the pipeline sleeps for the configured
    delay, which hands the event loop back to the host.

    Failures are per file and silent: a file that cannot be read or sent is
    counted as processed and the run moves on.
    """

    def __init__(
        self,
        config: IngestionConfiguration,
        event_bus: Optional[DomainEventBus] = None,
        reader: FileReader = read_text_file,
    ):
        self.config = config
        self._event_bus = event_bus
        self._reader = reader

    async def run(
        self,
        files: Sequence[str],
        client: LanguageClient,
        capabilities: ClientCapabilities,
        buffer_path: str = "",
        on_complete: Optional[Callable[[PipelineResult], None]] = None,
    ) -> PipelineResult:
        """
        Ingest a snapshot of `files` into `client`.

        Args:
            files: Absolute paths, processed in order.
            client: Target language client.
            capabilities: Capability snapshot taken when the run was triggered.
            buffer_path: Path already open in the editor; skipped without I/O.
            on_complete: Called exactly once with the result after the last chunk.
                Not called if the run is cancelled.

        Returns:
            The PipelineResult (processed always equals total on completion).

        A run that is cancelled or raises publishes IngestionAbortedEvent
        before the exception propagates, so every started run gets exactly
        one closing event.
        """
        snapshot = list(files)
        result = PipelineResult(
            client_id=client.id, client_name=client.name, total=len(snapshot)
        )

        logging.info(f"Ingestion [{client.name}]: {len(snapshot)} files, chunk size {self.config.chunk_size}")
        try:
            await self._run_chunks(snapshot, client, capabilities, buffer_path, result)
        except asyncio.CancelledError:
            logging.info(f"Ingestion [{client.name}] cancelled after {result.processed}/{result.total} files")
            await self._publish_aborted(client, result, "cancelled")
            raise
        except Exception:
            await self._publish_aborted(client, result, "failed")
            raise

        if on_complete:
            on_complete(result)

        return result

    async def _run_chunks(
        self,
        snapshot: List[str],
        client: LanguageClient,
        capabilities: ClientCapabilities,
        buffer_path: str,
        result: PipelineResult,
    ) -> None:
        started = time.monotonic()
        await self._publish(
            IngestionStartedEvent(
                client_id=client.id, client_name=client.name, total_files=len(snapshot)
            )
        )

        for chunk_index, chunk in enumerate(iter_chunks(snapshot, self.config.chunk_size)):
            outcomes = await asyncio.gather(
                *(self._ingest_file(path, client, capabilities, buffer_path) for path in chunk)
            )
            for outcome in outcomes:
                result.record(outcome)
            result.chunks += 1

            await self._publish(
                ChunkProcessedEvent(
                    client_id=client.id,
                    client_name=client.name,
                    chunk_index=chunk_index,
                    processed=result.processed,
                    total_files=result.total,
                )
            )

            # Yield to the host loop, even with a zero delay
            await asyncio.sleep(self.config.chunk_delay_seconds)

        result.duration_seconds = time.monotonic() - started
        logging.info(
            f"Ingestion [{client.name}] complete: {result.sent} sent, {result.skipped} skipped, "
            f"{result.unsupported} unsupported, {result.failed} failed "
            f"in {result.duration_seconds:.2f}s"
        )

        await self._publish(
            IngestionCompletedEvent(
                client_id=client.id,
                client_name=client.name,
                total_files=result.total,
                sent=result.sent,
                failed=result.failed,
                duration_seconds=result.duration_seconds,
            )
        )

    async def _ingest_file(
        self,
        path: str,
        client: LanguageClient,
        capabilities: ClientCapabilities,
        buffer_path: str,
    ) -> FileOutcome:
        if buffer_path and path == buffer_path:
            return FileOutcome.SKIPPED_BUFFER

        try:
            text = await self._reader(path)
        except OSError as e:
            logging.debug(f"Skipping unreadable file {path}: {e}")
            return FileOutcome.FAILED

        language_id = resolve_language_id(path)
        if not capabilities.accepts(language_id):
            return FileOutcome.UNSUPPORTED

        try:
            await client.send_notification(DID_OPEN, build_did_open_params(path, language_id, text))
        except Exception as e:
            logging.debug(f"didOpen for {path} failed on {client.name}: {e}")
            return FileOutcome.FAILED

        return FileOutcome.SENT

    async def _publish_aborted(self, client: LanguageClient, result: PipelineResult, reason: str) -> None:
        await self._publish(
            IngestionAbortedEvent(
                client_id=client.id,
                client_name=client.name,
                processed=result.processed,
                total_files=result.total,
                reason=reason,
            )
        )

    async def _publish(self, event) -> None:
        if self._event_bus:
            await self._event_bus.publish(event)

