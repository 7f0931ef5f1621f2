from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ClientPhase(str, Enum):
    """
    Phase of one language client in the diagnostics workflow.

    Normal Workflow: Idle -> WaitingForReady -> Idle (ready) -> Processing -> Completed
    Manual trigger: Idle -> Processing -> Completed
    Alternative: WaitingForReady -> Abandoned (timeout) / Cancelled (client detached)
                 Processing -> Failed (unexpected error) / Cancelled (client detached)
    """

    IDLE = "Idle"  # Known, nothing running
    WAITING_FOR_READY = "WaitingForReady"  # Polling for server capabilities
    PROCESSING = "Processing"  # A pipeline run is in flight
    COMPLETED = "Completed"  # Last run finished
    FAILED = "Failed"  # Last run stopped on an unexpected error
    ABANDONED = "Abandoned"  # Server never became ready
    CANCELLED = "Cancelled"  # Client detached while waiting or processing


class FileOutcome(str, Enum):
    """What happened to one file during a pipeline run."""

    SENT = "Sent"  # didOpen sent to the client
    SKIPPED_BUFFER = "SkippedBuffer"  # Already open in the current buffer
    UNSUPPORTED = "Unsupported"  # Read fine, client does not handle the language
    FAILED = "Failed"  # Read or send failed, skipped silently


class ClientState(BaseModel):
    """
    Per-client bookkeeping owned by the ClientStateMachine.

    `triggered` is sticky: it survives completion and is only reset by
    clearing the whole state map.
    """

    client_id: int = Field(..., description="Host identity of the client")
    client_name: str = Field(default="", description="Server name, e.g. ts_ls")
    triggered: bool = False
    phase: ClientPhase = ClientPhase.IDLE
    runs: int = Field(default=0, description="Pipeline runs started for this client")

    @property
    def processing(self) -> bool:
        return self.phase == ClientPhase.PROCESSING


class PipelineResult(BaseModel):
    """Outcome of one chunked ingestion run."""

    client_id: int
    client_name: str
    total: int = 0
    processed: int = 0
    sent: int = 0
    skipped: int = 0
    unsupported: int = 0
    failed: int = 0
    chunks: int = 0
    duration_seconds: float = 0.0

    def record(self, outcome: FileOutcome) -> None:
        self.processed += 1
        if outcome == FileOutcome.SENT:
            self.sent += 1
        elif outcome == FileOutcome.SKIPPED_BUFFER:
            self.skipped += 1
        elif outcome == FileOutcome.UNSUPPORTED:
            self.unsupported += 1
        else:
            self.failed += 1


class StatusSnapshot(BaseModel):
    """Read-only view returned by the Status query."""

    cached_files: int = 0
    cache_age_seconds: float = 0.0
    processing_clients: List[str] = Field(default_factory=list)
    triggered_clients: int = 0

    def format(self) -> str:
        processing = ", ".join(self.processing_clients) if self.processing_clients else "none"
        return (
            "Workspace diagnostics status:\n"
            f"  Cached files: {self.cached_files}\n"
            f"  Cache age: {self.cache_age_seconds:.0f}s\n"
            f"  Processing: {processing}\n"
            f"  Triggered clients: {self.triggered_clients}"
        )


class HealthLevel(str, Enum):
    """Severity of one health check line"""

    OK = "OK"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class HealthResult(BaseModel):
    level: HealthLevel
    message: str
    advice: List[str] = Field(default_factory=list, description="Hints shown under a failed check")
    detail: Optional[str] = None
