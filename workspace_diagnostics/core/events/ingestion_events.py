"""
Domain events published by the catalog, the session and the ingestion pipeline.
"""

from dataclasses import dataclass
from typing import Optional

from workspace_diagnostics.core.events.domain_event import DomainEvent


@dataclass(frozen=True)
class IngestionStartedEvent(DomainEvent):
    """Published once when a pipeline run begins."""

    client_id: int
    client_name: str
    total_files: int


@dataclass(frozen=True)
class ChunkProcessedEvent(DomainEvent):
    """Published after every chunk barrier."""

    client_id: int
    client_name: str
    chunk_index: int
    processed: int
    total_files: int


@dataclass(frozen=True)
class IngestionCompletedEvent(DomainEvent):
    """Published once when a pipeline run has processed every file."""

    client_id: int
    client_name: str
    total_files: int
    sent: int
    failed: int
    duration_seconds: float


@dataclass(frozen=True)
class IngestionAbortedEvent(DomainEvent):
    """
    Published once when a started run ends early, instead of the completed
    event. `reason` is "cancelled" or "failed".
    """

    client_id: int
    client_name: str
    processed: int
    total_files: int
    reason: str


@dataclass(frozen=True)
class DiagnosticsWarningEvent(DomainEvent):
    """A soft failure the user should hear about (discovery, timeout, reentrancy)."""

    message: str
    client_id: Optional[int] = None
