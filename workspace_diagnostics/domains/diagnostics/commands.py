"""
Diagnostics Domain Commands
Commands that start, reset or stop workspace diagnostics.
"""
from dataclasses import dataclass
from typing import Optional

from workspace_diagnostics.core.cqrs.command import Command
from workspace_diagnostics.core.host import BufferId, LanguageClient


@dataclass
class TriggerDiagnosticsCommand(Command):
    """Trigger every client attached to the buffer (current buffer when None)."""
    buffer: Optional[BufferId] = None


@dataclass
class RefreshDiagnosticsCommand(Command):
    """Reset all client state and the cache, then force a run for the buffer's clients."""
    buffer: Optional[BufferId] = None


@dataclass
class TriggerClientCommand(Command):
    """Trigger one specific client."""
    client: LanguageClient
    buffer: Optional[BufferId] = None
    force_refresh: bool = False


@dataclass
class AttachClientCommand(Command):
    """A client attached to a buffer."""
    client_id: int
    buffer: BufferId


@dataclass
class DetachClientCommand(Command):
    """A client stopped or detached."""
    client_id: int


@dataclass
class ClearCacheCommand(Command):
    """Drop the cached file list and all client state."""
    pass
