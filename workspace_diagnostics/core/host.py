"""
Seams to the editor host and its language clients.

The package never talks to an editor or a language server directly. Whatever
embeds it (an editor bridge, a test double) implements these protocols.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

# Opaque buffer handle owned by the host (a buffer number for most editors)
BufferId = int


@runtime_checkable
class LanguageClient(Protocol):
    """A running language server connection as seen from the editor."""

    id: int
    name: str
    # Language ids this client wants documents for
    filetypes: Sequence[str]
    # None until the server has answered `initialize`
    server_capabilities: Optional[Mapping[str, Any]]

    async def send_notification(self, method: str, params: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class EditorHost(Protocol):
    """The editor process: buffers, attached clients and user-facing output."""

    def current_buffer(self) -> BufferId:
        ...

    def buffer_path(self, buffer: BufferId) -> str:
        """Absolute path of the file shown in the buffer, '' for scratch buffers."""
        ...

    def get_client(self, client_id: int) -> Optional[LanguageClient]:
        """The client if it is still registered, otherwise None."""
        ...

    def get_clients(self, buffer: Optional[BufferId] = None) -> List[LanguageClient]:
        """Clients attached to the buffer, or every client when buffer is None."""
        ...

    def notify(self, message: str, level: int) -> None:
        """Show a message to the user. `level` is a `logging` level."""
        ...

    def report_progress(self, client_id: int, token: str, value: Dict[str, Any]) -> None:
        """Feed a work-done progress value into the client's progress UI."""
        ...
