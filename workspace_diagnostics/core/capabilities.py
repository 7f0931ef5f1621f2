from dataclasses import dataclass
from typing import Any, FrozenSet, Mapping, Optional

from workspace_diagnostics.core.host import LanguageClient


def _supports_open_close(server_capabilities: Optional[Mapping[str, Any]]) -> bool:
    if not server_capabilities:
        return False

    sync = server_capabilities.get("textDocumentSync")
    if isinstance(sync, Mapping):
        return bool(sync.get("openClose", False))

    # Legacy form: a bare TextDocumentSyncKind, where None (0) means no sync
    if isinstance(sync, int) and not isinstance(sync, bool):
        return sync > 0

    return False


@dataclass(frozen=True)
class ClientCapabilities:
    """Capability snapshot of one client, evaluated once per trigger."""

    initialized: bool
    open_close_sync: bool
    filetypes: FrozenSet[str]

    @classmethod
    def from_client(cls, client: LanguageClient) -> "ClientCapabilities":
        server_capabilities = client.server_capabilities
        return cls(
            initialized=server_capabilities is not None,
            open_close_sync=_supports_open_close(server_capabilities),
            filetypes=frozenset(client.filetypes or ()),
        )

    def accepts(self, language_id: Optional[str]) -> bool:
        return language_id is not None and language_id in self.filetypes
