"""
Pytest configuration and shared fixtures.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from workspace_diagnostics.dependencies import reset_singletons

TS_FILETYPES = ("typescript", "typescriptreact", "javascript", "javascriptreact")
READY_CAPABILITIES = {"textDocumentSync": {"openClose": True, "change": 2}}


class FakeClient:
    """In-memory LanguageClient that records every notification."""

    def __init__(
        self,
        client_id: int = 1,
        name: str = "ts_ls",
        filetypes=TS_FILETYPES,
        server_capabilities: Optional[Dict[str, Any]] = READY_CAPABILITIES,
    ):
        self.id = client_id
        self.name = name
        self.filetypes = filetypes
        self.server_capabilities = server_capabilities
        self.sent: List[tuple] = []

    async def send_notification(self, method: str, params: Dict[str, Any]) -> None:
        self.sent.append((method, params))

    @property
    def opened_paths(self) -> List[str]:
        return [params["textDocument"]["uri"] for _, params in self.sent]


class FakeHost:
    """In-memory EditorHost. Every client is attached to every buffer."""

    def __init__(self, clients=(), buffer: int = 1, buffer_paths: Optional[Dict[int, str]] = None):
        self.clients: Dict[int, FakeClient] = {client.id: client for client in clients}
        self.buffer = buffer
        self.buffer_paths = buffer_paths or {}
        self.notifications: List[tuple] = []
        self.progress: List[tuple] = []

    def current_buffer(self) -> int:
        return self.buffer

    def buffer_path(self, buffer: int) -> str:
        return self.buffer_paths.get(buffer, "")

    def get_client(self, client_id: int) -> Optional[FakeClient]:
        return self.clients.get(client_id)

    def get_clients(self, buffer: Optional[int] = None) -> List[FakeClient]:
        return list(self.clients.values())

    def notify(self, message: str, level: int) -> None:
        self.notifications.append((message, level))

    def report_progress(self, client_id: int, token: str, value: Dict[str, Any]) -> None:
        self.progress.append((client_id, token, value))

    def add_client(self, client: FakeClient) -> None:
        self.clients[client.id] = client

    def remove_client(self, client_id: int) -> None:
        self.clients.pop(client_id, None)


class FakeLister:
    """
    FileLister returning canned lines, or raising the given error.

    With `delay` set, every call suspends first, like a real subprocess.
    """

    def __init__(self, files=(), error: Optional[Exception] = None, delay: Optional[float] = None):
        self.files = list(files)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def list_files(self) -> List[str]:
        self.calls += 1
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.files)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before each test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def host(client) -> FakeHost:
    return FakeHost(clients=[client])


@pytest.fixture
def make_lister():
    return FakeLister


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_host():
    return FakeHost


@pytest.fixture
def ready_capabilities():
    return dict(READY_CAPABILITIES)
