# workspace_diagnostics/core/exceptions.py
from typing import Optional


class InvalidTransitionError(Exception):
    """Raised when a client phase transition is not allowed."""
    def __init__(self, client_id: int, from_phase: str, to_phase: str):
        self.client_id = client_id
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(
            f"Invalid phase transition for client {client_id}: "
            f"Cannot move from '{from_phase}' to '{to_phase}'."
        )


class NotConfiguredError(RuntimeError):
    """Raised when the public API is used before setup()."""
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"workspace-diagnostics: call setup() before {operation}()")


class DiscoveryError(Exception):
    """The external file listing command failed."""
    def __init__(self, command: str, reason: str, returncode: Optional[int] = None):
        self.command = command
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"'{command}' failed: {reason}")
