from .diagnostics_session import DiagnosticsSession
from .domain_objects import SessionConfiguration

__all__ = [
    "DiagnosticsSession",
    "SessionConfiguration",
]
