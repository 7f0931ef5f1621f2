from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class SessionConfiguration:
    """Configuration object for the trigger/readiness workflow."""

    allowed_client_names: FrozenSet[str]
    auto_trigger: bool = True
    readiness_poll_interval_ms: int = 100
    readiness_max_attempts: int = 100  # 100 * 100ms = 10 second timeout

    @property
    def readiness_poll_interval_seconds(self) -> float:
        return self.readiness_poll_interval_ms / 1000
