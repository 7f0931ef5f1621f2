"""
Catalog domain objects: configuration, cache record and the path filter rules.
"""
import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CatalogConfiguration:
    """Configuration object to eliminate long parameter lists."""

    workspace_root: str
    cache_ttl_seconds: float
    allowed_extensions: FrozenSet[str]
    ignore_patterns: Tuple[str, ...] = ()
    discovery_command: Tuple[str, ...] = ("git", "ls-files")
    discovery_timeout_seconds: float = 30.0


@dataclass
class FileCache:
    """Last successful, filtered discovery result and when it was taken."""

    files: Optional[List[str]] = None
    timestamp: Optional[float] = None  # Monotonic seconds
    refreshes: int = field(default=0)

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        if self.files is None or self.timestamp is None:
            return False
        return (now - self.timestamp) < ttl_seconds

    def age(self, now: float) -> float:
        if self.timestamp is None:
            return 0.0
        return max(0.0, now - self.timestamp)

    def store(self, files: List[str], now: float) -> None:
        self.files = files
        self.timestamp = now
        self.refreshes += 1

    def clear(self) -> None:
        self.files = None
        self.timestamp = None


def extension_of(path: str) -> Optional[str]:
    """Extension including the dot, taken after the last dot of the basename."""
    name = os.path.basename(path)
    _, dot, suffix = name.rpartition(".")
    if not dot or not suffix:
        return None
    return f".{suffix}"


def has_allowed_extension(path: str, allowed_extensions: FrozenSet[str]) -> bool:
    ext = extension_of(path)
    return ext is not None and ext in allowed_extensions


def is_ignored(path: str, ignore_patterns: Sequence[str]) -> bool:
    """Plain substring match, patterns are not globs."""
    return any(pattern in path for pattern in ignore_patterns)


def should_include(path: str, config: CatalogConfiguration) -> bool:
    return has_allowed_extension(path, config.allowed_extensions) and not is_ignored(
        path, config.ignore_patterns
    )
