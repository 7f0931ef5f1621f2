from dataclasses import dataclass
from typing import Iterator, List, Sequence


@dataclass(frozen=True)
class IngestionConfiguration:
    """Configuration object for chunked ingestion."""

    chunk_size: int = 10
    chunk_delay_ms: int = 1

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {self.chunk_size}")
        if self.chunk_delay_ms < 0:
            raise ValueError(f"chunk_delay_ms must be >= 0, got {self.chunk_delay_ms}")

    @property
    def chunk_delay_seconds(self) -> float:
        return self.chunk_delay_ms / 1000


def iter_chunks(files: Sequence[str], chunk_size: int) -> Iterator[List[str]]:
    """Contiguous slices of at most chunk_size files, in order."""
    for start in range(0, len(files), chunk_size):
        yield list(files[start:start + chunk_size])
