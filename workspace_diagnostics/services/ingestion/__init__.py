# Chunked, non-blocking didOpen ingestion.
from .domain_objects import IngestionConfiguration
from .filetypes import resolve_language_id
from .pipeline import ChunkedIngestionPipeline

__all__ = [
    "ChunkedIngestionPipeline",
    "IngestionConfiguration",
    "resolve_language_id",
]
