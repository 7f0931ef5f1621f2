import asyncio
import logging
import os
import time
from typing import Callable, List, Optional

from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.events.ingestion_events import DiagnosticsWarningEvent
from workspace_diagnostics.core.exceptions import DiscoveryError

from .domain_objects import CatalogConfiguration, FileCache, should_include
from .file_lister import FileLister, GitFileLister


class WorkspaceFileCatalog:
    """
    The candidate file set of the workspace, filtered early and cached with a TTL.

    One listing is shared by every client until it expires or a refresh
    forces a new one. Concurrent callers on a cold cache wait for a single
    discovery and reuse its result. A failed listing is never cached.
    Callers get their own copy of the list.
    """

    def __init__(
        self,
        config: CatalogConfiguration,
        lister: Optional[FileLister] = None,
        event_bus: Optional[DomainEventBus] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self._lister = lister or GitFileLister(config)
        self._event_bus = event_bus
        self._clock = clock
        self._cache = FileCache()
        self._discovery_lock = asyncio.Lock()

    @property
    def cached_count(self) -> int:
        return len(self._cache.files) if self._cache.files is not None else 0

    @property
    def refresh_count(self) -> int:
        """Successful discoveries since construction."""
        return self._cache.refreshes

    def cache_age(self) -> float:
        return self._cache.age(self._clock())

    def clear(self) -> None:
        self._cache.clear()
        logging.debug("File catalog cache cleared")

    def _cached_copy(self) -> Optional[List[str]]:
        if self._cache.is_fresh(self._clock(), self.config.cache_ttl_seconds):
            return list(self._cache.files)
        return None

    async def get(self, force_refresh: bool = False) -> List[str]:
        if not force_refresh:
            cached = self._cached_copy()
            if cached is not None:
                return cached

        async with self._discovery_lock:
            # Filled by the discovery this caller waited on
            if not force_refresh:
                cached = self._cached_copy()
                if cached is not None:
                    return cached
            return await self._discover()

    async def _discover(self) -> List[str]:
        try:
            raw_files = await self._lister.list_files()
        except DiscoveryError as e:
            logging.warning(f"File discovery failed: {e}")
            await self._warn(
                "Workspace diagnostics: failed to get file list "
                "(not a git repository or git not available)"
            )
            return []

        result = self._filter(raw_files)

        self._cache.store(result, self._clock())
        logging.info(
            f"Catalog refreshed: {len(result)} of {len(raw_files)} files kept "
            f"(ttl {self.config.cache_ttl_seconds:.0f}s)"
        )
        return list(result)

    def _filter(self, raw_files: List[str]) -> List[str]:
        result: List[str] = []
        for raw in raw_files:
            path = os.path.abspath(os.path.join(self.config.workspace_root, raw))
            if should_include(path, self.config):
                result.append(path)
        return result

    async def _warn(self, message: str) -> None:
        if self._event_bus:
            await self._event_bus.publish(DiagnosticsWarningEvent(message=message))
