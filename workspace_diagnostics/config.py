from pathlib import Path
from typing import FrozenSet, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.catalog.domain_objects import CatalogConfiguration
from .services.ingestion.domain_objects import IngestionConfiguration
from .services.session.domain_objects import SessionConfiguration


class Settings(BaseSettings):
    # Trigger
    auto_trigger: bool = True  # Run on client attach

    # File list cache
    cache_ttl_seconds: float = Field(default=300.0, gt=0)

    # Chunked ingestion
    chunk_size: int = Field(default=10, gt=0)  # Files per async chunk
    chunk_delay_ms: int = Field(default=1, ge=0)  # Pause between chunks

    # Progress
    notify_progress: bool = True
    use_protocol_progress: bool = False  # Takes precedence over notify_progress
    progress_report_interval_percent: int = Field(default=10, gt=0, le=100)

    # Only run for these language servers
    allowed_client_names: FrozenSet[str] = frozenset({"ts_ls", "eslint"})

    # Must match the filetypes of the allowed clients
    allowed_extensions: FrozenSet[str] = frozenset({".ts", ".tsx", ".js", ".jsx"})

    # Substring patterns, checked against the absolute path
    ignore_patterns: Tuple[str, ...] = (
        "/.yarn/",
        "/node_modules/",
        "/dist/",
        "/build/",
    )

    # Readiness wait (100 * 100ms = 10 seconds)
    readiness_poll_interval_ms: int = Field(default=100, ge=0)
    readiness_max_attempts: int = Field(default=100, ge=0)

    # Discovery
    discovery_command: Tuple[str, ...] = ("git", "ls-files")
    discovery_timeout_seconds: float = Field(default=30.0, gt=0)
    workspace_root: Optional[str] = None  # Defaults to the working directory

    # Logging
    log_level: str = "INFO"
    log_file_path: str = ""  # Empty disables the file handler
    log_retention_days: int = 30

    model_config = SettingsConfigDict(
        env_prefix="WORKSPACE_DIAGNOSTICS_",
        env_file="settings.env",
        extra="ignore",
        frozen=True,
    )

    @property
    def resolved_workspace_root(self) -> Path:
        return Path(self.workspace_root or Path.cwd()).resolve()

    @property
    def log_directory(self) -> Optional[Path]:
        """Directory of the log file, None when file logging is off."""
        if not self.log_file_path:
            return None
        return Path(self.log_file_path).parent

    @property
    def progress_mode(self) -> str:
        """Which progress channel is active: 'protocol', 'notify' or 'off'."""
        if self.use_protocol_progress:
            return "protocol"
        if self.notify_progress:
            return "notify"
        return "off"

    def catalog_configuration(self) -> CatalogConfiguration:
        return CatalogConfiguration(
            workspace_root=str(self.resolved_workspace_root),
            cache_ttl_seconds=self.cache_ttl_seconds,
            allowed_extensions=self.allowed_extensions,
            ignore_patterns=self.ignore_patterns,
            discovery_command=self.discovery_command,
            discovery_timeout_seconds=self.discovery_timeout_seconds,
        )

    def session_configuration(self) -> SessionConfiguration:
        return SessionConfiguration(
            allowed_client_names=self.allowed_client_names,
            auto_trigger=self.auto_trigger,
            readiness_poll_interval_ms=self.readiness_poll_interval_ms,
            readiness_max_attempts=self.readiness_max_attempts,
        )

    def ingestion_configuration(self) -> IngestionConfiguration:
        return IngestionConfiguration(
            chunk_size=self.chunk_size,
            chunk_delay_ms=self.chunk_delay_ms,
        )
