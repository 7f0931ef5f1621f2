import logging
import logging.handlers

import pytest
from rich.console import Console
from rich.logging import RichHandler

from workspace_diagnostics.config import Settings
from workspace_diagnostics.logging_config import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_console_only_by_default(root_logger):
    setup_logging(Settings(log_level="WARNING"))

    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0], RichHandler)
    assert root_logger.level == logging.WARNING


def test_file_handler_when_path_set(root_logger, tmp_path):
    log_file = tmp_path / "logs" / "workspace-diagnostics.log"

    setup_logging(Settings(log_file_path=str(log_file), log_retention_days=7))
    logging.getLogger("workspace_diagnostics.test").info("Ingestion [ts_ls]: 3 files")
    for handler in root_logger.handlers:
        handler.flush()

    file_handlers = [
        h for h in root_logger.handlers if isinstance(h, logging.handlers.TimedRotatingFileHandler)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].backupCount == 7
    assert "Ingestion [ts_ls]: 3 files" in log_file.read_text(encoding="utf-8")


def test_bracketed_client_names_are_printed_verbatim(root_logger):
    console = Console(record=True, width=200)

    setup_logging(Settings(), console=console)
    logging.getLogger("workspace_diagnostics.test").warning("Ingestion [ts_ls] complete")

    assert "Ingestion [ts_ls] complete" in console.export_text()
