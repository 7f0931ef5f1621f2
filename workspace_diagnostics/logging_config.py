import logging
import logging.handlers
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(funcName)s() - %(message)s"


def setup_logging(settings: Settings, console: Optional[Console] = None) -> None:
    """
    Route all logging to a rich console handler and, when `log_file_path` is
    set, to a file rotated at midnight.

    The console goes to stderr so CLI output on stdout stays clean. Markup is
    off: log lines carry client names in brackets, e.g. "Ingestion [ts_ls]".
    """
    rich_handler = RichHandler(
        console=console or Console(width=120, stderr=True),
        show_time=True,
        show_level=True,
        show_path=settings.log_level == "DEBUG",
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    rich_handler.setLevel(settings.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(rich_handler)

    log_dir = settings.log_directory
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=settings.log_file_path,
            when="midnight",
            backupCount=settings.log_retention_days,
            encoding="utf-8",
        )
        file_handler.setLevel(settings.log_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.debug(
        f"Logging initialized: level {settings.log_level}, "
        f"file {settings.log_file_path or 'disabled'}, "
        f"retention {settings.log_retention_days} days"
    )
