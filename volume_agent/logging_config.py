"""
Logging setup for the volume agent.

Console output goes through rich, the file log rotates at midnight. Every
record is stamped with the volume operation it belongs to, and the storage
account key is stripped from every record before any handler writes it, so
third-party loggers (uvicorn, azure) cannot leak it either.
"""

import logging
import logging.handlers

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings
from .services.network_mount.mount_options import redact

FILE_FORMAT = (
    "%(asctime)s - %(levelname)s - [%(operation)s %(volume)s] - "
    "%(filename)s:%(lineno)d in %(funcName)s() - "
    "%(message)s"
)

NOISY_LOGGERS = (
    "uvicorn.access",
    "azure.core.pipeline.policies.http_logging_policy",
)


class VolumeContextFilter(logging.Filter):
    """Default the operation/volume fields for records logged outside a volume operation."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "operation", None):
            record.operation = "-"
        if not hasattr(record, "volume"):
            record.volume = ""
        return True


class AccountKeyFilter(logging.Filter):
    """Replace the storage account key in the rendered message."""

    def __init__(self, account_key: str):
        super().__init__()
        self._account_key = account_key

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if self._account_key and self._account_key in message:
            record.msg = redact(message, self._account_key)
            record.args = ()
        return True


def _console_handler(level: str) -> logging.Handler:
    # Docker captures the plugin's stderr
    handler = RichHandler(
        console=Console(width=120, stderr=True),
        show_time=True,
        show_level=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    handler.setLevel(level)
    return handler


def _file_handler(settings: Settings, level: str) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=settings.log_file_path,
        when="midnight",
        interval=1,
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(settings: Settings) -> None:
    log_level = settings.effective_log_level
    settings.log_directory.mkdir(parents=True, exist_ok=True)

    handlers = [_console_handler(log_level), _file_handler(settings, log_level)]
    for handler in handlers:
        handler.addFilter(AccountKeyFilter(settings.account_key))
        handler.addFilter(VolumeContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
        if isinstance(old, logging.FileHandler):
            old.close()
    for handler in handlers:
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging initialized - File: {settings.log_file_path}, "
        f"Level: {log_level}, Retention: {settings.log_retention_days} days"
    )
