import json
import logging
import os
import sys
from pathlib import Path

from folder_sync.sync.models import CopyReason, OperationKind, OperationRecord

LOGGER_NAME = "folder_sync"
DEFAULT_LOG_FILENAME = "folder-sync.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured output.

    Produces one JSON object per log record with fields: ts, level, logger, msg.
    Exception info is included as an "exc" field when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class SafeFileHandler(logging.FileHandler):
    """Append-only file handler that never lets a write failure escape.

    A failed write prints a one-line notice to stderr; the console
    handler keeps working and the sync cycle is not interrupted.
    """

    def handleError(self, record: logging.LogRecord) -> None:
        exc = sys.exc_info()[1]
        try:
            sys.stderr.write(f"Failed to write to log file: {exc}\n")
        except Exception:
            pass


def resolve_log_path(destination: str | os.PathLike) -> Path:
    """Resolve a log destination to a file path.

    A destination that is an existing directory, or that ends with a path
    separator, gets ``DEFAULT_LOG_FILENAME`` appended.
    """
    text = os.fspath(destination)
    path = Path(text)
    if path.is_dir() or text.endswith(("/", os.sep)):
        return path / DEFAULT_LOG_FILENAME
    return path


def setup_logging(
    log_file: str | os.PathLike,
    debug: bool = False,
    debug_format: str = "text",
    level: str | None = None,
) -> Path:
    """
    Configure the ``folder_sync`` logger for console and file output.

    Every record goes to stderr and is appended to the log file.  Calling
    this again replaces the handlers installed by the previous call.

    Args:
        log_file: Log file path or directory (see ``resolve_log_path``).
            Missing parent directories are created.
        debug: If True, overrides every other level setting with DEBUG.
        debug_format: "text" (default) or "json" for structured output.
        level: Level name used when LOG_LEVEL is unset.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Default: *level*, then INFO.

    Returns:
        The resolved log file path.
    """
    if debug:
        log_level = logging.DEBUG
    else:
        level_name = (os.getenv("LOG_LEVEL") or level or "INFO").upper()
        log_level = getattr(logging, level_name, logging.INFO)

    log_path = resolve_log_path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if debug_format == "json":
        formatter: logging.Formatter = JsonFormatter(datefmt=DATE_FORMAT)
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    file_handler = SafeFileHandler(log_path, mode="a", encoding="utf-8")
    file_handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    _reset_handlers(logger)
    logger.setLevel(log_level)
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    logger.propagate = False

    return log_path


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class SyncLog:
    """Operation recorder backed by the ``folder_sync`` logger.

    Passed to ``TreeReconciler`` and ``SyncRunner`` so they never touch
    handlers or files directly.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def record(self, message: str) -> None:
        self.logger.info(message)

    def record_operation(
        self,
        kind: OperationKind,
        path: str,
        reason: CopyReason | None = None,
    ) -> None:
        record = OperationRecord(kind=kind, path=path, reason=reason)
        self.logger.info(record.describe())
