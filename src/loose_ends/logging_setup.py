# src/loose_ends/logging_setup.py

"""
Process-wide logging for the web server.

- stderr: loose_ends records plus uvicorn lifecycle; access lines and HTTP client
  chatter only when they signal a problem
- file:   everything at ``file_level``, rotated so a long-running server does not
  fill the data dir
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

LOG_FILE_NAME = "loose-ends.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# uvicorn normally installs its own handlers; with log_config=None these loggers
# propagate to the root handlers configured here instead.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Per-logger console thresholds:
    - loose_ends.*          everything
    - uvicorn.access        WARNING+ (one line per request otherwise)
    - uvicorn / uvicorn.*   everything (startup, shutdown, bind errors)
    - httpx / httpcore      WARNING+ (OAuth round-trips log at INFO)
    - py.warnings / others  ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "loose_ends" or name.startswith("loose_ends."):
            return True
        if name == "uvicorn.access":
            return record.levelno >= logging.WARNING
        if name == "uvicorn" or name.startswith("uvicorn."):
            return True
        if name.startswith(("httpx", "httpcore")):
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/loose_ends",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> Path:
    """
    Install the console and file handlers on the root logger; returns the log file path.

    Call once, before the app is built. Calling again replaces the handlers.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    logging.captureWarnings(True)
    logging.getLogger(__name__).debug("Logging ready file=%s", log_file)
    return log_file
