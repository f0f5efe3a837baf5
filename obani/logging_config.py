"""
Logging for the obani CLI.

Everything goes to one rotating file, logs/obani.log (5 MB, 3 backups), through
the 'obani' logger; module loggers propagate into it. LOG_LEVEL picks the level
(INFO when unset). Commands are wrapped in @log_call, which writes one CALL line
at DEBUG and one OK or FAIL line with the elapsed milliseconds. Credentials
passed to login and register are masked before they reach the file.
"""

import functools
import logging
import logging.handlers
import os
import time
from pathlib import Path

_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FILE = _LOG_DIR / "obani.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

# Keyword arguments whose values never reach the log file
_REDACTED = {"password", "token"}


def configure_logging() -> logging.Logger:
    """
    Set up the obani logger. Idempotent, safe to call on every CLI entry.
    Returns the configured logger.
    """
    _LOG_DIR.mkdir(exist_ok=True)

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger("obani")

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.handlers.RotatingFileHandler(
        _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    return logger


def _format_args(args, kwargs) -> str:
    parts = [repr(a) for a in args] + [
        f"{k}='***'" if k in _REDACTED else f"{k}={v!r}" for k, v in kwargs.items()
    ]
    return ", ".join(parts) if parts else "—"


def log_call(func):
    """
    Decorator: logs entry, clean exit, and exceptions for any function.

    - DEBUG on entry   : CALL <name> | args=(...)
    - INFO  on success : OK   <name> | <N>ms
    - ERROR on failure : FAIL <name> | ExcType: message | <N>ms   (then re-raises)

    Keyword arguments named password/token are logged as '***'.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger("obani")
        name = func.__name__
        start = time.perf_counter()

        logger.debug(f"CALL {name} | args=({_format_args(args, kwargs)})")

        try:
            result = func(*args, **kwargs)
            ms = int((time.perf_counter() - start) * 1000)
            logger.info(f"OK   {name} | {ms}ms")
            return result
        except Exception as exc:
            ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"FAIL {name} | {type(exc).__name__}: {exc} | {ms}ms")
            raise

    return wrapper
