"""
Logging configuration for PartnerHub.

Single 'partnerhub' logger; module loggers (partnerhub.engine.crm, ...) propagate to it.

  Log file : $LOG_DIR/partnerhub.log (default: <project>/logs)
  Rotation : 5 MB x 3 backups
  Level    : LOG_LEVEL env var, INFO when unset or unknown

Partner records carry tax IDs, phones and emails, so @log_call never writes
argument values for those: Company objects are reduced to their id and name,
and values of sensitive keys are masked.

    2026-10-18 14:32:01 | DEBUG    | CALL update_company | args=('abc123', {'phone': '***', 'status': 'inactive'})
    2026-10-18 14:32:01 | INFO     | OK   update_company | 3ms
    2026-10-18 14:32:01 | ERROR    | FAIL create_company | CompanyValidationError: email: Invalid email address. | 1ms
"""

import functools
import logging
import logging.handlers
import os
import time
from dataclasses import is_dataclass
from pathlib import Path

_LOG_DIR = Path(os.environ.get("LOG_DIR", Path(__file__).parent.parent / "logs"))
_LOG_FILE = _LOG_DIR / "partnerhub.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 3

SENSITIVE_KEYS = frozenset({'document', 'phone', 'email', 'cnpj', 'cpf', 'creci'})
_MAX_REPR = 120
_MASK = repr('***')


def configure_logging() -> logging.Logger:
    """Attach the rotating file handler once. Safe to call on every CLI entry."""
    logger = logging.getLogger("partnerhub")
    if logger.handlers:
        return logger

    _LOG_DIR.mkdir(parents=True, exist_ok=True)

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.handlers.RotatingFileHandler(
        _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    return logger


def summarize(value) -> str:
    """Log-safe repr: records shrink to their identity, sensitive keys are masked."""
    if is_dataclass(value) and hasattr(value, 'id'):
        label = getattr(value, 'name', '') or getattr(value, 'summary', '') or ''
        return f"{type(value).__name__}(id={value.id!r}, {label[:30]!r})"
    if isinstance(value, dict):
        items = ", ".join(
            f"{k!r}: {_MASK if k in SENSITIVE_KEYS and v else summarize(v)}"
            for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))
        )
        return "{" + items + "}"
    if isinstance(value, list) and len(value) > 3:
        return f"[{len(value)} items]"
    text = repr(value)
    return text if len(text) <= _MAX_REPR else text[:_MAX_REPR - 3] + "..."


def log_call(func):
    """
    CALL on entry (DEBUG), OK with elapsed ms on return (INFO),
    FAIL with exception type and message (ERROR), then re-raise.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger("partnerhub")
        name = func.__name__
        start = time.perf_counter()

        parts = [summarize(a) for a in args] + [f"{k}={summarize(v)}" for k, v in kwargs.items()]
        logger.debug(f"CALL {name} | args=({', '.join(parts) or '-'})")

        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"FAIL {name} | {type(exc).__name__}: {exc} | {ms}ms")
            raise

        ms = int((time.perf_counter() - start) * 1000)
        logger.info(f"OK   {name} | {ms}ms")
        return result

    return wrapper
