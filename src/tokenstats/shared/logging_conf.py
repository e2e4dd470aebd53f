# src/tokenstats/shared/logging_conf.py
"""
Logging Configuration - Root Logger, Rotating Files and Server Loggers

Configures the root logger once at startup. Output goes to stdout (unless
TOKENSTATS_LOG_STDOUT=false) and, when LOG_FILE or LOG_DIR is set, to a
rotating file. uvicorn is started with log_config=None, so its loggers
propagate here and share the same format.

Files that USE this module:
- tokenstats.app (setup_logging before the app is built)
- tests.test_logging_conf (unit tests)

Files that this module USES:
- None (pure configuration module)
"""
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Union
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "tokenstats.log"

# Loggers that are chatty below WARNING even when the service runs at INFO
NOISY_LOGGERS = ("urllib3", "httpx", "multipart")


def resolve_level(level: Union[int, str]) -> int:
    """Turn "debug"/"INFO"/logging.WARNING into a logging level, INFO if unknown."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def resolve_log_path(
    log_file: Optional[Union[str, Path]],
    log_dir: Optional[Union[str, Path]],
) -> Optional[Path]:
    """LOG_DIR wins over LOG_FILE; the directory is created when missing."""
    if log_dir:
        path = Path(log_dir) / LOG_FILE_NAME
    elif log_file:
        path = Path(log_file)
    else:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> Optional[Path]:
    """
    Configure application-wide logging.

    Args:
        level: Level constant or name (LOG_LEVEL)
        log_file: Log file path (LOG_FILE)
        log_dir: Directory holding tokenstats.log (LOG_DIR)
        max_bytes: Size at which the file rotates
        backup_count: Rotated files kept

    Returns:
        Path of the log file, or None when logging to stdout only
    """
    level = resolve_level(level)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []

    if os.environ.get("TOKENSTATS_LOG_STDOUT", "true").lower() == "true":
        handlers.append(logging.StreamHandler(sys.stdout))

    log_path = resolve_log_path(log_file, log_dir)
    if log_path is not None:
        handlers.append(RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
        ))

    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    # Route uvicorn's loggers through the root handlers
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    logging.getLogger(__name__).info(
        "Logging configured: %s, level=%s",
        f"file={log_path}" if log_path else "stdout", logging.getLevelName(level),
    )
    return log_path
