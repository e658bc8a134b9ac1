from __future__ import annotations

"""
Logging Core Orchestrator.

Maintains the idempotent lifecycle of the logging subsystem. Every worker
thread logs through a single QueueHandler on the root logger; a
QueueListener thread performs the actual console and file I/O, so warnings
emitted during traversal never block a worker on a slow terminal or disk.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from filefinder.infra.fs import get_user_data_dir
from filefinder.infra.logging.config import _LEVEL_MAP, LoggingConfig
from filefinder.infra.logging.handlers import (
    _create_console_handler,
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

# Attributes stored on the root logger to track our installation
_CONFIGURED_FLAG_ATTR: str = "_filefinder_configured"
_QUEUE_LISTENER_ATTR: str = "_filefinder_queue_listener"

DEFAULT_LOG_FILE_NAME = "filefinder.log"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = DEFAULT_LOG_FILE_NAME) -> str:
    """
    Location used when --log-file is given without a path.

    Args:
        file_name: Name of the log file inside '<user data>/logs'.

    Returns:
        str: Absolute path of the log file.
    """
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Install the queue-based logging pipeline on the root logger.

    Only the first call has an effect. With `force`, the handlers and the
    listener installed by a previous call are torn down and rebuilt; handlers
    installed by anybody else are left in place.

    Args:
        cfg: Threshold, console and file settings.
        force: Rebuild even if the pipeline is already installed.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    try:
        level_int = _parse_level(cfg.level)
        root.setLevel(level_int)
        _remove_our_handlers(root)
        _stop_existing_listener(root)

        outputs = _build_outputs(cfg, level_int)
        if outputs:
            _start_listener(root, outputs)
        return root

    except Exception as e:
        # Diagnostics must never prevent a search: degrade to a plain console handler
        _remove_our_handlers(root)
        _stop_existing_listener(root)

        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
        root.addHandler(_tag_handler(sh))
        root.warning(f"Logging setup failed ({e}). Switched to emergency console.")
        return root


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module; records flow to the root pipeline."""
    return logging.getLogger(name)

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _build_outputs(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    """Create the handlers that the listener thread writes through."""
    outputs: List[logging.Handler] = []

    if cfg.console:
        outputs.append(_create_console_handler(level_int, logging.Formatter(cfg.console_fmt)))

    if cfg.log_file:
        file_handler = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if file_handler is not None:
            outputs.append(file_handler)

    return outputs


def _start_listener(root: logging.Logger, outputs: List[logging.Handler]) -> None:
    """Connect the root logger to a listener thread feeding `outputs`."""
    records: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = QueueListener(records, *outputs, respect_handler_level=True)
    listener.start()

    root.addHandler(_tag_handler(QueueHandler(records)))
    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    # Drain queued records before the interpreter exits
    atexit.register(_safe_stop_listener, listener)


def _parse_level(level: str) -> int:
    """Map a level name to its numeric value; unknown names mean WARNING."""
    return _LEVEL_MAP.get(str(level or "").strip().upper(), logging.WARNING)


def _remove_our_handlers(root: logging.Logger) -> None:
    """Detach and close every handler this package installed on the root."""
    for h in [h for h in root.handlers if _is_our_handler(h)]:
        root.removeHandler(h)
        h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate the current QueueListener, if any, and forget it."""
    _safe_stop_listener(getattr(root, _QUEUE_LISTENER_ATTR, None))
    setattr(root, _QUEUE_LISTENER_ATTR, None)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating listeners that were already stopped.

    atexit may run this after a forced reconfiguration already stopped the
    same listener; its internal thread is None in that case.
    """
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
