from __future__ import annotations

"""
Logging Handler Factories.

Builds the terminal and file handlers attached behind the queue listener and
tags them, so that reconfiguration only ever removes handlers that this
package installed itself and leaves third-party handlers alone.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

# Attribute set on every handler created by this package
_HANDLER_TAG_ATTR: str = "_filefinder_handler"


# ==============================================================================
# HANDLER TAGGING
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> logging.Handler:
    """Mark a handler as owned by this package and return it."""
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    """Return True if the handler was created by this package."""
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))

# ==============================================================================
# HANDLER FACTORIES
# ==============================================================================

def _create_console_handler(
        level_int: int,
        formatter: logging.Formatter,
        stream: Optional[TextIO] = None,
) -> logging.StreamHandler:
    """
    Build the stderr handler used for diagnostics.

    Matches are written to stdout by the result sink; keeping diagnostics on
    stderr lets users pipe the match list without noise.

    Args:
        level_int: Numeric logging level.
        formatter: Formatter applied to console records.
        stream: Override for the target stream (stderr by default).

    Returns:
        logging.StreamHandler: Tagged handler.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level_int)
    handler.setFormatter(formatter)
    return _tag_handler(handler)


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Build a size-rotated file handler.

    An unwritable destination is reported on stderr and yields None, so a
    bad --log-file never prevents the search from running.

    Args:
        log_file: Target path for the log file.
        level_int: Numeric logging level.
        formatter: Formatter applied to file records.
        max_bytes: Rollover threshold in bytes.
        backup_count: Number of archived files to keep.

    Returns:
        Optional[RotatingFileHandler]: Tagged handler, or None on I/O failure.
    """
    try:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open log file '{log_file}': {e}\n")
        return None

    handler.setLevel(level_int)
    handler.setFormatter(formatter)
    return _tag_handler(handler)
