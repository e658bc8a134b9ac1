from __future__ import annotations

"""
Logging Configuration Models.

Describes how diagnostics of a search are emitted: the severity threshold
shared by every sink, the stderr console, and an optional size-rotated log
file whose entries carry the name of the worker thread that produced them.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

# Levels accepted on the command line, most verbose first
LEVEL_NAMES: List[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Name -> numeric level, including the legacy 'WARN' alias
_LEVEL_MAP: Dict[str, int] = {name: logging.getLevelName(name) for name in LEVEL_NAMES}
_LEVEL_MAP["WARN"] = logging.WARNING


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for one initialization of the logging subsystem.

    Attributes:
        level: Threshold applied to the root logger and every handler.
        console: Write diagnostics to stderr (stdout is reserved for matches).
        log_file: Path of an additional rotating log file, if any.
        max_bytes: Size at which the log file is rolled over.
        backup_count: Rolled-over files kept next to the active one.
        console_fmt: Record layout on stderr.
        file_fmt: Record layout in the log file (includes the thread name).
        datefmt: Timestamp layout in the log file.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
