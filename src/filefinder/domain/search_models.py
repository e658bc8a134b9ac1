from __future__ import annotations

"""
Search Domain Data Models.

Defines the value objects exchanged between the traversal workers and the
interface layers: units of pending work, match notifications, diagnostics
and the aggregated result of a complete search. Also hosts the exception
hierarchy of the search domain.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List

# -----------------------------------------------------------------------------
# EXCEPTIONS
# -----------------------------------------------------------------------------

class FileFinderError(Exception):
    """Base class for all search domain failures."""


class InvalidSearchRootError(FileFinderError):
    """Raised before any worker starts when the root is missing or not a directory."""

    def __init__(self, root_path: str, reason: str) -> None:
        super().__init__(f"Invalid search root '{root_path}': {reason}")
        self.root_path = root_path
        self.reason = reason


class TerminationProtocolError(FileFinderError):
    """Raised when the pending-directory counter is driven below zero."""

# -----------------------------------------------------------------------------
# TRAVERSAL UNITS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectoryTask:
    """
    A directory that has been discovered but not yet enumerated.

    Attributes:
        path: Filesystem path of the directory (absolute or relative).
    """
    path: str


@dataclass(frozen=True)
class MatchEvent:
    """
    Notification for a single file whose name satisfied the pattern.

    Attributes:
        path: Full path of the matching file.
    """
    path: str


@dataclass(frozen=True)
class SearchWarning:
    """
    Recoverable failure recorded during traversal.

    Attributes:
        context: Path of the directory or entry that failed.
        detail: Human readable failure description.
    """
    context: str
    detail: str

# -----------------------------------------------------------------------------
# EXECUTION STATISTICS
# -----------------------------------------------------------------------------

class SearchStats:
    """Thread-safe counters shared by all workers of a search."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.directories_scanned = 0
        self.directories_failed = 0
        self.entries_skipped = 0
        self.matches = 0

    def add(self, counter: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {
                "directories_scanned": self.directories_scanned,
                "directories_failed": self.directories_failed,
                "entries_skipped": self.entries_skipped,
                "matches": self.matches,
            }

# -----------------------------------------------------------------------------
# RESULT MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchResult:
    """
    Unified result object of a complete search execution.

    Attributes:
        ok: Flag indicating the search ran to completion without a fatal error.
        error: Descriptive message in case of failure.
        root_path: Normalized root directory that was traversed.
        pattern: Glob pattern used for matching.
        match_mode: Policy applied to wildcard-free patterns.
        workers: Number of worker threads in the pool.
        matches: Matched paths, populated only when results were collected.
        match_count: Number of matches reported to the sink.
        directories_scanned: Directories successfully enumerated.
        directories_failed: Directories that could not be opened or iterated.
        entries_skipped: Entries that could not be classified.
        warnings: Recoverable failures gathered by the diagnostics collaborator.
        cancelled: True when the search was stopped before exhaustion.
        elapsed_seconds: Wall-clock duration of the traversal.
        pending_at_exit: Value of the pending-directory counter after the join.
        zero_transitions: Number of times the counter reached zero.
    """
    ok: bool
    error: str

    root_path: str
    pattern: str
    match_mode: str
    workers: int

    matches: List[str] = field(default_factory=list)
    match_count: int = 0
    directories_scanned: int = 0
    directories_failed: int = 0
    entries_skipped: int = 0
    warnings: List[SearchWarning] = field(default_factory=list)

    cancelled: bool = False
    elapsed_seconds: float = 0.0
    pending_at_exit: int = 0
    zero_transitions: int = 0

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def build_failure_result(
        root_path: str,
        pattern: str,
        match_mode: str,
        workers: int,
        error: str
) -> SearchResult:
    """
    Build a result describing a search that never started.

    Args:
        root_path: Requested root directory.
        pattern: Requested glob pattern.
        match_mode: Requested matching policy.
        workers: Requested worker count.
        error: Reason of the failure.

    Returns:
        SearchResult: A result with ok=False and empty statistics.
    """
    return SearchResult(
        ok=False,
        error=error,
        root_path=root_path,
        pattern=pattern,
        match_mode=match_mode,
        workers=workers,
    )
