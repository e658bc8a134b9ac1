from __future__ import annotations

"""
Directory Enumeration Service.

Provides the unit of traversal work: enumerating the immediate entries of a
single directory, registering sub-directories as new pending work, and
testing regular files (or symlinks to files) against the pattern. Also
validates the search root and persists the warning report.
"""

import logging
import os
from typing import List

from filefinder.core.pipeline.components.sinks import Diagnostics, ResultSink
from filefinder.core.pipeline.components.work_queue import TerminationDetector
from filefinder.core.processing.pattern_matcher import PatternMatcher
from filefinder.domain.search_models import (
    DirectoryTask,
    InvalidSearchRootError,
    SearchStats,
    SearchWarning,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API (DISCOVERY SERVICES)
# ==============================================================================

def validate_search_root(root_path: str) -> str:
    """
    Check that the search root exists and is a directory.

    Args:
        root_path: Requested root, absolute or relative.

    Returns:
        str: The root path, unchanged, ready to seed the queue.

    Raises:
        InvalidSearchRootError: If the path is missing or not a directory.
    """
    if not root_path:
        raise InvalidSearchRootError(root_path, "no path given")
    if not os.path.exists(root_path):
        raise InvalidSearchRootError(root_path, "path does not exist")
    if not os.path.isdir(root_path):
        raise InvalidSearchRootError(root_path, "path is not a directory")
    return root_path


def expand_directory(
        task: DirectoryTask,
        detector: TerminationDetector,
        matcher: PatternMatcher,
        sink: ResultSink,
        diagnostics: Diagnostics,
        stats: SearchStats,
) -> None:
    """
    Enumerate one directory and dispatch each of its entries.

    Sub-directories are registered with the detector (counted, then queued).
    Symlinks to directories are never followed. Regular files and symlinks
    resolving to files are tested against the matcher and reported on match.

    A failure to open or iterate the directory is reported once and abandons
    the directory; entries already dispatched stay dispatched. A failure on a
    single entry only skips that entry. Exceptions raised by the sink are not
    directory failures and propagate to the caller.

    The caller owns the pending-count decrement for `task`.

    Args:
        task: Directory to enumerate.
        detector: Termination detector receiving new directories.
        matcher: Compiled pattern matcher.
        sink: Destination of match reports.
        diagnostics: Destination of recoverable failures.
        stats: Shared counters for the search.
    """
    try:
        entries = os.scandir(task.path)
    except OSError as e:
        _directory_failed(task, e, diagnostics, stats)
        return

    with entries:
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                break
            except OSError as e:
                _directory_failed(task, e, diagnostics, stats)
                return
            _dispatch_entry(entry, detector, matcher, sink, diagnostics, stats)

    stats.add("directories_scanned")


def write_warning_report(error_output_path: str, warnings: List[SearchWarning]) -> str:
    """
    Persist the warnings collected during a search to a plain-text report.

    Args:
        error_output_path: Target filesystem path for the report.
        warnings: Recoverable failures gathered during traversal.

    Returns:
        str: The path to the report, or an empty string if nothing was written.
    """
    if not warnings:
        return ""

    try:
        parent = os.path.dirname(os.path.abspath(error_output_path))
        os.makedirs(parent, exist_ok=True)

        with open(error_output_path, "w", encoding="utf-8") as f:
            f.write("FILE SEARCH WARNINGS REPORT:\n")
            f.write("=" * 80 + "\n")
            for item in warnings:
                f.write(f"PATH: {item.context}\n")
                f.write(f"WARNING: {item.detail}\n")
                f.write("-" * 80 + "\n")
        return error_output_path
    except OSError as e:
        logger.error(f"Failed to persist warning report to '{error_output_path}': {e}")
        return ""

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _dispatch_entry(
        entry: os.DirEntry,
        detector: TerminationDetector,
        matcher: PatternMatcher,
        sink: ResultSink,
        diagnostics: Diagnostics,
        stats: SearchStats,
) -> None:
    """Classify one directory entry and route it."""
    try:
        if entry.is_dir(follow_symlinks=False):
            detector.register(DirectoryTask(path=entry.path))
            return

        # is_file() follows symlinks: regular files and links to files qualify
        if not entry.is_file():
            return
    except OSError as e:
        stats.add("entries_skipped")
        diagnostics.warn(entry.path, f"Cannot classify entry: {_describe(e)}")
        return

    if matcher.matches(entry.name):
        stats.add("matches")
        sink.report(entry.path)


def _directory_failed(
        task: DirectoryTask,
        error: OSError,
        diagnostics: Diagnostics,
        stats: SearchStats,
) -> None:
    stats.add("directories_failed")
    diagnostics.warn(task.path, f"Cannot read directory: {_describe(error)}")


def _describe(error: OSError) -> str:
    """Render an OSError without repeating the filename."""
    if error.strerror:
        return f"{error.strerror} [errno {error.errno}]"
    return str(error)
