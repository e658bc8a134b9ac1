from __future__ import annotations

"""
Core search orchestration.

This module coordinates a complete search:
1. Validates the root directory before any thread is started.
2. Builds the matcher, the shared queue and the termination detector.
3. Seeds the queue with the root (pending count = 1).
4. Runs a fixed pool of symmetric workers until the detector reports that
   no directory is pending, or a stop is requested.
5. Aggregates statistics and diagnostics into a SearchResult.
"""

import logging
import os
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import List, Optional, Set

from filefinder.core.pipeline.components.sinks import (
    CollectingResultSink,
    Diagnostics,
    LoggingDiagnostics,
    ResultSink,
)
from filefinder.core.pipeline.components.work_queue import TerminationDetector, WorkQueue
from filefinder.core.pipeline.stages.worker import run_worker
from filefinder.core.processing.pattern_matcher import MatchMode, PatternMatcher
from filefinder.core.services.scanner import validate_search_root
from filefinder.domain.constants import STRATEGY_BACKTRACK, WORKER_THREAD_PREFIX
from filefinder.domain.search_models import DirectoryTask, SearchResult, SearchStats

logger = logging.getLogger(__name__)

# Interval at which the supervising thread checks for external cancellation.
# Workers themselves never poll: they block on the queue condition.
_SUPERVISOR_TICK_S = 0.1


def resolve_worker_count(value: Optional[int] = None) -> int:
    """
    Determine the size of the worker pool.

    Args:
        value: Requested worker count, or None for the host parallelism.

    Returns:
        int: A positive worker count.
    """
    if value is None:
        value = os.cpu_count() or 1
    return max(1, int(value))


def run_search(
        root_path: str,
        pattern: str,
        *,
        workers: Optional[int] = None,
        match_mode: MatchMode | str = MatchMode.EXACT,
        strategy: str = STRATEGY_BACKTRACK,
        sink: Optional[ResultSink] = None,
        diagnostics: Optional[Diagnostics] = None,
        cancellation_event: Optional[threading.Event] = None,
) -> SearchResult:
    """
    Recursively search a directory tree for file names matching a glob pattern.

    Args:
        root_path: Directory where the traversal starts.
        pattern: Glob pattern ('*' and '?' wildcards, case-insensitive).
        workers: Size of the worker pool; defaults to the host parallelism.
        match_mode: Policy for wildcard-free patterns ("exact" or "substring").
        strategy: Matcher implementation ("backtrack" or "regex").
        sink: Destination of matches. When omitted, matches are collected
              and returned in SearchResult.matches.
        diagnostics: Destination of recoverable failures. Defaults to a
                     LoggingDiagnostics instance.
        cancellation_event: Optional event that stops the search when set.

    Returns:
        SearchResult: Aggregated outcome and statistics.

    Raises:
        InvalidSearchRootError: If the root is missing or not a directory.
        ValueError: If the match mode or strategy is unknown.
    """
    worker_count = resolve_worker_count(workers)
    validate_search_root(root_path)
    matcher = PatternMatcher(pattern, match_mode, strategy)

    collector: Optional[CollectingResultSink] = None
    if sink is None:
        collector = CollectingResultSink()
        sink = collector

    diag = diagnostics if diagnostics is not None else LoggingDiagnostics()
    cancel = cancellation_event if cancellation_event is not None else threading.Event()

    work_queue = WorkQueue(cancel)
    detector = TerminationDetector(work_queue)
    stats = SearchStats()

    logger.info(
        f"Searching '{root_path}' for '{pattern}' with {worker_count} workers "
        f"({matcher.mode.value}, {strategy})."
    )
    started = time.monotonic()
    detector.seed(DirectoryTask(path=root_path))

    executor = ThreadPoolExecutor(
        max_workers=worker_count,
        thread_name_prefix=WORKER_THREAD_PREFIX,
    )
    futures: List[Future] = []
    try:
        for worker_id in range(worker_count):
            futures.append(executor.submit(
                run_worker, worker_id, detector, matcher, sink, diag, stats
            ))
        _supervise(futures, detector, cancel)
    except KeyboardInterrupt:
        logger.warning("Interrupted. Waiting for workers to finish their current directory.")
        detector.request_stop()
        raise
    finally:
        executor.shutdown(wait=True)

    # Re-raise protocol violations or other crashes from worker threads
    for future in futures:
        future.result()

    elapsed = time.monotonic() - started
    counters = stats.snapshot()
    cancelled = detector.stop_requested and detector.pending > 0
    warnings = diag.warnings if isinstance(diag, LoggingDiagnostics) else []

    logger.info(
        f"Search finished in {elapsed:.3f}s: {counters['matches']} matches, "
        f"{counters['directories_scanned']} directories, "
        f"{counters['directories_failed']} unreadable."
    )

    return SearchResult(
        ok=not cancelled,
        error="",
        root_path=root_path,
        pattern=pattern,
        match_mode=matcher.mode.value,
        workers=worker_count,
        matches=collector.paths() if collector is not None else [],
        match_count=counters["matches"],
        directories_scanned=counters["directories_scanned"],
        directories_failed=counters["directories_failed"],
        entries_skipped=counters["entries_skipped"],
        warnings=warnings,
        cancelled=cancelled,
        elapsed_seconds=round(elapsed, 6),
        pending_at_exit=detector.pending,
        zero_transitions=detector.zero_transitions,
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _supervise(
        futures: List[Future],
        detector: TerminationDetector,
        cancel: threading.Event,
) -> None:
    """
    Wait for every worker, forwarding external cancellation and crashes.

    An event set by the caller does not notify the queue by itself, so the
    supervisor wakes the workers on its behalf. A crashed worker stops the
    whole pool, since its directory may never be completed.
    """
    pending: Set[Future] = set(futures)
    while pending:
        done, pending = wait(pending, timeout=_SUPERVISOR_TICK_S, return_when=FIRST_EXCEPTION)
        if any(f.exception() is not None for f in done):
            logger.error("A worker crashed. Stopping the search.")
            detector.request_stop()
        elif cancel.is_set():
            detector.request_stop()
