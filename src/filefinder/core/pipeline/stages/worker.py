from __future__ import annotations

"""
Traversal Worker Loop.

Every worker in the pool runs the same loop: wait for a directory, enumerate
it, then report it as complete. Workers are symmetric; any of them may
discover new directories and any of them may be the one that observes the
end of the search.
"""

import logging

from filefinder.core.pipeline.components.sinks import Diagnostics, ResultSink
from filefinder.core.pipeline.components.work_queue import TerminationDetector
from filefinder.core.processing.pattern_matcher import PatternMatcher
from filefinder.core.services.scanner import expand_directory
from filefinder.domain.search_models import SearchStats

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_worker(
        worker_id: int,
        detector: TerminationDetector,
        matcher: PatternMatcher,
        sink: ResultSink,
        diagnostics: Diagnostics,
        stats: SearchStats,
) -> int:
    """
    Consume directories until the detector reports termination.

    This function is the target of each pool thread. Unexpected exceptions
    raised while enumerating a directory are contained at the directory
    boundary, so one bad directory never takes the worker down, and the
    pending count is always decremented for the directory that was taken.

    Args:
        worker_id: Ordinal of the worker, used for diagnostics only.
        detector: Shared termination detector (and through it, the queue).
        matcher: Compiled pattern matcher.
        sink: Destination of match reports.
        diagnostics: Destination of recoverable failures.
        stats: Shared counters for the search.

    Returns:
        int: Number of directories this worker enumerated.
    """
    handled = 0
    logger.debug(f"Worker {worker_id} started.")

    while True:
        task = detector.next_task()
        if task is None:
            if detector.is_terminal():
                break
            # Woken without work while other directories are still pending
            continue

        try:
            expand_directory(task, detector, matcher, sink, diagnostics, stats)
        except Exception as e:
            logger.debug(f"Worker {worker_id} failed on '{task.path}'", exc_info=True)
            stats.add("directories_failed")
            diagnostics.warn(task.path, f"Unexpected failure: {e}")
        finally:
            detector.complete()
            handled += 1

    logger.debug(f"Worker {worker_id} exiting after {handled} directories.")
    return handled
