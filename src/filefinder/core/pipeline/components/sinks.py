from __future__ import annotations

"""
Result Sinks and Diagnostics Collaborators.

Workers report matches and recoverable failures through two narrow
interfaces. Implementations must tolerate concurrent calls from every worker
thread, so each one serializes emission behind its own lock. No ordering is
guaranteed between reports coming from different workers.
"""

import logging
import sys
import threading
from typing import List, Optional, Protocol, TextIO

from filefinder.domain.search_models import MatchEvent, SearchWarning

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# INTERFACES
# -----------------------------------------------------------------------------

class ResultSink(Protocol):
    """Receives the full path of every matching file exactly once."""

    def report(self, path: str) -> None:
        ...


class Diagnostics(Protocol):
    """Receives per-directory and per-entry failures."""

    def warn(self, context: str, detail: str) -> None:
        ...

# -----------------------------------------------------------------------------
# RESULT SINKS
# -----------------------------------------------------------------------------

class StreamResultSink:
    """Write each match as one line on a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    def report(self, path: str) -> None:
        with self._lock:
            self._stream.write(f"{path}\n")
            self._stream.flush()


class CollectingResultSink:
    """Keep every MatchEvent in memory for later inspection."""

    def __init__(self) -> None:
        self._events: List[MatchEvent] = []
        self._lock = threading.Lock()

    def report(self, path: str) -> None:
        with self._lock:
            self._events.append(MatchEvent(path=path))

    @property
    def events(self) -> List[MatchEvent]:
        with self._lock:
            return list(self._events)

    def paths(self) -> List[str]:
        with self._lock:
            return [e.path for e in self._events]

# -----------------------------------------------------------------------------
# DIAGNOSTICS
# -----------------------------------------------------------------------------

class LoggingDiagnostics:
    """
    Route traversal failures to the logging subsystem and remember them.

    The recorded warnings feed the SearchResult and the optional error report.
    """

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logger
        self._warnings: List[SearchWarning] = []
        self._lock = threading.Lock()

    def warn(self, context: str, detail: str) -> None:
        self._log.warning(f"{detail} (path: {context})")
        with self._lock:
            self._warnings.append(SearchWarning(context=context, detail=detail))

    @property
    def warnings(self) -> List[SearchWarning]:
        with self._lock:
            return list(self._warnings)
