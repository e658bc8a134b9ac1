from __future__ import annotations

"""
Unit tests for Result Sinks and Diagnostics.

Verifies serialized emission under concurrent reporting and the recording
of warnings for the final report.
"""

import io
import logging
import threading

from filefinder.core.pipeline.components.sinks import (
    CollectingResultSink,
    LoggingDiagnostics,
    StreamResultSink,
)
from filefinder.domain.search_models import MatchEvent, SearchWarning


def _hammer(report, n_threads: int = 8, per_thread: int = 250) -> None:
    """Report distinct paths from several threads at once."""
    def run(tid: int) -> None:
        for i in range(per_thread):
            report(f"/t{tid}/file_{i}.txt")

    threads = [threading.Thread(target=run, args=(t,)) for t in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


def test_stream_sink_writes_whole_lines_under_concurrency() -> None:
    buffer = io.StringIO()
    sink = StreamResultSink(buffer)

    _hammer(sink.report)

    lines = buffer.getvalue().splitlines()
    assert len(lines) == 8 * 250
    assert all(line.startswith("/t") and line.endswith(".txt") for line in lines)
    assert len(set(lines)) == len(lines)


def test_collecting_sink_keeps_every_event() -> None:
    sink = CollectingResultSink()

    _hammer(sink.report)

    assert len(sink.paths()) == 8 * 250
    assert all(isinstance(e, MatchEvent) for e in sink.events)


def test_logging_diagnostics_logs_and_records(caplog) -> None:
    diag = LoggingDiagnostics()

    with caplog.at_level(logging.WARNING):
        diag.warn("/root/locked", "Cannot read directory: Permission denied")

    assert diag.warnings == [
        SearchWarning(context="/root/locked", detail="Cannot read directory: Permission denied")
    ]
    assert "/root/locked" in caplog.text
    assert "Permission denied" in caplog.text
