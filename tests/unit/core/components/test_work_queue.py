from __future__ import annotations

"""
Unit tests for the shared Work Queue and Termination Detector.

Verifies:
1. FIFO delivery and the increment-before-push registration.
2. Blocking behavior while directories are still pending elsewhere.
3. Wake-up of every waiter when the pending count reaches zero.
4. Re-entry into the wait after a spurious wake.
5. Cancellation and protocol violations.
"""

import threading
import time
from typing import List, Optional

import pytest

from filefinder.core.pipeline.components.work_queue import TerminationDetector, WorkQueue
from filefinder.domain.search_models import DirectoryTask, TerminationProtocolError

_JOIN_TIMEOUT_S = 5.0


def _start_waiter(detector: TerminationDetector, out: List[Optional[DirectoryTask]]) -> threading.Thread:
    """Run next_task() in a background thread and store its return value."""
    t = threading.Thread(target=lambda: out.append(detector.next_task()), daemon=True)
    t.start()
    return t


@pytest.fixture
def detector() -> TerminationDetector:
    return TerminationDetector(WorkQueue())


def test_register_counts_then_queues_in_fifo_order(detector: TerminationDetector) -> None:
    detector.register(DirectoryTask("a"))
    detector.register(DirectoryTask("b"))

    assert detector.pending == 2
    assert detector.next_task() == DirectoryTask("a")
    assert detector.next_task() == DirectoryTask("b")
    # Popping does not complete anything
    assert detector.pending == 2


def test_seed_sets_pending_to_one(detector: TerminationDetector) -> None:
    detector.seed(DirectoryTask("root"))
    assert detector.pending == 1
    assert not detector.is_terminal()


def test_next_task_returns_terminal_signal_when_nothing_pending(detector: TerminationDetector) -> None:
    assert detector.next_task() is None
    assert detector.is_terminal()


def test_waiter_blocks_while_work_is_pending_elsewhere(detector: TerminationDetector) -> None:
    """An empty queue with a non-zero count must not release the waiter."""
    detector.seed(DirectoryTask("root"))
    assert detector.next_task() == DirectoryTask("root")

    out: List[Optional[DirectoryTask]] = []
    waiter = _start_waiter(detector, out)
    time.sleep(0.2)
    assert waiter.is_alive()

    # The root's enumeration finishes without children: termination
    assert detector.complete() == 0
    waiter.join(_JOIN_TIMEOUT_S)

    assert not waiter.is_alive()
    assert out == [None]
    assert detector.is_terminal()


def test_waiter_receives_newly_registered_work(detector: TerminationDetector) -> None:
    detector.seed(DirectoryTask("root"))
    detector.next_task()

    out: List[Optional[DirectoryTask]] = []
    waiter = _start_waiter(detector, out)
    time.sleep(0.1)

    detector.register(DirectoryTask("root/child"))
    waiter.join(_JOIN_TIMEOUT_S)

    assert out == [DirectoryTask("root/child")]
    assert detector.pending == 2


def test_spurious_wake_reenters_the_wait() -> None:
    queue = WorkQueue()
    detector = TerminationDetector(queue)
    detector.seed(DirectoryTask("root"))
    detector.next_task()

    out: List[Optional[DirectoryTask]] = []
    waiter = _start_waiter(detector, out)
    time.sleep(0.1)

    queue.wake_all()
    time.sleep(0.2)
    assert waiter.is_alive(), "Waiter returned on a wake that satisfied nothing."

    detector.complete()
    waiter.join(_JOIN_TIMEOUT_S)
    assert out == [None]


def test_all_waiters_released_on_zero(detector: TerminationDetector) -> None:
    """More waiters than work: every one of them observes termination."""
    detector.seed(DirectoryTask("root"))
    detector.next_task()

    out: List[Optional[DirectoryTask]] = []
    waiters = [_start_waiter(detector, out) for _ in range(16)]
    time.sleep(0.2)

    detector.complete()
    for w in waiters:
        w.join(_JOIN_TIMEOUT_S)

    assert not any(w.is_alive() for w in waiters)
    assert out == [None] * 16


def test_zero_is_reached_exactly_once(detector: TerminationDetector) -> None:
    detector.seed(DirectoryTask("root"))
    detector.next_task()
    detector.register(DirectoryTask("root/a"))
    detector.register(DirectoryTask("root/b"))
    assert detector.complete() == 2  # root done, children still pending

    detector.next_task()
    detector.next_task()
    assert detector.complete() == 1
    assert detector.zero_transitions == 0
    assert detector.complete() == 0
    assert detector.zero_transitions == 1


def test_complete_below_zero_is_a_protocol_error(detector: TerminationDetector) -> None:
    with pytest.raises(TerminationProtocolError):
        detector.complete()
    assert detector.pending == 0


def test_request_stop_releases_waiters_and_hides_queued_work() -> None:
    queue = WorkQueue()
    detector = TerminationDetector(queue)
    detector.seed(DirectoryTask("root"))
    detector.next_task()

    out: List[Optional[DirectoryTask]] = []
    waiter = _start_waiter(detector, out)
    time.sleep(0.1)

    detector.request_stop()
    waiter.join(_JOIN_TIMEOUT_S)
    assert out == [None]

    detector.register(DirectoryTask("late"))
    assert len(queue) == 1
    assert detector.next_task() is None
    assert detector.is_terminal()
    assert detector.stop_requested


def test_external_cancellation_event_is_shared() -> None:
    event = threading.Event()
    queue = WorkQueue(event)
    detector = TerminationDetector(queue)
    detector.seed(DirectoryTask("root"))

    event.set()
    assert queue.cancellation_event is event
    assert detector.stop_requested
    assert detector.next_task() is None
