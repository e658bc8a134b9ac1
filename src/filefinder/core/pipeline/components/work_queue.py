from __future__ import annotations

"""
Shared Directory Work Queue and Termination Detection.

The traversal has no central coordinator: every worker both consumes
directories from the queue and produces new ones into it. A worker therefore
cannot conclude that the search is over just because the queue is empty at
some instant; another worker may be about to push children of the directory
it is enumerating.

The TerminationDetector solves this with a pending-directory counter:
    1. The counter is incremented before a new directory becomes visible in
       the queue.
    2. It is decremented only after a directory has been fully enumerated,
       i.e. after all of its children have been counted and pushed.
    3. Waiters block until the queue is non-empty, the counter is zero, or a
       stop was requested.
    4. The decrement that reaches zero wakes every waiter.
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, Optional

from filefinder.domain.search_models import DirectoryTask, TerminationProtocolError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# WORK QUEUE
# -----------------------------------------------------------------------------

class WorkQueue:
    """
    Thread-safe FIFO of pending directories with a blocking pop.

    All state is guarded by a single Condition; every wait goes through
    Condition.wait_for so a spurious wake simply re-evaluates the predicate.
    """

    def __init__(self, cancellation_event: Optional[threading.Event] = None) -> None:
        self._items: Deque[DirectoryTask] = deque()
        self._cond = threading.Condition()
        self._cancel = cancellation_event or threading.Event()

    def push(self, task: DirectoryTask) -> None:
        """Append a task to the tail and wake one blocked consumer."""
        with self._cond:
            self._items.append(task)
            self._cond.notify()

    def pop_or_wait(self, is_terminal: Callable[[], bool]) -> Optional[DirectoryTask]:
        """
        Block until a task is available, termination holds, or a stop is requested.

        Args:
            is_terminal: Predicate reporting that no work can ever arrive again.

        Returns:
            Optional[DirectoryTask]: The head task, or None as the terminal signal.
        """
        with self._cond:
            self._cond.wait_for(
                lambda: bool(self._items) or is_terminal() or self._cancel.is_set()
            )
            if self._cancel.is_set() or not self._items:
                return None
            return self._items.popleft()

    def wake_all(self) -> None:
        """Wake every thread currently blocked in pop_or_wait."""
        with self._cond:
            self._cond.notify_all()

    @property
    def cancellation_event(self) -> threading.Event:
        return self._cancel

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

# -----------------------------------------------------------------------------
# TERMINATION DETECTOR
# -----------------------------------------------------------------------------

class TerminationDetector:
    """
    Pending-directory counter layered on top of a WorkQueue.

    The counter has its own lock. It is never held while acquiring the queue's
    condition, so the two locks cannot be taken in opposite orders.
    """

    def __init__(self, work_queue: WorkQueue) -> None:
        self._queue = work_queue
        self._lock = threading.Lock()
        self._pending = 0
        self._zero_transitions = 0

    # --- Counter protocol ---

    def seed(self, root: DirectoryTask) -> None:
        """Register the root directory; the pending count becomes 1."""
        self.register(root)

    def register(self, task: DirectoryTask) -> None:
        """Count a newly discovered directory, then make it visible in the queue."""
        with self._lock:
            self._pending += 1
        self._queue.push(task)

    def complete(self) -> int:
        """
        Mark one directory as fully enumerated.

        Must be called exactly once per registered task, after every child of
        that task has been registered. The call that brings the counter to
        zero wakes all blocked workers.

        Returns:
            int: The pending count after the decrement.

        Raises:
            TerminationProtocolError: If there was nothing pending.
        """
        with self._lock:
            if self._pending <= 0:
                raise TerminationProtocolError(
                    "Pending directory count would drop below zero."
                )
            self._pending -= 1
            remaining = self._pending
            if remaining == 0:
                self._zero_transitions += 1

        if remaining == 0:
            logger.debug("Pending directory count reached zero. Waking all workers.")
            self._queue.wake_all()
        return remaining

    # --- Observers ---

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    @property
    def zero_transitions(self) -> int:
        with self._lock:
            return self._zero_transitions

    @property
    def stop_requested(self) -> bool:
        return self._queue.cancellation_event.is_set()

    def is_terminal(self) -> bool:
        """True once no work can ever arrive again, or a stop was requested."""
        return self.pending == 0 or self.stop_requested

    # --- Worker facing API ---

    def next_task(self) -> Optional[DirectoryTask]:
        """Block for the next directory; None means terminal or spurious."""
        return self._queue.pop_or_wait(self.is_terminal)

    def request_stop(self) -> None:
        """Ask every worker to exit after its current directory."""
        self._queue.cancellation_event.set()
        self._queue.wake_all()
