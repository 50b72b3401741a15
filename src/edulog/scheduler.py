"""Single-threaded callback scheduling.

``EventLoop`` exposes the same ``after``/``after_cancel`` pair as a Tk root,
so the session controller runs unchanged under the GUI, the CLI, or a test
with an injected clock.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple


class EventLoop:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._heap: List[Tuple[float, int, str]] = []
        self._callbacks: Dict[str, Callable[[], None]] = {}
        self._counter = itertools.count()

    def after(self, delay_ms: int, callback: Callable[[], None]) -> str:
        with self._lock:
            seq = next(self._counter)
            job_id = f"after#{seq}"
            due = self._clock() + max(0, delay_ms) / 1000.0
            heapq.heappush(self._heap, (due, seq, job_id))
            self._callbacks[job_id] = callback
        return job_id

    def after_cancel(self, job_id: str) -> None:
        with self._lock:
            self._callbacks.pop(job_id, None)

    def pending(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def _pop_due(self) -> Optional[Callable[[], None]]:
        with self._lock:
            now = self._clock()
            while self._heap and self._heap[0][0] <= now:
                _due, _seq, job_id = heapq.heappop(self._heap)
                callback = self._callbacks.pop(job_id, None)
                if callback is not None:
                    return callback
            return None

    def run_due(self) -> int:
        """Run every callback that is due, including ones scheduled meanwhile."""
        ran = 0
        while True:
            callback = self._pop_due()
            if callback is None:
                return ran
            callback()
            ran += 1

    def run_until(
        self,
        predicate: Callable[[], bool],
        timeout: Optional[float] = None,
        poll_interval: float = 0.05,
    ) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not predicate():
            if deadline is not None and time.monotonic() >= deadline:
                return False
            self.run_due()
            if not predicate():
                time.sleep(poll_interval)
        return True


class RepeatingTimer:
    def __init__(
        self, scheduler, interval_ms: int, callback: Callable[[], None]
    ) -> None:
        self._scheduler = scheduler
        self._interval_ms = interval_ms
        self._callback = callback
        self._job: Optional[str] = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._job = self._scheduler.after(self._interval_ms, self._fire)

    def _fire(self) -> None:
        self._job = None
        if not self._active:
            return
        self._callback()
        if self._active:
            self._job = self._scheduler.after(self._interval_ms, self._fire)

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._job is not None:
            self._scheduler.after_cancel(self._job)
            self._job = None
