"""A fixed pool of worker threads that run submitted callables."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Tuple

from draftxfer.waitqueue import WaitQueue

_POLL_INTERVAL = 0.05

Work = Callable[[threading.Event], None]


class TaskPool:
    """Worker threads fed from a shared queue.

    Each launched function is called as ``function(stop, *args)`` where
    ``stop`` is a :class:`threading.Event` set when its worker is asked to stop.
    """

    def __init__(self, size: int = 0) -> None:
        self._queue: WaitQueue[Work] = WaitQueue()
        self._workers: List[Tuple[threading.Thread, threading.Event]] = []
        self.resize(size)

    def set_queue_size_limit(self, limit: Optional[int]) -> None:
        """Limit how many launched tasks may wait for a worker."""
        self._queue.set_size_limit(limit)

    def cancel(self) -> None:
        """Stop handing out work; workers exit once idle."""
        self._queue.cancel()

    def cancelled(self) -> bool:
        return self._queue.done()

    def size(self) -> int:
        return len(self._workers)

    def resize(self, new_size: int) -> None:
        """Grow or shrink the pool; removed workers are stopped and joined."""
        while len(self._workers) > new_size:
            thread, stop = self._workers.pop()
            stop.set()
            thread.join()
        while len(self._workers) < new_size:
            stop = threading.Event()
            thread = threading.Thread(target=self._steal_work, args=(stop,), daemon=True)
            thread.start()
            self._workers.append((thread, stop))

    def launch(self, function: Callable[..., Any], *args: Any) -> Optional[Future]:
        """Queue a call; return its future, or None if the queue is full."""
        future: Future = Future()

        def work(stop: threading.Event) -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = function(stop, *args)
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        if not self._queue.put(work):
            return None
        return future

    def _steal_work(self, stop: threading.Event) -> None:
        while not stop.is_set() and not self._queue.done():
            work = self._queue.get(_POLL_INTERVAL)
            if work is not None:
                work(stop)

    def __enter__(self) -> "TaskPool":
        return self

    def __exit__(self, *args: Any) -> None:
        self.cancel()
        self.resize(0)