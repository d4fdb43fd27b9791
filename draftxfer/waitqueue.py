"""A thread-safe FIFO queue with an optional size limit and cancellation."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, Generic, Optional, TypeVar

T = TypeVar("T")


class WaitQueue(Generic[T]):
    """FIFO queue shared between threads.

    ``put`` never waits for space: it fails at once when the queue is full.
    ``get`` waits for an item until its timeout runs out or the queue is
    cancelled. A result of ``None`` from ``get`` or ``try_get`` means no item.
    """

    def __init__(self, size_limit: Optional[int] = None) -> None:
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._items: Deque[T] = deque()
        self._size_limit = size_limit
        self._done = False

    def _acquire(self, timeout: Optional[float]) -> bool:
        if timeout is None:
            return self._lock.acquire()
        return self._lock.acquire(timeout=max(0.0, timeout))

    def _ready(self) -> bool:
        return self._done or bool(self._items)

    def put(self, item: T, timeout: Optional[float] = None) -> bool:
        """Append an item; return False if the queue is full or the lock timed out."""
        if not self._acquire(timeout):
            return False
        try:
            if self._size_limit is not None and len(self._items) >= self._size_limit:
                return False
            self._items.append(item)
            self._cond.notify()
            return True
        finally:
            self._lock.release()

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Remove and return the oldest item, waiting up to ``timeout`` seconds."""
        deadline = None if timeout is None else time.monotonic() + timeout
        if not self._acquire(timeout):
            return None
        try:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not self._cond.wait_for(self._ready, remaining):
                return None
            if self._done:
                return None
            return self._items.popleft()
        finally:
            self._lock.release()

    def try_get(self) -> Optional[T]:
        """Return the oldest item without waiting, or None."""
        if not self._lock.acquire(blocking=False):
            return None
        try:
            if not self._items:
                return None
            return self._items.popleft()
        finally:
            self._lock.release()

    def cancel(self) -> None:
        """Mark the queue done and wake every waiting consumer."""
        with self._cond:
            self._done = True
            self._cond.notify_all()

    def resume(self) -> None:
        """Clear the cancelled state."""
        self._done = False

    def set_size_limit(self, limit: Optional[int]) -> None:
        """Set the largest number of items the queue holds; None for no limit."""
        self._size_limit = limit

    def done(self) -> bool:
        """Whether the queue has been cancelled."""
        return self._done

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)