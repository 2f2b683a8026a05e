"""Free-list pool for per-request objects.

Response writers and request contexts are reused across requests instead
of being allocated each time. A released object is reset before it goes
back on the list, so nothing from one request leaks into the next.
"""

import threading
from collections.abc import Callable


class Pool[T]:
    """A lock-guarded free list.

    Usage::

        pool = Pool(ResponseWriter, reset=ResponseWriter.reset, max_size=256)
        w = pool.acquire()
        try:
            ...
        finally:
            pool.release(w)
    """

    __slots__ = ("_factory", "_free", "_lock", "_max_size", "_reset")

    def __init__(
        self,
        factory: Callable[[], T],
        *,
        reset: Callable[[T], None] | None = None,
        max_size: int = 256,
    ) -> None:
        self._factory = factory
        self._reset = reset
        self._max_size = max_size
        self._free: list[T] = []
        self._lock = threading.Lock()

    def acquire(self) -> T:
        """Take an object from the free list, or build a new one."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return self._factory()

    def release(self, obj: T) -> None:
        """Reset *obj* and return it to the free list.

        Objects beyond ``max_size`` are dropped.
        """
        if self._reset is not None:
            self._reset(obj)
        with self._lock:
            if len(self._free) < self._max_size:
                self._free.append(obj)

    def __len__(self) -> int:
        with self._lock:
            return len(self._free)
