"""Reader/writer lock guarding a series' mutable state."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class RWLock:
    """Non-reentrant lock allowing many readers or a single writer.

    Waiting writers take priority over new readers so a steady stream of
    readers cannot starve a mutation. Neither mode is reentrant: acquiring the
    lock again from the thread that already holds it blocks forever.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        """Block until the lock can be held in shared mode."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Release one shared hold."""
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read called on a lock not held for reading")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        """Block until the lock can be held exclusively."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        """Release the exclusive hold."""
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write called on a lock not held for writing")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def write_held(self) -> bool:
        """Return True while some thread holds the lock exclusively."""
        with self._cond:
            return self._writer

    @property
    def readers(self) -> int:
        """Return the number of current shared holders."""
        with self._cond:
            return self._readers


__all__ = ["RWLock"]
