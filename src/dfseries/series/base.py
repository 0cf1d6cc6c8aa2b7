"""Shared contract and buffer mechanics for typed series.

A series owns a one-dimensional NumPy buffer whose length is the reserved
capacity; only the first ``nrows`` slots hold data. Concrete variants decide
how absence is encoded in the buffer (a NaN sentinel for floats, ``None`` in an
object array for integers) and how incoming values are coerced.

Every public method that touches ``name``, the buffer or the cached nil count
takes the series' :class:`~dfseries.series.locking.RWLock` unless it is passed
``Options(dont_lock=True)``. Internal helpers (the ``_``-prefixed layer) always
assume the lock is already held and never acquire it, so public methods can be
composed without deadlocking on the non-reentrant lock.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager, nullcontext
from typing import Any, ClassVar, TypeVar

import numpy as np
import structlog

from ..range import Range
from .formatting import (
    ValueToStringFormatter,
    compact_string,
    default_value_formatter,
    preview_rows,
    render_table,
)
from .locking import RWLock
from .options import Options, SeriesInit

logger = structlog.get_logger(__name__)

BATCH_TYPES = (list, tuple, np.ndarray)
MIN_GROWTH = 4

SeriesT = TypeVar("SeriesT", bound="Series")


def _bypass(options: Options | None) -> bool:
    """Return True when the caller already holds the lock."""
    return options is not None and options.dont_lock


class Series(ABC):
    """Named, ordered and mutable sequence of typed values with absence tracking."""

    type_name: ClassVar[str]
    dtype: ClassVar[Any]

    def __init__(self, name: str, *values: Any, init: SeriesInit | None = None) -> None:
        init = init or SeriesInit()
        self._lock = RWLock()
        self._name = str(name)
        self._formatter: ValueToStringFormatter = default_value_formatter
        self._buf = self._allocate(init.effective_capacity)
        # Pre-sized rows start out absent until an initial value covers them.
        self._size = init.size
        self._nil_count = init.size

        for idx, value in enumerate(values):
            item = self._coerce(value)
            if idx < init.size:
                if not self._is_absent(item):
                    self._nil_count -= 1
                self._buf[idx] = item
            else:
                self._insert(self._size, item)

    @abstractmethod
    def _allocate(self, capacity: int) -> np.ndarray:
        """Return a buffer of ``capacity`` absent slots."""

    @abstractmethod
    def _coerce(self, value: Any) -> Any:
        """Normalize a scalar input into its stored representation."""

    @abstractmethod
    def _coerce_batch(self, values: Sequence[Any] | np.ndarray) -> np.ndarray:
        """Normalize a batch of inputs into a buffer-compatible array."""

    @abstractmethod
    def _is_absent(self, item: Any) -> bool:
        """Return True when a stored item represents absence."""

    @abstractmethod
    def _absent_mask(self, items: np.ndarray) -> np.ndarray:
        """Return a boolean mask of the absent slots in ``items``."""

    @abstractmethod
    def _external(self, item: Any) -> Any:
        """Convert a stored item into the public value (``None`` when absent)."""

    def _read_guard(self, options: Options | None) -> AbstractContextManager[None]:
        if _bypass(options):
            return nullcontext()
        return self._lock.read_locked()

    def _write_guard(self, options: Options | None) -> AbstractContextManager[None]:
        if _bypass(options):
            return nullcontext()
        return self._lock.write_locked()

    def lock(self) -> None:
        """Acquire the series lock exclusively.

        The caller is responsible for a matching :meth:`unlock` on every exit
        path. Prefer :meth:`locked`, which releases the lock automatically.
        While held, series methods must be called with ``Options(dont_lock=True)``.
        """
        self._lock.acquire_write()

    def unlock(self) -> None:
        """Release a lock taken with :meth:`lock`."""
        self._lock.release_write()

    @contextmanager
    def locked(self) -> Iterator[Options]:
        """Hold the series lock exclusively and yield the bypass options to pass on.

        Example::

            with series.locked() as opts:
                row = series.append(1.5, opts)
                series.update(row, None, opts)
        """
        with self._lock.write_locked():
            yield Options(dont_lock=True)

    def name(self, options: Options | None = None) -> str:
        """Return the series name."""
        with self._read_guard(options):
            return self._name

    def rename(self, name: str, options: Options | None = None) -> None:
        """Change the series name."""
        with self._write_guard(options):
            self._name = str(name)

    def set_value_to_string_formatter(self, formatter: ValueToStringFormatter | None) -> None:
        """Install a custom value formatter; ``None`` restores the default."""
        self._formatter = formatter if formatter is not None else default_value_formatter

    def nrows(self, options: Options | None = None) -> int:
        """Return how many rows the series contains."""
        with self._read_guard(options):
            return self._size

    def nil_count(self, options: Options | None = None) -> int:
        """Return how many rows are absent."""
        with self._read_guard(options):
            return self._nil_count

    def contains_nil(self, options: Options | None = None) -> bool:
        """Return True when at least one row is absent."""
        with self._read_guard(options):
            return self._nil_count > 0

    @property
    def capacity(self) -> int:
        """Return the number of slots reserved by the underlying buffer."""
        return len(self._buf)

    def value(self, row: int, options: Options | None = None) -> Any:
        """Return the value at ``row`` or ``None`` when the row is absent.

        Raises ``IndexError`` when ``row`` lies outside ``[0, nrows)``.
        """
        with self._read_guard(options):
            return self._value(row)

    def value_string(self, row: int, options: Options | None = None) -> str:
        """Return ``row`` rendered by the active value formatter."""
        return self._formatter(self.value(row, options))

    def to_list(self, options: Options | None = None) -> list[Any]:
        """Return every value in order, ``None`` marking absent rows."""
        with self._read_guard(options):
            return [self._external(item) for item in self._buf[: self._size]]

    def is_equal(self, a: Any, b: Any) -> bool:
        """Return True if ``a`` equals ``b``; two absent values are equal."""
        if a is None:
            return b is None
        if b is None:
            return False
        return bool(a == b)

    def is_less_than(self, a: Any, b: Any) -> bool:
        """Return True if ``a`` orders before ``b``.

        Absence orders before every value, including another absence.
        """
        if a is None:
            return True
        if b is None:
            return False
        return bool(a < b)

    def prepend(self, value: Any, options: Options | None = None) -> None:
        """Insert ``value`` (or a batch of values) before the first row.

        Existing rows are shifted right inside the current buffer when it has
        spare trailing capacity; a larger buffer is only allocated otherwise.
        """
        with self._write_guard(options):
            self._insert(0, value)

    def append(self, value: Any, options: Options | None = None) -> int:
        """Insert ``value`` after the last row and return its row index."""
        with self._write_guard(options):
            row = self._size
            self._insert(row, value)
            return row

    def insert(self, row: int, value: Any, options: Options | None = None) -> None:
        """Insert ``value`` at ``row``, shifting that row and the following ones.

        ``value`` may be a scalar, ``None`` or a list, tuple or 1-D array that
        is inserted as one contiguous block.
        """
        with self._write_guard(options):
            self._insert(row, value)

    def remove(self, row: int, options: Options | None = None) -> None:
        """Delete ``row`` and shift the following rows left by one."""
        with self._write_guard(options):
            self._remove(row)

    def update(self, row: int, value: Any, options: Options | None = None) -> None:
        """Overwrite ``row`` with ``value``."""
        with self._write_guard(options):
            self._update(row, value)

    def swap(self, row1: int, row2: int, options: Options | None = None) -> None:
        """Exchange the values held by two rows."""
        if row1 == row2:
            return
        with self._write_guard(options):
            self._check_row(row1)
            self._check_row(row2)
            self._buf[[row1, row2]] = self._buf[[row2, row1]]

    def sort(self, options: Options | None = None) -> None:
        """Stable in-place sort; absent rows come first in either direction.

        Pass ``Options(sort_desc=True)`` to order present values from largest
        to smallest. Present values that compare equal keep their order.
        """
        descending = options.sort_desc if options is not None else False
        with self._write_guard(options):
            self._sort(descending)

    def copy(self: SeriesT, r: Range | None = None, options: Options | None = None) -> SeriesT:
        """Return an independent series holding the rows covered by ``r``.

        The source is read-locked for the whole copy. An empty source yields an
        empty copy without resolving ``r``; otherwise an unresolvable range
        raises :class:`~dfseries.errors.RangeError`.
        """
        with self._read_guard(options):
            return self._copy(r)

    def table(self, r: Range | None = None, options: Options | None = None) -> str:
        """Render the rows covered by ``r`` as a text table."""
        with self._read_guard(options):
            rows: list[tuple[int, str]] = []
            if self._size > 0:
                start, end = (r or Range()).limits(self._size)
                rows = [
                    (row, self._formatter(self._value(row))) for row in range(start, end + 1)
                ]
            return render_table(self._name, self.type_name, self._size, rows)

    def string(self, options: Options | None = None) -> str:
        """Return the compact ``[ a b c ... x y z ]`` form of the series."""
        with self._read_guard(options):
            rendered = [self._formatter(self._value(row)) for row in preview_rows(self._size)]
            return compact_string(rendered, self._size)

    def __str__(self) -> str:
        return self.string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, nrows={self._size})"

    def __len__(self) -> int:
        return self.nrows()

    def _check_row(self, row: int, *, allow_end: bool = False) -> int:
        row = operator.index(row)
        upper = self._size if allow_end else self._size - 1
        if row < 0 or row > upper:
            raise IndexError(f"row {row} out of range for series with {self._size} rows")
        return row

    def _value(self, row: int) -> Any:
        row = self._check_row(row)
        return self._external(self._buf[row])

    def _reserve(self, extra: int) -> None:
        """Make room for ``extra`` more rows, growing the buffer when full."""
        needed = self._size + extra
        if needed <= len(self._buf):
            return
        new_capacity = max(needed, 2 * len(self._buf), MIN_GROWTH)
        grown = self._allocate(new_capacity)
        grown[: self._size] = self._buf[: self._size]
        logger.debug(
            "series.buffer_grown",
            series=self._name,
            old_capacity=len(self._buf),
            new_capacity=new_capacity,
        )
        self._buf = grown

    def _insert(self, row: int, value: Any) -> None:
        row = self._check_row(row, allow_end=True)
        if isinstance(value, BATCH_TYPES):
            block = self._coerce_batch(value)
        else:
            block = self._allocate(1)
            block[0] = self._coerce(value)

        count = len(block)
        if count == 0:
            return
        self._reserve(count)
        # NumPy resolves the overlap between source and destination slices.
        self._buf[row + count : self._size + count] = self._buf[row : self._size]
        self._buf[row : row + count] = block
        self._size += count
        self._nil_count += int(np.count_nonzero(self._absent_mask(block)))

    def _remove(self, row: int) -> None:
        row = self._check_row(row)
        if self._is_absent(self._buf[row]):
            self._nil_count -= 1
        self._buf[row : self._size - 1] = self._buf[row + 1 : self._size]
        self._size -= 1
        self._buf[self._size] = self._allocate(1)[0]

    def _update(self, row: int, value: Any) -> None:
        row = self._check_row(row)
        item = self._coerce(value)
        was_absent = self._is_absent(self._buf[row])
        now_absent = self._is_absent(item)
        if was_absent and not now_absent:
            self._nil_count -= 1
        elif not was_absent and now_absent:
            self._nil_count += 1
        self._buf[row] = item

    def _sort(self, descending: bool) -> None:
        data = self._buf[: self._size]
        mask = self._absent_mask(data)
        present = data[~mask]
        # sorted() stays stable when reverse=True, so equal values keep their order.
        order = sorted(range(len(present)), key=present.__getitem__, reverse=descending)
        absent = int(np.count_nonzero(mask))
        self._buf[:absent] = self._allocate(absent)
        self._buf[absent : self._size] = present[np.asarray(order, dtype=np.intp)]
        logger.debug("series.sorted", series=self._name, rows=self._size, descending=descending)

    def _copy(self: SeriesT, r: Range | None) -> SeriesT:
        if self._size == 0:
            return self._spawn(self._allocate(0))
        start, end = (r or Range()).limits(self._size)
        snapshot = self._buf[start : end + 1].copy()
        logger.debug("series.copied", series=self._name, start=start, end=end)
        return self._spawn(snapshot)

    def _spawn(self: SeriesT, data: np.ndarray) -> SeriesT:
        """Build a series of the same variant that owns ``data``."""
        clone = type(self)(self._name)
        clone._formatter = self._formatter
        clone._buf = data
        clone._size = len(data)
        clone._nil_count = int(np.count_nonzero(self._absent_mask(data)))
        return clone


__all__ = ["Series"]
