"""Float series storing absence as a NaN sentinel."""

from collections.abc import Sequence
from typing import Any

import numpy as np

from .base import Series
from .options import Options


class SeriesFloat64(Series):
    """Series of ``float64`` values held in a contiguous NumPy buffer.

    Absence has no side channel: a row is absent exactly when its slot holds
    NaN. Accepted inputs are ``None``, floats, and anything whose ``str`` form
    parses as a float; other values raise ``TypeError``.
    """

    type_name = "float64"
    dtype = np.float64

    def _allocate(self, capacity: int) -> np.ndarray:
        return np.full(capacity, np.nan, dtype=np.float64)

    def _coerce(self, value: Any) -> float:
        if value is None:
            return np.nan
        if isinstance(value, (float, np.floating)):
            return float(value)
        try:
            return float(str(value))
        except ValueError as exc:
            raise TypeError(f"Cannot coerce {value!r} to float64") from exc

    def _coerce_batch(self, values: Sequence[Any] | np.ndarray) -> np.ndarray:
        if isinstance(values, np.ndarray):
            if values.ndim != 1:
                raise TypeError("Batch inserts require a 1D array.")
            if values.dtype.kind in "fiu":
                return np.array(values, dtype=np.float64)
        return np.array([self._coerce(value) for value in values], dtype=np.float64)

    def _is_absent(self, item: Any) -> bool:
        return bool(np.isnan(item))

    def _absent_mask(self, items: np.ndarray) -> np.ndarray:
        return np.isnan(items)

    def _external(self, item: Any) -> float | None:
        if np.isnan(item):
            return None
        return float(item)

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the live rows, NaN marking absence.

        The view shares memory with the series; hold the lock (see
        :meth:`locked`) while reading it if other threads may mutate the series.
        """
        view = self._buf[: self._size]
        view.flags.writeable = False
        return view

    def to_numpy(self, options: Options | None = None) -> np.ndarray:
        """Return an independent copy of the rows as a float array."""
        with self._read_guard(options):
            return self._buf[: self._size].copy()


__all__ = ["SeriesFloat64"]
