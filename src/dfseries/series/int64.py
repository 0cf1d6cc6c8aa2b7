"""Integer series storing absence as an empty (``None``) slot."""

from collections.abc import Sequence
from typing import Any

import numpy as np

from .base import Series

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class SeriesInt64(Series):
    """Series of 64-bit integers where each slot is either a value or ``None``.

    Integers have no spare bit pattern to mark absence, so values are boxed
    in an object array and ``None`` is a first-class state. Accepted inputs are
    ``None``, integers, and anything whose ``str`` form parses as an integer;
    other values raise ``TypeError`` and out-of-range integers ``OverflowError``.
    """

    type_name = "int64"
    dtype = object

    def _allocate(self, capacity: int) -> np.ndarray:
        return np.full(capacity, None, dtype=object)

    def _coerce(self, value: Any) -> int | None:
        if value is None:
            return None
        if isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_)):
            item = int(value)
        else:
            try:
                item = int(str(value))
            except ValueError as exc:
                raise TypeError(f"Cannot coerce {value!r} to int64") from exc
        if not INT64_MIN <= item <= INT64_MAX:
            raise OverflowError(f"{item} does not fit in int64")
        return item

    def _coerce_batch(self, values: Sequence[Any] | np.ndarray) -> np.ndarray:
        if isinstance(values, np.ndarray):
            if values.ndim != 1:
                raise TypeError("Batch inserts require a 1D array.")
            values = values.tolist()
        block = self._allocate(len(values))
        for idx, value in enumerate(values):
            block[idx] = self._coerce(value)
        return block

    def _is_absent(self, item: Any) -> bool:
        return item is None

    def _absent_mask(self, items: np.ndarray) -> np.ndarray:
        return np.fromiter((item is None for item in items), dtype=bool, count=len(items))

    def _external(self, item: Any) -> int | None:
        return item


__all__ = ["SeriesInt64", "INT64_MIN", "INT64_MAX"]
