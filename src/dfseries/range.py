"""Row range value object shared by range-scoped series operations."""

from attrs import define, field

from .errors import EmptyRangeError, InvalidRangeError


def _optional_int(value: int | None) -> int | None:
    """Normalize integer-like bounds while keeping ``None`` as "unbounded"."""
    if value is None:
        return None
    return int(value)


@define(slots=True, frozen=True)
class Range:
    """Inclusive row interval resolved lazily against a row count.

    A missing ``start`` means the first row and a missing ``end`` the last row,
    so ``Range()`` covers the whole series. Negative bounds count back from the
    end of the series, ``-1`` being the last row.
    """

    start: int | None = field(default=None, converter=_optional_int)
    end: int | None = field(default=None, converter=_optional_int)

    def limits(self, length: int) -> tuple[int, int]:
        """Return the inclusive ``(start, end)`` rows for a series of ``length`` rows."""
        if length <= 0:
            raise EmptyRangeError()

        start = 0 if self.start is None else self.start
        end = length - 1 if self.end is None else self.end
        if start < 0:
            start += length
        if end < 0:
            end += length

        if start < 0 or end < 0 or start > end or start >= length or end >= length:
            raise InvalidRangeError(start, end, length)
        return start, end

    def nrows(self, length: int) -> int:
        """Return how many rows the range covers once resolved."""
        start, end = self.limits(length)
        return end - start + 1


__all__ = ["Range"]
