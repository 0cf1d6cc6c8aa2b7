"""Per-call options and construction hints for series."""

from attrs import define, field


@define(slots=True, frozen=True)
class Options:
    """Modify the behaviour of a single series call.

    ``dont_lock`` tells the series that the caller already holds its lock (see
    :meth:`Series.locked`) so the call must not acquire it again. ``sort_desc``
    is only read by :meth:`Series.sort`.
    """

    dont_lock: bool = False
    sort_desc: bool = False


def _non_negative(value: int) -> int:
    """Coerce a size hint into a non-negative integer."""
    value = int(value)
    if value < 0:
        raise ValueError("Series size hints must be non-negative.")
    return value


@define(slots=True, frozen=True)
class SeriesInit:
    """Pre-size and pre-allocate a series at construction time.

    ``size`` rows exist immediately (absent unless initial values cover them)
    and ``capacity`` reserves trailing room for later growth. A capacity below
    the size is raised to the size.
    """

    size: int = field(default=0, converter=_non_negative)
    capacity: int = field(default=0, converter=_non_negative)

    @property
    def effective_capacity(self) -> int:
        """Return the capacity actually reserved for the buffer."""
        return max(self.size, self.capacity)


DONT_LOCK = Options(dont_lock=True)

__all__ = ["Options", "SeriesInit", "DONT_LOCK"]
