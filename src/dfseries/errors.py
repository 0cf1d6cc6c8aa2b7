"""Recoverable error types raised by series and forecasting routines.

Only conditions a caller is expected to validate or handle live here. Usage
bugs such as indexing a row outside the series or passing a value that cannot
be coerced are reported with the builtin ``IndexError`` and ``TypeError``.
"""


class SeriesError(Exception):
    """Base class for recoverable series errors."""


class RangeError(SeriesError):
    """A :class:`~dfseries.range.Range` could not be resolved."""


class EmptyRangeError(RangeError):
    """The range was resolved against a series without rows."""

    def __init__(self, message: str = "limit undefined") -> None:
        super().__init__(message)


class InvalidRangeError(RangeError):
    """The resolved bounds fall outside the series or are inverted."""

    def __init__(self, start: int, end: int, length: int) -> None:
        self.start = start
        self.end = end
        self.length = length
        super().__init__(f"invalid range: start={start} end={end} for {length} rows")


class ForecastError(SeriesError):
    """Base class for forecasting failures."""


class InsufficientDataError(ForecastError):
    """The historical window holds fewer than two observations."""


class InvalidHorizonError(ForecastError):
    """The forecast horizon is not a positive number of steps."""


class InvalidAlphaError(ForecastError):
    """The smoothing coefficient lies outside ``[0, 1]``."""


class ForecastCancelledError(ForecastError):
    """The computation observed a cancellation request and stopped."""


__all__ = [
    "SeriesError",
    "RangeError",
    "EmptyRangeError",
    "InvalidRangeError",
    "ForecastError",
    "InsufficientDataError",
    "InvalidHorizonError",
    "InvalidAlphaError",
    "ForecastCancelledError",
]
