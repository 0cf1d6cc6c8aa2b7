"""Exponential smoothing forecasts over float series."""

import threading

import structlog

from ..errors import (
    ForecastCancelledError,
    InsufficientDataError,
    InvalidAlphaError,
    InvalidHorizonError,
)
from ..range import Range
from ..series import Options, SeriesFloat64

logger = structlog.get_logger(__name__)


def _check_cancelled(cancel: threading.Event | None) -> None:
    """Abort when the caller has requested cancellation."""
    if cancel is not None and cancel.is_set():
        raise ForecastCancelledError("forecast cancelled")


def simple_exponential_smoothing(
    series: SeriesFloat64,
    alpha: float,
    m: int,
    r: Range | None = None,
    *,
    cancel: threading.Event | None = None,
    options: Options | None = None,
) -> SeriesFloat64:
    """Forecast ``m`` periods past the rows of ``series`` covered by ``r``.

    The level starts at the first observation, ``S0 = x[start]``, and is
    updated as ``St = alpha * xt + (1 - alpha) * St-1`` across the window. Each
    forecast step applies the same recursion with the last observation held
    fixed, ``St+1 = alpha * x[end] + (1 - alpha) * St``.

    ``cancel`` is polled before every historical and forecast step; once it is
    set the computation stops with :class:`ForecastCancelledError`. Values are
    snapshotted under the series' read lock unless ``options`` says the caller
    already holds it.

    See https://www.itl.nist.gov/div898/handbook/pmc/section4/pmc431.htm
    """
    values = series.to_numpy(options)
    start, end = (r or Range()).limits(len(values))

    if end - start < 1:
        raise InsufficientDataError("at least two observations are required in the range")
    if m <= 0:
        raise InvalidHorizonError("m must be greater than 0")
    if not 0.0 <= alpha <= 1.0:
        raise InvalidAlphaError("alpha must be between [0,1]")

    log = logger.bind(series=series.name(options), alpha=alpha, horizon=m)
    log.debug("forecast.ses_start", start=start, end=end)

    try:
        level = 0.0
        for i in range(start, end + 1):
            _check_cancelled(cancel)
            xt = float(values[i])
            level = xt if i == start else alpha * xt + (1 - alpha) * level

        last = float(values[end])
        forecast: list[float] = []
        for _ in range(m):
            _check_cancelled(cancel)
            level = alpha * last + (1 - alpha) * level
            forecast.append(level)
    except ForecastCancelledError:
        log.info("forecast.ses_cancelled")
        raise

    log.debug("forecast.ses_complete", values=len(forecast))
    return SeriesFloat64("forecast", *forecast)


__all__ = ["simple_exponential_smoothing"]
