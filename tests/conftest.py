"""Global test configuration and fixtures."""

import pytest
import structlog

from dfseries.series import Series, SeriesFloat64, SeriesInt64


def absent_slots(series: Series) -> int:
    """Count absent rows by inspecting every value rather than the cached count."""
    return sum(value is None for value in series.to_list())


def assert_nil_invariant(series: Series) -> None:
    """Check the cached nil count against the stored values."""
    assert series.nil_count() == absent_slots(series)
    assert series.contains_nil() == (absent_slots(series) > 0)


@pytest.fixture
def float_series() -> SeriesFloat64:
    """Return a float series with one absent row."""
    return SeriesFloat64("prices", 1.5, None, 3.0)


@pytest.fixture
def int_series() -> SeriesInt64:
    """Return an integer series with one absent row."""
    return SeriesInt64("counts", 1, None, 3)


@pytest.fixture(params=[SeriesFloat64, SeriesInt64], ids=["float64", "int64"])
def series_type(request) -> type[Series]:
    """Parametrize a test over both series variants."""
    return request.param


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()
