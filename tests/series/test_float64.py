"""Unit tests for the NaN-sentinel float series."""

import math
import random

import numpy as np
import pytest

from dfseries.errors import InvalidRangeError
from dfseries.range import Range
from dfseries.series import SeriesFloat64, SeriesInit
from tests.conftest import assert_nil_invariant


def test_construction_counts_absent_values(float_series):
    """Test that initial values are stored and absences counted."""
    assert float_series.name() == "prices"
    assert float_series.type_name == "float64"
    assert float_series.nrows() == 3
    assert float_series.nil_count() == 1
    assert float_series.to_list() == [1.5, None, 3.0]


def test_construction_presized_fills_absent():
    """Rows beyond the initial values are absent and counted."""
    series = SeriesFloat64("x", 1.0, init=SeriesInit(size=3))
    assert series.to_list() == [1.0, None, None]
    assert series.nil_count() == 2
    assert series.capacity == 3


def test_construction_values_beyond_size():
    """Initial values longer than the pre-size are appended."""
    series = SeriesFloat64("x", 1.0, 2.0, 3.0, init=SeriesInit(size=1))
    assert series.to_list() == [1.0, 2.0, 3.0]
    assert series.nil_count() == 0


def test_construction_reserves_capacity():
    """A capacity hint reserves room without creating rows."""
    series = SeriesFloat64("x", init=SeriesInit(capacity=10))
    assert series.nrows() == 0
    assert series.capacity == 10


def test_series_init_rejects_negative_size():
    """Size hints must be non-negative."""
    with pytest.raises(ValueError, match="non-negative"):
        SeriesInit(size=-1)


def test_append_returns_row():
    """Appending returns the row the value was written to."""
    series = SeriesFloat64("x")
    assert series.append(1.5) == 0
    assert series.append(None) == 1
    assert series.value(0) == 1.5
    assert series.value(1) is None
    assert series.nil_count() == 1


@pytest.mark.parametrize(
    "raw, expected",
    [
        (2, 2.0),
        ("3.5", 3.5),
        (np.float32(0.5), 0.5),
        (np.int64(7), 7.0),
        (math.nan, None),
        ("nan", None),
        (None, None),
    ],
)
def test_append_coerces_values(raw, expected):
    """Test that values are normalized to float or absence."""
    series = SeriesFloat64("x")
    row = series.append(raw)
    assert series.value(row) == expected
    assert_nil_invariant(series)


@pytest.mark.parametrize("raw", ["abc", True, object(), [1.0, [2.0]]])
def test_uncoercible_values_raise_type_error(raw):
    """Values that cannot be parsed are a fatal TypeError and leave the series untouched."""
    series = SeriesFloat64("x", 1.0)
    with pytest.raises(TypeError):
        series.append(raw)
    assert series.to_list() == [1.0]
    assert series.nil_count() == 0


@pytest.mark.parametrize("row", [3, -1, 100])
def test_value_out_of_range(float_series, row):
    """Reading outside [0, nrows) raises IndexError."""
    with pytest.raises(IndexError):
        float_series.value(row)


def test_value_string_uses_formatter(float_series):
    """Absent values render as NaN by default."""
    assert float_series.value_string(0) == "1.5"
    assert float_series.value_string(1) == "NaN"


def test_prepend_shifts_in_place_with_spare_capacity():
    """Prepending reuses the buffer when it has trailing room."""
    series = SeriesFloat64("x", 1.0, 2.0, init=SeriesInit(capacity=4))
    buffer = series._buf
    series.prepend(0.0)
    series.prepend(None)
    assert series._buf is buffer
    assert series.capacity == 4
    assert series.to_list() == [None, 0.0, 1.0, 2.0]
    assert series.nil_count() == 1


def test_prepend_reallocates_when_full():
    """Prepending into a full buffer allocates a larger one."""
    series = SeriesFloat64("x", 1.0, 2.0, init=SeriesInit(size=2))
    buffer = series._buf
    series.prepend(0.5)
    assert series._buf is not buffer
    assert series.capacity > 2
    assert series.to_list() == [0.5, 1.0, 2.0]


def test_insert_scalar(float_series):
    """Inserting shifts the row and everything after it."""
    float_series.insert(1, 2.0)
    assert float_series.to_list() == [1.5, 2.0, None, 3.0]
    float_series.insert(float_series.nrows(), None)
    assert float_series.to_list() == [1.5, 2.0, None, 3.0, None]
    assert float_series.nil_count() == 2


def test_insert_batch_counts_absences():
    """A batch with one absence adds exactly three rows and one nil."""
    series = SeriesFloat64("x", 1.0, None, None)
    assert series.nil_count() == 2
    series.insert(1, [5.0, math.nan, 6.0])
    assert series.nrows() == 6
    assert series.nil_count() == 3
    assert series.to_list() == [1.0, 5.0, None, 6.0, None, None]


def test_insert_batch_of_optionals_and_arrays():
    """Batches may mix None with floats or arrive as NumPy arrays."""
    series = SeriesFloat64("x")
    series.insert(0, (1.0, None))
    series.insert(2, np.array([np.nan, 4.0]))
    series.insert(0, np.array([7, 8]))
    assert series.to_list() == [7.0, 8.0, 1.0, None, None, 4.0]
    assert_nil_invariant(series)


def test_insert_batch_copies_input():
    """Mutating the inserted array does not reach into the series."""
    source = np.array([1.0, 2.0])
    series = SeriesFloat64("x")
    series.insert(0, source)
    source[0] = 99.0
    assert series.value(0) == 1.0


def test_insert_empty_batch_is_noop(float_series):
    """An empty batch leaves the series unchanged."""
    float_series.insert(0, [])
    assert float_series.to_list() == [1.5, None, 3.0]


def test_insert_rejects_2d_array():
    """Only one-dimensional arrays are accepted as batches."""
    series = SeriesFloat64("x")
    with pytest.raises(TypeError):
        series.insert(0, np.zeros((2, 2)))


@pytest.mark.parametrize("row", [-1, 4])
def test_insert_out_of_range(float_series, row):
    """Inserts accept rows in [0, nrows] only."""
    with pytest.raises(IndexError):
        float_series.insert(row, 1.0)


def test_remove(float_series):
    """Removing an absent row decrements the nil count."""
    float_series.remove(1)
    assert float_series.to_list() == [1.5, 3.0]
    assert float_series.nil_count() == 0
    float_series.remove(0)
    assert float_series.to_list() == [3.0]
    with pytest.raises(IndexError):
        float_series.remove(1)


@pytest.mark.parametrize(
    "row, value, expected_nil",
    [
        (1, 2.0, 0),
        (0, None, 2),
        (0, 4.0, 1),
        (1, None, 1),
    ],
)
def test_update_reconciles_nil_count(float_series, row, value, expected_nil):
    """Test every absent/present transition of an update."""
    float_series.update(row, value)
    assert float_series.value(row) == value
    assert float_series.nil_count() == expected_nil


def test_swap(float_series):
    """Swapping exchanges two rows."""
    float_series.swap(0, 2)
    assert float_series.to_list() == [3.0, None, 1.5]
    with pytest.raises(IndexError):
        float_series.swap(0, 3)


def test_swap_same_row_skips_lock(float_series):
    """Swapping a row with itself returns without touching the lock."""
    float_series.lock()
    try:
        float_series.swap(1, 1)
    finally:
        float_series.unlock()
    assert float_series.to_list() == [1.5, None, 3.0]


def test_copy_is_independent(float_series):
    """A full copy matches the source and does not share storage."""
    clone = float_series.copy()
    assert clone.name() == float_series.name()
    assert clone.to_list() == float_series.to_list()
    assert clone.nil_count() == float_series.nil_count()

    clone.update(1, 9.0)
    clone.append(None)
    clone.rename("other")
    assert float_series.to_list() == [1.5, None, 3.0]
    assert float_series.name() == "prices"
    assert_nil_invariant(clone)


def test_copy_range_recounts_nils(float_series):
    """A ranged copy only counts the absences it contains."""
    clone = float_series.copy(Range(start=2))
    assert clone.to_list() == [3.0]
    assert clone.nil_count() == 0


def test_copy_keeps_formatter(float_series):
    """The copy renders values with the source's formatter."""
    float_series.set_value_to_string_formatter(lambda v: "-" if v is None else f"{v:.2f}")
    clone = float_series.copy()
    assert clone.value_string(0) == "1.50"
    assert clone.value_string(1) == "-"


def test_copy_empty_series():
    """Copying an empty series never resolves the range."""
    empty = SeriesFloat64("empty")
    clone = empty.copy(Range(start=3, end=1))
    assert clone.nrows() == 0
    assert clone.name() == "empty"


def test_copy_invalid_range(float_series):
    """An unresolvable range is a recoverable error."""
    with pytest.raises(InvalidRangeError):
        float_series.copy(Range(end=10))


def test_values_view_is_read_only(float_series):
    """The exported view reflects the rows and cannot be written."""
    view = float_series.values
    assert view.shape == (3,)
    assert np.isnan(view[1])
    with pytest.raises(ValueError):
        view[0] = 5.0


def test_to_numpy_returns_copy(float_series):
    """to_numpy hands back an independent array."""
    arr = float_series.to_numpy()
    arr[0] = 42.0
    assert float_series.value(0) == 1.5


def test_rename_and_repr(float_series):
    """Renaming changes the label only."""
    float_series.rename("renamed")
    assert float_series.name() == "renamed"
    assert repr(float_series) == "SeriesFloat64(name='renamed', nrows=3)"
    assert len(float_series) == 3


def test_nil_invariant_under_random_edits():
    """The cached nil count always matches the stored absences."""
    rng = random.Random(1234)
    series = SeriesFloat64("random", init=SeriesInit(size=3))
    for _ in range(500):
        value = None if rng.random() < 0.3 else rng.uniform(-10, 10)
        rows = series.nrows()
        op = rng.choice(["append", "prepend", "insert", "batch", "remove", "update", "swap"])
        if op == "append":
            series.append(value)
        elif op == "prepend":
            series.prepend(value)
        elif op == "insert":
            series.insert(rng.randint(0, rows), value)
        elif op == "batch":
            batch = [None if rng.random() < 0.3 else float(i) for i in range(rng.randint(0, 4))]
            series.insert(rng.randint(0, rows), batch)
        elif op == "remove" and rows:
            series.remove(rng.randrange(rows))
        elif op == "update" and rows:
            series.update(rng.randrange(rows), value)
        elif op == "swap" and rows:
            series.swap(rng.randrange(rows), rng.randrange(rows))
        assert_nil_invariant(series)
