"""Typed, lock-guarded series with explicit absence tracking."""

from .base import Series
from .float64 import SeriesFloat64
from .formatting import ValueToStringFormatter, default_value_formatter
from .int64 import SeriesInt64
from .locking import RWLock
from .options import DONT_LOCK, Options, SeriesInit
from .schema import RangeSchema, SeriesSnapshotSchema, snapshot

__all__ = [
    "DONT_LOCK",
    "Options",
    "RWLock",
    "RangeSchema",
    "Series",
    "SeriesFloat64",
    "SeriesInit",
    "SeriesInt64",
    "SeriesSnapshotSchema",
    "ValueToStringFormatter",
    "default_value_formatter",
    "snapshot",
]
