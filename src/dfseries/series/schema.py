"""Marshmallow schemas for range input and series snapshots."""

from typing import Any

import marshmallow as ma

from ..range import Range
from .base import Series


class RangeSchema(ma.Schema):
    """Marshmallow schema for loading :class:`~dfseries.range.Range` bounds."""

    start = ma.fields.Int(required=False, allow_none=True, load_default=None)
    end = ma.fields.Int(required=False, allow_none=True, load_default=None)

    @ma.post_load
    def make_range(self, data: dict[str, Any], **kwargs: object) -> Range:
        """Instantiate :class:`Range` from validated bounds."""
        return Range(**data)


class SeriesSnapshotSchema(ma.Schema):
    """Marshmallow schema dumping a point-in-time view of a series."""

    name = ma.fields.Str(required=True)
    type = ma.fields.Str(required=True)
    nrows = ma.fields.Int(required=True)
    nil_count = ma.fields.Int(required=True)
    values = ma.fields.List(ma.fields.Raw(allow_none=True), required=True)


def snapshot(series: Series) -> dict[str, Any]:
    """Capture name, shape, and values of ``series`` under a single lock hold."""
    with series.locked() as opts:
        payload = {
            "name": series.name(opts),
            "type": series.type_name,
            "nrows": series.nrows(opts),
            "nil_count": series.nil_count(opts),
            "values": series.to_list(opts),
        }
    return SeriesSnapshotSchema().dump(payload)


__all__ = ["RangeSchema", "SeriesSnapshotSchema", "snapshot"]
