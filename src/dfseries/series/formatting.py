"""Textual rendering of series values."""

from collections.abc import Callable, Sequence
from typing import Any, TypeAlias

from tabulate import tabulate

ValueToStringFormatter: TypeAlias = Callable[[Any], str]

NIL_STRING = "NaN"
PREVIEW_THRESHOLD = 6


def default_value_formatter(value: Any) -> str:
    """Render absent values as ``NaN`` and everything else with ``str``."""
    if value is None:
        return NIL_STRING
    return str(value)


def preview_rows(count: int) -> list[int]:
    """Return the rows shown by the compact string form of a series."""
    if count > PREVIEW_THRESHOLD:
        return [0, 1, 2, count - 3, count - 2, count - 1]
    return list(range(count))


def compact_string(rendered: Sequence[str], count: int) -> str:
    """Join rendered preview values into the ``[ a b ... y z ]`` form."""
    out = "[ "
    for position, text in enumerate(rendered):
        if count > PREVIEW_THRESHOLD and position == 3:
            out += "... "
        out += text + " "
    return out + "]"


def render_table(
    name: str,
    type_name: str,
    nrows: int,
    rows: Sequence[tuple[int, str]],
    *,
    tablefmt: str = "grid",
) -> str:
    """Render indexed values as a two-column table with a shape footer."""
    body = [[f"{row}:", text] for row, text in rows]
    body.append([f"{nrows}x1", type_name])
    return tabulate(
        body,
        headers=["", name],
        tablefmt=tablefmt,
        colalign=("center", "center"),
        disable_numparse=True,
    )


__all__ = [
    "NIL_STRING",
    "ValueToStringFormatter",
    "compact_string",
    "default_value_formatter",
    "preview_rows",
    "render_table",
]
