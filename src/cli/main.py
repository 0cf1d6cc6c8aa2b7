"""Command line entry point for the dfseries toolkit."""

from __future__ import annotations

import json
from collections.abc import Sequence

import click
import marshmallow as ma
import structlog

from dfseries.errors import SeriesError
from dfseries.forecast import simple_exponential_smoothing
from dfseries.logging import configure_logging
from dfseries.range import Range
from dfseries.series import (
    Options,
    RangeSchema,
    Series,
    SeriesFloat64,
    SeriesInt64,
    snapshot,
)

LOG_FORMAT_CHOICES = ("console", "json")
LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")
OUTPUT_FORMAT_CHOICES = ("table", "json", "string")
DTYPE_CHOICES = ("float64", "int64")
SORT_CHOICES = ("none", "asc", "desc")
NIL_TOKENS = frozenset({"", "nan", "na", "nil", "null", "none"})

START_HELP = "First row of the range (negative values count from the end)."
END_HELP = "Last row of the range, inclusive (negative values count from the end)."

logger = structlog.get_logger(__name__)

SERIES_TYPES: dict[str, type[Series]] = {
    "float64": SeriesFloat64,
    "int64": SeriesInt64,
}


def _parse_token(token: str, dtype: str) -> float | int | None:
    """Parse one command line value, mapping nil spellings to ``None``."""
    cleaned = token.strip()
    if cleaned.lower() in NIL_TOKENS:
        return None
    try:
        return float(cleaned) if dtype == "float64" else int(cleaned)
    except ValueError as exc:
        raise click.BadParameter(f"{token!r} is not a valid {dtype} value.") from exc


def _build_series(name: str, tokens: Sequence[str], dtype: str) -> Series:
    """Create a series of ``dtype`` from raw command line values."""
    values = [_parse_token(token, dtype) for token in tokens]
    series = SERIES_TYPES[dtype](name)
    series.insert(0, values)
    logger.debug("cli.series_built", name=name, dtype=dtype, nrows=series.nrows())
    return series


def _load_range(start: int | None, end: int | None) -> Range:
    """Validate range bounds through the marshmallow schema."""
    try:
        return RangeSchema().load({"start": start, "end": end})
    except ma.ValidationError as exc:
        raise click.BadParameter(str(exc.messages)) from exc


def _render(series: Series, output_format: str) -> str:
    """Render a series in the requested output format."""
    if output_format == "json":
        return json.dumps(snapshot(series), indent=2)
    if output_format == "string":
        return series.string()
    return series.table()


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    envvar="DFSERIES_LOG_LEVEL",
    default="warning",
    show_default=True,
    help="Verbosity for structured logs.",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMAT_CHOICES, case_sensitive=False),
    envvar="DFSERIES_LOG_FORMAT",
    default="console",
    show_default=True,
    help="Render logs as console-friendly text or JSON.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_format: str) -> None:
    """Build, edit, and forecast typed series from the command line."""
    configure_logging(level=log_level, json_output=log_format.lower() == "json")
    ctx.ensure_object(dict)
    ctx.obj.update({"log_level": log_level.lower(), "log_format": log_format.lower()})
    logger.bind(command_group="dfseries").debug(
        "cli.initialized",
        log_level=log_level.lower(),
        log_format=log_format.lower(),
    )


@cli.command("show")
@click.argument("values", nargs=-1, required=True)
@click.option("--name", default="values", show_default=True, help="Series name.")
@click.option(
    "--dtype",
    type=click.Choice(DTYPE_CHOICES, case_sensitive=False),
    default="float64",
    show_default=True,
    help="Storage type of the series.",
)
@click.option(
    "--sort",
    "sort_order",
    type=click.Choice(SORT_CHOICES, case_sensitive=False),
    default="none",
    show_default=True,
    help="Sort the series before rendering; nil values always come first.",
)
@click.option("--start", type=int, default=None, help=START_HELP)
@click.option("--end", type=int, default=None, help=END_HELP)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMAT_CHOICES, case_sensitive=False),
    default="table",
    show_default=True,
    help="Output representation.",
)
def show(
    *,
    values: tuple[str, ...],
    name: str,
    dtype: str,
    sort_order: str,
    start: int | None,
    end: int | None,
    output_format: str,
) -> None:
    """Render VALUES as a series (use 'nan' or 'null' for missing values)."""
    dtype = dtype.lower()
    sort_order = sort_order.lower()
    cmd_log = logger.bind(command="show", dtype=dtype, sort=sort_order)
    cmd_log.info("command.start", values=len(values))

    series = _build_series(name, values, dtype)
    r = _load_range(start, end)
    try:
        if sort_order != "none":
            series.sort(Options(sort_desc=sort_order == "desc"))
        if start is not None or end is not None:
            series = series.copy(r)
        click.echo(_render(series, output_format.lower()))
    except SeriesError as exc:
        raise click.ClickException(str(exc)) from exc
    cmd_log.info("command.completed", nrows=series.nrows(), nil_count=series.nil_count())


@cli.command("forecast")
@click.argument("values", nargs=-1, required=True)
@click.option(
    "--alpha",
    type=float,
    envvar="DFSERIES_ALPHA",
    default=0.5,
    show_default=True,
    help="Smoothing coefficient in [0, 1].",
)
@click.option(
    "--horizon",
    "-m",
    type=int,
    envvar="DFSERIES_HORIZON",
    default=1,
    show_default=True,
    help="Number of periods to forecast.",
)
@click.option("--start", type=int, default=None, help=START_HELP)
@click.option("--end", type=int, default=None, help=END_HELP)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMAT_CHOICES, case_sensitive=False),
    default="table",
    show_default=True,
    help="Output representation.",
)
def forecast(
    *,
    values: tuple[str, ...],
    alpha: float,
    horizon: int,
    start: int | None,
    end: int | None,
    output_format: str,
) -> None:
    """Forecast future periods of VALUES with simple exponential smoothing."""
    cmd_log = logger.bind(command="forecast", alpha=alpha, horizon=horizon)
    cmd_log.info("command.start", values=len(values))

    history = _build_series("history", values, "float64")
    r = _load_range(start, end)
    try:
        result = simple_exponential_smoothing(history, alpha, horizon, r)
    except SeriesError as exc:
        cmd_log.warning("forecast.failed", error=str(exc), error_type=type(exc).__name__)
        raise click.ClickException(str(exc)) from exc

    click.echo(_render(result, output_format.lower()))
    cmd_log.info("command.completed", forecast=result.to_list())


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":  # pragma: no cover
    main()
