"""Command line interface for rendering and running query definitions."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import click
import yaml

from ..builder import QueryBuilder
from ..config import Config, create_datasource, load_config
from ..definition import DefinitionError, load_query_definition
from ..executor import ProblemsPersistingError, QueryExecutor
from ..utils.logging import setup_logging


class ResultPrinter:
    """Formats result rows as a text table."""

    def __init__(self, emit):
        self.emit = emit

    def display(self, rows: List[Dict[str, Any]], elapsed_ms: float) -> None:
        if rows:
            headers = list(rows[0].keys())
            values = [[row[header] for header in headers] for row in rows]
            for line in self._format_table(headers, values):
                self.emit(line)
        self.emit(f"{len(rows)} rows in {elapsed_ms:.2f} ms")

    def _format_table(self, headers: List[str], rows: List[List[object]]) -> List[str]:
        cells = [[self._stringify_cell(value) for value in row] for row in rows]
        widths = [len(header) for header in headers]
        for row in cells:
            for index, text in enumerate(row):
                widths[index] = max(widths[index], len(text))

        border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"
        lines = [border, self._format_row(headers, widths), border]
        for row in cells:
            lines.append(self._format_row(row, widths))
        lines.append(border)
        return lines

    def _format_row(self, values: List[str], widths: List[int]) -> str:
        padded = [f" {value.ljust(width)} " for value, width in zip(values, widths)]
        return "|" + "|".join(padded) + "|"

    def _stringify_cell(self, value: object) -> str:
        if value is None:
            return "NULL"
        return str(value)


def _build_query(query_file: str) -> QueryBuilder:
    definition = load_query_definition(query_file)
    return definition.build()


def _select_datasource_config(config: Config, name: Optional[str]):
    if name:
        if name not in config.datasources:
            raise click.UsageError(f"Unknown data source: {name}")
        return config.datasources[name]
    if len(config.datasources) != 1:
        raise click.UsageError(
            "Config defines several data sources; choose one with --datasource"
        )
    return next(iter(config.datasources.values()))


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Override the logging level (DEBUG, INFO, WARNING, ERROR).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """Assemble parameterized SQL from YAML query definitions."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument(
    "query_file", type=click.Path(exists=True, dir_okay=False, readable=True)
)
@click.pass_context
def render(ctx: click.Context, query_file: str) -> None:
    """Print the SQL and positional parameters of a query definition."""
    setup_logging(level=ctx.obj.get("log_level") or "WARNING")
    try:
        builder = _build_query(query_file)
    except (DefinitionError, yaml.YAMLError) as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)
    click.echo(builder.sql)
    for position, value in builder.params.items():
        click.echo(f"?{position} = {value!r}")


@cli.command()
@click.argument(
    "query_file", type=click.Path(exists=True, dir_okay=False, readable=True)
)
@click.option(
    "-c",
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file with the data sources.",
)
@click.option("-d", "--datasource", "datasource_name", help="Data source to query.")
@click.pass_context
def run(
    ctx: click.Context,
    query_file: str,
    config_path: str,
    datasource_name: Optional[str],
) -> None:
    """Execute a query definition and print the result rows."""
    try:
        config = load_config(config_path)
    except (ValueError, yaml.YAMLError) as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)
    setup_logging(
        level=ctx.obj.get("log_level") or config.logging.level,
        structured=config.logging.structured,
        log_file=config.logging.log_file,
    )
    ds_config = _select_datasource_config(config, datasource_name)

    try:
        builder = _build_query(query_file)
    except (DefinitionError, yaml.YAMLError) as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)

    try:
        datasource = create_datasource(ds_config)
    except ValueError as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)
    printer = ResultPrinter(click.echo)
    start = time.perf_counter()
    try:
        with datasource:
            executor = QueryExecutor(datasource, config.executor)
            rows = builder.do_query(executor, row_type=dict)
    except (ProblemsPersistingError, ConnectionError) as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)
    elapsed_ms = (time.perf_counter() - start) * 1000
    printer.display(rows, elapsed_ms)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
