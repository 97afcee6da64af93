"""CLI entrypoint for gridsift using Typer."""

import os
from pathlib import Path

import typer

from gridsift.cli_config import CLIConfig
from gridsift.cli_ui import console, make_table, print_preview, print_section
from gridsift.config import GuessSettings
from gridsift.constants import DEFAULT_MAX_CLUSTER_VALUES, EXIT_GENERAL_ERROR, EXIT_SUCCESS
from gridsift.context import AppContext, map_exception_to_exit_code
from gridsift.logging import configure_logging_json, run_context
from gridsift.models import ClusterOutcome
from gridsift.utils.io import read_table
from gridsift.utils.profiling import profile_section, profile_summary

app = typer.Typer(
    name="gridsift",
    help="gridsift - guess column formats and list the values of delimited text files",
)


def _emit_error(message: str) -> None:
    typer.secho(message, fg="red", err=True)


def _load(path: Path, ctx: AppContext):
    try:
        df = read_table(path)
    except Exception as exc:
        _emit_error(f"Error loading file: {exc}")
        raise typer.Exit(code=map_exception_to_exit_code(exc)) from exc

    if len(df.columns) == 0:
        _emit_error("Failed to load file or file is empty.")
        raise typer.Exit(code=EXIT_GENERAL_ERROR)

    if ctx.verbose:
        print_preview(df)
    return df


@app.command()
def guess(
    path: str = typer.Argument(..., help="Delimited text file: .csv (default), .tsv or .txt"),
    column: list[str] | None = typer.Option(
        None, "--column", "-c", help="Column to guess; repeat for several (default: all)"
    ),
    config: str | None = typer.Option(None, "--config", help="YAML file with guess settings"),
    recipe: str | None = typer.Option(None, "--recipe", help="Recipe YAML with guess settings"),
    min_samples: int | None = typer.Option(
        None, "--min-samples", help="Distinct values needed before numbers or dates are accepted"
    ),
    serial_dates: bool | None = typer.Option(
        None, "--serial-dates/--no-serial-dates", help="Detect spreadsheet serial dates"
    ),
    guid: bool | None = typer.Option(None, "--guid/--no-guid", help="Detect GUID values"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show a preview and details"),
    quiet: bool = typer.Option(False, "--quiet", help="Print column<TAB>format lines only"),
    silent: bool = typer.Option(
        False, "--silent", help="No stdout output (errors still to stderr)"
    ),
    profile: bool = typer.Option(False, "--profile", help="Print step timings"),
):
    """Guess the format of each column."""
    from gridsift.inference.columns import guess_columns
    from gridsift.source import DataFrameRowSource

    cli_args = {
        "path": path,
        "columns": column or None,
        "min_samples": min_samples,
        "serial_date_time": serial_dates,
        "detect_guid": guid,
        "verbose": verbose or None,
        "quiet": quiet or None,
        "silent": silent or None,
        "profile": profile or None,
    }
    try:
        cfg = CLIConfig.from_sources(
            cli_args, config_path=config, environ=os.environ, recipe_path=recipe
        )
        settings = cfg.to_guess_settings()
    except Exception as exc:
        _emit_error(str(exc))
        raise typer.Exit(code=map_exception_to_exit_code(exc)) from exc

    ctx = AppContext.create(
        quiet=cfg.quiet, silent=cfg.silent, verbose=cfg.verbose, settings=settings
    )
    configure_logging_json(level=ctx.log_level)

    timings: dict[str, float] | None = {} if settings.profile else None
    with run_context(command="guess", input=str(cfg.path)):
        with profile_section("read_file", timings):
            df = _load(cfg.path, ctx)

        source = DataFrameRowSource(df)
        try:
            settings.columns = [
                source.get_name(source.get_ordinal(name)) for name in settings.columns
            ]
            guesses = guess_columns(source, settings, profile=timings)
        except Exception as exc:
            _emit_error(str(exc))
            raise typer.Exit(code=map_exception_to_exit_code(exc)) from exc

    if ctx.mode == "silent":
        raise typer.Exit(code=EXIT_SUCCESS)

    if ctx.mode == "quiet":
        for item in guesses:
            found = item.result.found_format if item.result else None
            typer.echo(f"{item.column.name}\t{found.description() if found else ''}")
        raise typer.Exit(code=EXIT_SUCCESS)

    print_section("Format guess", level="main", verbose=ctx.verbose)
    table = make_table("Column", "Format", "Possible match", "Not matching")
    for item in guesses:
        result = item.result
        if result is None:
            table.add_row(item.column.name, "", "", "")
            continue
        table.add_row(
            item.column.name,
            result.found_format.description() if result.found_format else "",
            result.possible_match.description() if result.possible_match else "",
            ", ".join(result.non_matching_examples),
        )
    console.print(table)

    if ctx.verbose:
        print_section("Details", verbose=ctx.verbose)
        for item in guesses:
            console.print(item.message)

    if timings is not None:
        summary = profile_summary(timings)
        console.print(f"[dim]Total:[/dim] {summary['total_ms']} ms")
        for step, ms in summary["steps"].items():
            console.print(f"[dim]{step}:[/dim] {ms} ms")

    raise typer.Exit(code=EXIT_SUCCESS)


@app.command()
def clusters(
    path: str = typer.Argument(..., help="Delimited text file: .csv (default), .tsv or .txt"),
    column: str = typer.Option(..., "--column", "-c", help="Column to list the values of"),
    where: str | None = typer.Option(
        None, "--where", help="Row filter applied first, e.g. \"[Country] = 'DE'\""
    ),
    max_values: int = typer.Option(
        DEFAULT_MAX_CLUSTER_VALUES, "--max-values", min=1, help="Largest number of values to list"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show the filter condition of each value"
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Print value<TAB>count lines only"),
    silent: bool = typer.Option(
        False, "--silent", help="No stdout output (errors still to stderr)"
    ),
):
    """List the distinct values of a column with their counts."""
    from gridsift.filtering.clusters import build_value_clusters
    from gridsift.filtering.view import DataView
    from gridsift.inference.columns import guess_columns
    from gridsift.source import DataFrameRowSource

    ctx = AppContext.create(quiet=quiet, silent=silent, verbose=verbose)
    configure_logging_json(level=ctx.log_level)
    with run_context(command="clusters", input=path, column=column):
        df = _load(Path(path), ctx)
        try:
            guesses = guess_columns(
                DataFrameRowSource(df), GuessSettings(ignore_id_columns=False)
            )
            columns = [
                item.column.with_value_format(item.result.found_format)
                for item in guesses
                if item.result is not None and item.result.found_format is not None
            ]
            view = DataView.from_frame(df, columns)
            if where:
                view.row_filter = where
            catalogue = build_value_clusters(view, column, max_distinct_values=max_values)
        except Exception as exc:
            _emit_error(str(exc))
            raise typer.Exit(code=map_exception_to_exit_code(exc)) from exc

    if catalogue.outcome == ClusterOutcome.ERROR:
        _emit_error(catalogue.message)
        raise typer.Exit(code=EXIT_GENERAL_ERROR)

    if ctx.mode == "silent":
        raise typer.Exit(code=EXIT_SUCCESS)

    if catalogue.outcome != ClusterOutcome.LIST_FILLED:
        typer.echo(catalogue.message)
        raise typer.Exit(code=EXIT_SUCCESS)

    if ctx.mode == "quiet":
        for cluster in catalogue:
            typer.echo(f"{cluster.display_text}\t{cluster.count}")
        raise typer.Exit(code=EXIT_SUCCESS)

    headers = ["Value", "Count"] + (["Condition"] if ctx.verbose else [])
    table = make_table(*headers)
    for cluster in catalogue:
        row = [cluster.display_text, f"{cluster.count:,}"]
        if ctx.verbose:
            row.append(cluster.condition)
        table.add_row(*row)
    console.print(table)
    console.print(
        f"[dim]Column:[/dim] {catalogue.column_name}"
        f"   [dim]Type:[/dim] {catalogue.value_type.display}"
        f"   [dim]Rows shown:[/dim] {len(view):,} of {view.total_rows:,}"
    )
    raise typer.Exit(code=EXIT_SUCCESS)


if __name__ == "__main__":
    app()
