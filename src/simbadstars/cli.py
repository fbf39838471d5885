"""Command-line interface for simbadstars."""

import json
import logging
from pathlib import Path
from typing import Any, Callable

import click
import numpy as np
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from simbadstars.catalog import ImportOptions, SimbadError, import_stars
from simbadstars.config import PRECISIONS, Settings, load_settings
from simbadstars.models import ImportReport, OutcomeReason, OutcomeStatus, Star
from simbadstars.parsing import parse_coord, parse_coord4
from simbadstars.position import StellarPosition

DEFAULT_TABLE_ROWS = 50

console = Console()
err_console = Console(stderr=True)

_NOISY_EXTERNAL_LOGGERS = ("matplotlib", "PIL")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    for logger_name in _NOISY_EXTERNAL_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def _star_to_dict(star: Star) -> dict[str, Any]:
    x, y, z = (float(v) for v in star.position)
    return {
        "id": star.id,
        "name": star.name,
        "spectral_class": star.spectral_class,
        "constellation": star.constellation,
        "distance": star.distance,
        "position": [x, y, z],
    }


def print_report_json(report: ImportReport, *, show_skipped: bool) -> None:
    """Print the report as JSON on stdout: per-reason summary, stars, optionally dropped rows."""
    output: dict[str, Any] = {
        "summary": {reason.value: count for reason, count in report.counts().items()},
        "stars": [_star_to_dict(star) for star in report.stars],
    }
    if show_skipped:
        output["dropped"] = [
            {
                "index": o.index,
                "record_id": o.record_id,
                "status": o.status.value,
                "reason": o.reason.value,
                "detail": o.detail,
            }
            for o in report.outcomes
            if o.status is not OutcomeStatus.IMPORTED
        ]
    click.echo(json.dumps(output, indent=2, sort_keys=True))


def print_stars(stars: tuple[Star, ...], max_items: int | None = DEFAULT_TABLE_ROWS) -> None:
    """Print imported stars as a table, RA/Dec recovered from the Cartesian position."""
    table = Table(title=f"Stars ({len(stars)})", show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="magenta")
    table.add_column("Dist (ly)", justify="right")
    table.add_column("RA°", justify="right")
    table.add_column("Dec°", justify="right")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("z", justify="right")

    shown = stars if max_items is None else stars[:max_items]
    for star in shown:
        ra_deg, dec_deg = StellarPosition.from_cartesian(star.position).coord.to_degrees()
        x, y, z = (float(v) for v in star.position)
        table.add_row(
            str(star.id),
            star.name,
            star.spectral_class,
            f"{star.distance:.2f}",
            f"{ra_deg:.4f}",
            f"{dec_deg:+.4f}",
            f"{x:.3f}",
            f"{y:.3f}",
            f"{z:.3f}",
        )
    console.print(table)
    if len(shown) < len(stars):
        console.print(f"[dim]... {len(stars) - len(shown)} more (use --full-table)[/dim]")


def print_summary(report: ImportReport, *, show_skipped: bool) -> None:
    """Print per-status and per-reason counts, then each dropped row if asked."""
    summary = Table(title="Import Summary", show_header=False, box=None)
    summary.add_column(style="bold cyan", no_wrap=True)
    summary.add_column(style="white", no_wrap=True)

    counts = report.counts()
    summary.add_row("Rows", str(len(report.outcomes)))
    for status in OutcomeStatus:
        summary.add_row(status.value.capitalize(), str(len(report.by_status(status))))
        for reason in OutcomeReason:
            if reason.status is status and reason is not OutcomeReason.OK and counts[reason]:
                summary.add_row(f"  {reason.value}", str(counts[reason]))
    console.print(summary)

    if show_skipped:
        for outcome in report.outcomes:
            if outcome.status is OutcomeStatus.IMPORTED:
                continue
            label = "red" if outcome.status is OutcomeStatus.FAILED else "yellow"
            console.print(
                f"[{label}]row {outcome.index}[/{label}] "
                f"(#{outcome.record_id}) {outcome.reason.value} {outcome.detail}"
            )


def _resolve_options(
    settings: Settings,
    precision: str | None,
    strict: bool | None,
    name_fallback: bool | None,
) -> ImportOptions:
    """Apply command-line overrides on top of environment settings."""
    base = settings.import_options()
    return ImportOptions(
        dtype=PRECISIONS[precision] if precision is not None else base.dtype,
        strict_coordinates=base.strict_coordinates if strict is None else strict,
        name_fallback=base.name_fallback if name_fallback is None else name_fallback,
    )


def _resolve_catalog(settings: Settings, catalog: Path | None) -> Path:
    if catalog is not None:
        return catalog
    if settings.catalog_path is None:
        raise click.UsageError("no CATALOG given and SIMBADSTARS_CATALOG is not set")
    return settings.catalog_path


def _run_import(catalog: Path, options: ImportOptions) -> ImportReport:
    try:
        return import_stars(catalog, options)
    except SimbadError as e:
        err_console.print(f"[bold red]Import failed:[/bold red] {e}")
        raise click.exceptions.Exit(1) from e


def _import_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by commands that run an import."""
    func = click.option(
        "--name-fallback/--no-name-fallback",
        default=None,
        help="Use the identifier when 'pretty name' is empty",
    )(func)
    func = click.option(
        "--strict/--no-strict",
        default=None,
        help="Abort the whole import on a missing coordinate column",
    )(func)
    func = click.option(
        "--precision",
        type=click.Choice(sorted(PRECISIONS)),
        default=None,
        help="Floating-point precision of positions",
    )(func)
    func = click.argument(
        "catalog", required=False, type=click.Path(exists=True, path_type=Path)
    )(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="simbadstars", prog_name="simbadstars")
@click.option("-v", "--verbose", is_flag=True, help="Log every dropped row")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Convert SIMBAD catalog exports into Cartesian star positions."""
    load_dotenv()
    setup_logging(verbose)
    try:
        ctx.obj = load_settings()
    except ValueError as e:
        raise click.UsageError(str(e)) from e


@cli.command("import", help="Import a catalog and list the resolved stars")
@_import_options
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.option("--show-skipped", is_flag=True, help="List skipped and failed rows")
@click.option("--full-table", is_flag=True, help="Show all rows in the terminal table")
@click.pass_obj
def import_command(
    settings: Settings,
    catalog: Path | None,
    precision: str | None,
    strict: bool | None,
    name_fallback: bool | None,
    as_json: bool,
    show_skipped: bool,
    full_table: bool,
) -> None:
    options = _resolve_options(settings, precision, strict, name_fallback)
    report = _run_import(_resolve_catalog(settings, catalog), options)

    if as_json:
        print_report_json(report, show_skipped=show_skipped)
        return
    print_stars(report.stars, max_items=None if full_table else DEFAULT_TABLE_ROWS)
    print_summary(report, show_skipped=show_skipped)


@cli.command("chart", help="Render the imported stars to PNG or interactive HTML")
@_import_options
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=None, help="Output file"
)
@click.option("--html", "as_html", is_flag=True, help="Write an interactive Plotly page")
@click.pass_obj
def chart_command(
    settings: Settings,
    catalog: Path | None,
    precision: str | None,
    strict: bool | None,
    name_fallback: bool | None,
    output: Path | None,
    as_html: bool,
) -> None:
    options = _resolve_options(settings, precision, strict, name_fallback)
    report = _run_import(_resolve_catalog(settings, catalog), options)

    if as_html:
        from simbadstars.renderers.plotly_3d import render_plotly_chart

        path = output or settings.results_dir / f"stars__{len(report.stars)}.html"
        path.parent.mkdir(parents=True, exist_ok=True)
        render_plotly_chart(report.stars).write_html(path)
    else:
        from simbadstars.renderers.static import save_static_chart

        path = save_static_chart(
            report.stars, output_path=output, results_dir=settings.results_dir
        )
    console.print(f"Saved: {path}")


@cli.command("convert", help="Convert one coordinate string to Cartesian form")
@click.argument("coordinate")
@click.option("--distance", type=float, default=1.0, show_default=True)
@click.option("--decimal", is_flag=True, help="Input is 'RA DEC' in decimal degrees")
@click.option(
    "--precision", type=click.Choice(sorted(PRECISIONS)), default=None
)
@click.pass_obj
def convert_command(
    settings: Settings,
    coordinate: str,
    distance: float,
    decimal: bool,
    precision: str | None,
) -> None:
    dtype = PRECISIONS[precision] if precision is not None else settings.dtype
    parser = parse_coord4 if decimal else parse_coord
    coord = parser(coordinate, dtype=dtype)
    if coord is None:
        raise click.BadParameter(f"cannot parse {coordinate!r}", param_hint="COORDINATE")

    position = StellarPosition(distance=dtype(distance), coord=coord)
    vector = position.to_cartesian()
    click.echo(str(position))
    click.echo(np.array2string(vector, precision=6, floatmode="fixed"))


def main() -> None:
    cli(prog_name="simbadstars")
