"""
Command-line interface for spatialeval.

Provides commands for evaluating the spatial coherence of a labeling,
comparing predictions with a ground truth, and listing metrics.
"""

import json
import logging
import sys
from pathlib import Path

import click

from spatialeval import __version__


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _render(result, format: str) -> str:
    if format == "json":
        return result.to_json()
    elif format == "csv":
        return result.to_csv()
    elif format == "markdown":
        return result.to_table(format="markdown", max_rows=None)
    else:  # table
        return result.to_table(format="simple")


def _emit(result, format: str, output: str | None) -> None:
    output_str = _render(result, format)

    # Print warnings to stderr
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)

    if output:
        Path(output).write_text(output_str)
        click.echo(f"Results written to {output}")
    else:
        click.echo(output_str)


_format_option = click.option(
    "--format",
    "-F",
    type=click.Choice(["table", "json", "csv", "markdown"]),
    default="table",
    help="Output format",
)
_output_option = click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path (prints to stdout if not specified)",
)
_coords_option = click.option(
    "--coord-cols",
    "-c",
    default=None,
    help="Comma-separated coordinate column names (auto-detected if not specified)",
)
_backend_option = click.option(
    "--backend",
    "-b",
    type=click.Choice(["exact", "approximate"]),
    default=None,
    help="Nearest-neighbor search backend (chosen by dataset size if not specified)",
)


@click.group()
@click.version_option(version=__version__, prog_name="spatialeval")
@click.option("--verbose", "-v", count=True, help="Log progress (-v info, -vv debug)")
def cli(verbose):
    """spatialeval: Spatial Clustering Evaluation.

    Score the spatial coherence of spot labelings (PAS, CHAOS, ELSA, fuzzy
    indices) and compare predicted domains with a ground truth.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True))
@click.option(
    "--label-col",
    "-l",
    default=None,
    help="Column name for spot labels (auto-detected if not specified)",
)
@_coords_option
@click.option(
    "--level",
    "-L",
    type=click.Choice(["element", "class", "dataset"]),
    default="dataset",
    help="Granularity of the reported scores",
)
@click.option("--metrics", "-m", default=None, help="Comma-separated metric names")
@click.option("--k", "-k", "k", type=int, default=6, help="Spatial neighborhood size")
@_backend_option
@_format_option
@_output_option
def internal(csv_path, label_col, coord_cols, level, metrics, k, backend, format, output):
    """Score the spatial coherence of a labeling.

    CSV_PATH: Path to the CSV file with one row per spot.

    Examples:

        spatialeval internal spots.csv

        spatialeval internal spots.csv --level class --metrics PAS,CHAOS

        spatialeval internal spots.csv -L element -k 10 --format csv -o spots_scores.csv
    """
    from spatialeval.core.evaluator import evaluate as _evaluate

    try:
        result = _evaluate(
            csv_path,
            level=level,
            metrics=_split(metrics),
            k=k,
            label_col=label_col,
            coord_cols=_split(coord_cols),
            backend=backend,
        )
        _emit(result, format, output)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True))
@click.option("--true-col", "-t", default=None, help="Column name for ground-truth labels")
@click.option("--pred-col", "-p", default=None, help="Column name for predicted labels")
@_coords_option
@click.option(
    "--level",
    "-L",
    type=click.Choice(["element", "dataset"]),
    default="dataset",
    help="Granularity of the reported scores",
)
@click.option("--metrics", "-m", default=None, help="Comma-separated metric names")
@click.option("--k", "-k", "k", type=int, default=5, help="Spatial neighborhood size")
@click.option(
    "--no-pairs", is_flag=True, help="SpotAgreement over spots (class/cluster overlap)"
)
@click.option(
    "--negatives", is_flag=True, help="SpotAgreement also credits consistently separated pairs"
)
@_backend_option
@_format_option
@_output_option
def external(
    csv_path,
    true_col,
    pred_col,
    coord_cols,
    level,
    metrics,
    k,
    no_pairs,
    negatives,
    backend,
    format,
    output,
):
    """Compare predicted labels with the ground truth.

    CSV_PATH: Path to the CSV file holding both labelings and the coordinates.

    Examples:

        spatialeval external spots.csv --true-col label --pred-col p1

        spatialeval external spots.csv -t label -p p1 --level element --format json
    """
    from spatialeval.core.evaluator import evaluate_external as _evaluate_external

    try:
        result = _evaluate_external(
            csv_path,
            level=level,
            metrics=_split(metrics),
            k=k,
            true_col=true_col,
            pred_col=pred_col,
            coord_cols=_split(coord_cols),
            backend=backend,
            use_pairs=not no_pairs,
            use_negatives=negatives,
        )
        _emit(result, format, output)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.group()
def list():
    """List available metrics or levels."""
    pass


@list.command("metrics")
@click.option(
    "--format", "-F", type=click.Choice(["table", "json"]), default="table", help="Output format"
)
def list_metrics(format):
    """List all available spatial metrics.

    Examples:

        spatialeval list metrics

        spatialeval list metrics --format json
    """
    from spatialeval import list_metrics as _list_metrics
    from spatialeval.core.reference import get_direction_symbol

    df = _list_metrics(include_reference=True)

    if format == "json":
        click.echo(json.dumps(df.to_dict("records"), indent=2))
    else:
        click.echo(
            f"{'Metric':<17} {'Range':<12} {'Direction':<10} {'Kind':<9} {'Levels':<24}"
        )
        click.echo("-" * 76)
        for row in df.itertuples(index=False):
            click.echo(
                f"{row.metric:<17} {row.range:<12} {get_direction_symbol(row.direction):<10} "
                f"{row.kind:<9} {row.levels:<24}"
            )
        click.echo(f"\nTotal: {len(df)} metrics")


@list.command("levels")
def list_levels():
    """List which metrics are available at each level.

    Examples:

        spatialeval list levels
    """
    from spatialeval.core.reference import (
        EXTERNAL_CAPABILITIES,
        INTERNAL_CAPABILITIES,
        Level,
    )

    for level in Level:
        internal = [m.value for m, levels in INTERNAL_CAPABILITIES.items() if level in levels]
        external = [m.value for m, levels in EXTERNAL_CAPABILITIES.items() if level in levels]
        click.echo(f"{level.value}:")
        click.echo(f"  internal: {', '.join(internal) or '-'}")
        click.echo(f"  external: {', '.join(external) or '-'}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
