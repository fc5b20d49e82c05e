"""
Command-line interface for the state revenue pipeline.

Provides subcommands to build the output dataset, write the normalized
intermediate tables, and list the recognized states.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from state_revenue.config import DEFAULT_CONFIG_PATH, load_config
from state_revenue.errors import PipelineError
from state_revenue.pipeline import normalize_sources, run_pipeline, write_normalized
from state_revenue.roster import all_states

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# -----------------------------------------------------------------------
# Subcommand: build
# -----------------------------------------------------------------------


def cmd_build(args: argparse.Namespace) -> None:
    """Run the full pipeline and write the JSON payload."""
    config = load_config(args.config)
    result = run_pipeline(config, output_path=args.output)
    payload = result.payload

    table = Table(
        title=f"Top {payload.top_n} States by Population - {payload.year}",
        box=box.ROUNDED,
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("State", style="bold")
    table.add_column("Population", justify="right")
    table.add_column("Total Revenue ($K)", justify="right")
    table.add_column("Per Capita ($K)", justify="right")

    for rank, s in enumerate(payload.states, start=1):
        table.add_row(
            str(rank),
            s.state,
            f"{s.population:,}",
            f"{s.total_revenue:,.0f}",
            f"{s.per_capita_total:,.2f}",
        )

    console.print(table)
    console.print(
        Panel(
            f"[bold]Tax types:[/bold] {', '.join(t.key for t in payload.tax_types) or 'None'}\n"
            f"[bold]Tax rows:[/bold] {len(result.sources.tax_rows)}\n"
            f"[bold]Population rows:[/bold] {len(result.sources.population_rows)}\n"
            f"[bold]Output:[/bold] {result.output_path}",
            title="Build Summary",
            border_style="green",
        )
    )


# -----------------------------------------------------------------------
# Subcommand: normalize
# -----------------------------------------------------------------------


def cmd_normalize(args: argparse.Namespace) -> None:
    """Normalize both sources and write the intermediate CSVs."""
    config = load_config(args.config)
    sources = normalize_sources(config)
    tax_path, population_path = write_normalized(config, sources)

    console.print(
        f"[green]Normalized tax rows: {len(sources.tax_rows)} -> {tax_path}[/green]"
    )
    console.print(
        f"[green]Normalized population rows: "
        f"{len(sources.population_rows)} -> {population_path}[/green]"
    )


# -----------------------------------------------------------------------
# Subcommand: states
# -----------------------------------------------------------------------


def cmd_states(args: argparse.Namespace) -> None:
    """List the recognized states."""
    table = Table(title="Recognized States", box=box.SIMPLE)
    table.add_column("State")
    for name in all_states():
        table.add_row(name)
    console.print(table)


# -----------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="state-revenue",
        description="State Tax Revenue Pipeline - Normalize Census tax and population extracts into a per-state revenue dataset",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log row-level detail"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build_p = subparsers.add_parser("build", help="Build the output dataset")
    build_p.add_argument(
        "--config", "-c", default=str(DEFAULT_CONFIG_PATH), help="Config JSON path"
    )
    build_p.add_argument("--output", "-o", help="Override output.json from the config")
    build_p.set_defaults(func=cmd_build)

    norm_p = subparsers.add_parser(
        "normalize", help="Write normalized tax and population CSVs"
    )
    norm_p.add_argument(
        "--config", "-c", default=str(DEFAULT_CONFIG_PATH), help="Config JSON path"
    )
    norm_p.set_defaults(func=cmd_normalize)

    states_p = subparsers.add_parser("states", help="List recognized states")
    states_p.set_defaults(func=cmd_states)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    _configure_logging(args.verbose)

    try:
        args.func(args)
    except PipelineError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
