"""Command-line interface for the workshop deck.

Usage
-----
gg-workshop outline                       # slides, sections and cell labels
gg-workshop datasets [NAME]               # example datasets, or one described
gg-workshop check                         # evaluate every cell, report failures
gg-workshop render [--format markdown]    # write the rendered deck
gg-workshop save fig-scatter --output scatter.png

The CLI only parses arguments, configures logging and prints results with
Rich; the work itself is done by ``ggworkshop.pipeline``. Exit status is 0 on
success, 1 when a check or render fails and 2 for user errors such as an
unknown dataset or cell label.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

# Rendering is always headless
os.environ.setdefault("MPLBACKEND", "Agg")

from rich.console import Console  # noqa: E402
from rich.markup import escape  # noqa: E402
from rich.table import Table  # noqa: E402

from ggworkshop.config import DEFAULT_DECK_PATH, DEFAULT_OUTPUT_DIR  # noqa: E402
from ggworkshop.exceptions import AppError  # noqa: E402
from ggworkshop.pipeline.datasets import (  # noqa: E402
    dataset_info,
    describe_dataset,
    list_datasets,
    load_dataset,
    tidy_violations,
)
from ggworkshop.pipeline.deck import load_deck  # noqa: E402
from ggworkshop.pipeline.renderer.runner import (  # noqa: E402
    check_deck,
    configure_logging,
    run_from_config,
    save_labelled_plot,
)

logger = logging.getLogger(__name__)
console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="gg-workshop",
        description="Grammar of graphics workshop deck tooling.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.environ.get("LOG_LEVEL", "WARNING"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    outline = commands.add_parser("outline", help="List slides and cell labels.")
    outline.add_argument("--deck", type=Path, default=DEFAULT_DECK_PATH)

    datasets = commands.add_parser("datasets", help="List or describe example datasets.")
    datasets.add_argument("name", nargs="?", help="Dataset to describe.")

    check = commands.add_parser("check", help="Evaluate every cell of the deck.")
    check.add_argument("--deck", type=Path, default=DEFAULT_DECK_PATH)
    check.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory for files saved by the cells.",
    )

    render = commands.add_parser("render", help="Render the deck to HTML or Markdown.")
    render.add_argument("--deck", type=Path, default=DEFAULT_DECK_PATH)
    render.add_argument("--output", type=Path, default=None)
    render.add_argument(
        "--format",
        dest="output_format",
        default=None,
        help="Override the deck's format directive (html, revealjs, markdown, gfm).",
    )
    render.add_argument(
        "--strict", action="store_true", help="Fail if any cell raises an error."
    )

    save = commands.add_parser("save", help="Save the plot of a labelled cell.")
    save.add_argument("label", help="Cell label, e.g. fig-scatter.")
    save.add_argument("--output", type=Path, required=True)
    save.add_argument("--deck", type=Path, default=DEFAULT_DECK_PATH)
    save.add_argument("--width", type=float, default=None)
    save.add_argument("--height", type=float, default=None)
    save.add_argument("--dpi", type=int, default=None)
    return parser


def _cmd_outline(args: argparse.Namespace) -> int:
    deck = load_deck(args.deck)
    table = Table(title=deck.metadata.title)
    table.add_column("#", justify="right")
    table.add_column("Section")
    table.add_column("Slide")
    table.add_column("Cells", justify="right")
    table.add_column("Labels")
    for index, slide in enumerate(deck.slides, start=1):
        labels = ", ".join(cell.label for cell in slide.code_cells if cell.label)
        table.add_row(
            str(index),
            slide.section,
            slide.title or "(untitled)",
            str(len(slide.code_cells)),
            labels,
        )
    console.print(table)
    return 0


def _cmd_datasets(args: argparse.Namespace) -> int:
    if args.name:
        info = dataset_info(args.name)
        table = Table(title=f"{info.name}: {info.n_rows} rows x {info.n_columns} columns")
        for column in ("column", "dtype", "non_null", "n_unique", "example"):
            table.add_column(column)
        for row in describe_dataset(info.name).itertuples(index=False):
            table.add_row(*(escape(str(value)) for value in row))
        console.print(table)
        console.print(info.description)
        findings = tidy_violations(load_dataset(info.name))
        if findings:
            for finding in findings:
                console.print(f"[yellow]untidy:[/yellow] {escape(finding)}")
        else:
            console.print("[green]No obvious tidy data violations.[/green]")
        return 0
    table = Table(title="Example datasets")
    table.add_column("Name")
    table.add_column("Rows", justify="right")
    table.add_column("Columns", justify="right")
    table.add_column("Description")
    for info in list_datasets():
        table.add_row(info.name, str(info.n_rows), str(info.n_columns), info.description)
    console.print(table)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    failures = check_deck(args.deck, output_dir=args.output_dir)
    if not failures:
        console.print("[green]All cells evaluated without errors.[/green]")
        return 0
    table = Table(title=f"{len(failures)} failing cell(s)")
    table.add_column("Cell")
    table.add_column("Error")
    for failure in failures:
        table.add_row(escape(failure.location), escape(failure.error or ""))
    console.print(table)
    return 1


def _cmd_render(args: argparse.Namespace) -> int:
    ok = run_from_config(
        deck_path=args.deck,
        output_file=args.output,
        output_format=args.output_format,
        strict=args.strict,
    )
    if ok:
        console.print("[green]Deck rendered.[/green]")
        return 0
    console.print("[red]Rendering failed; see the log for details.[/red]")
    return 1


def _cmd_save(args: argparse.Namespace) -> int:
    path = save_labelled_plot(
        args.label,
        args.output,
        deck_path=args.deck,
        width=args.width,
        height=args.height,
        dpi=args.dpi,
    )
    console.print(f"Saved [bold]{escape(args.label)}[/bold] to {escape(str(path))}")
    return 0


COMMANDS = {
    "outline": _cmd_outline,
    "datasets": _cmd_datasets,
    "check": _cmd_check,
    "render": _cmd_render,
    "save": _cmd_save,
}


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit status.

    Parameters
    ----------
    argv : list[str] | None
        Arguments to parse; ``None`` uses ``sys.argv``.

    Returns
    -------
    int
        0 on success, 1 for failed checks or renders, 2 for user errors.
    """
    args = build_parser().parse_args(argv)
    configure_logging(
        args.log_level, enable_file=not bool(os.environ.get("DISABLE_FILE_LOGS"))
    )
    try:
        return COMMANDS[args.command](args)
    except AppError as exc:
        logger.debug("Command %s failed: %s", args.command, exc.to_dict())
        console.print(f"[red]{escape(str(exc))}[/red]")
        return 2
    except FileNotFoundError as exc:
        console.print(f"[red]File not found: {escape(str(exc.filename))}[/red]")
        return 2
