"""Programmatic entrypoints for rendering, checking and saving.

This module is the boundary between the CLI and the headless pipeline. It
wires the parser, the evaluation session and the renderers together and
follows one convention for the rendering run: failures are logged and the
function returns ``False`` instead of raising.

Examples
--------
>>> from ggworkshop.pipeline.renderer.runner import configure_logging, run_from_config
>>> configure_logging(log_level="INFO", enable_file=False)
>>> run_from_config(output_format="markdown")  # doctest: +SKIP
True
"""

from __future__ import annotations

import logging
from pathlib import Path

from ggworkshop.config import (
    DECK_TEMPLATE_PATH,
    DEFAULT_DECK_PATH,
    DEFAULT_HTML_OUTPUT,
    DEFAULT_MARKDOWN_OUTPUT,
    FIGURES_SUBDIR,
    FORMAT_ALIASES,
    LOG_DIR,
    LOG_FILENAME,
    LOG_FORMAT,
)
from ggworkshop.exceptions import (
    CellEvaluationError,
    CellNotFoundError,
    UnsupportedFormatError,
)
from ggworkshop.pipeline.deck import Deck, load_deck
from ggworkshop.pipeline.evaluator import (
    CellResult,
    EvaluationSession,
    is_plot,
    save_plot,
)

from .html import generate_deck_html
from .markdown import generate_deck_markdown

logger = logging.getLogger(__name__)


def configure_logging(log_level: str = "INFO", enable_file: bool = True) -> None:
    """Configure root logging with a console handler and an optional file handler.

    Parameters
    ----------
    log_level : str, optional
        Logging level name (e.g., ``"INFO"``, ``"DEBUG"``).
    enable_file : bool, optional
        Also append to ``LOG_DIR / LOG_FILENAME``. A log directory that
        cannot be created leaves console logging only.

    Notes
    -----
    Existing root handlers are removed first, so repeated calls are safe.
    """
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(0, logging.FileHandler(LOG_DIR / LOG_FILENAME, mode="a"))
        except OSError:
            pass
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def resolve_output_format(deck: Deck, override: str | None = None) -> str:
    """Map the requested or declared format directive to ``html`` or ``markdown``.

    Raises
    ------
    UnsupportedFormatError
        If the directive is not one of ``FORMAT_ALIASES``.
    """
    directive = (override or deck.metadata.format).strip().lower()
    if directive not in FORMAT_ALIASES:
        raise UnsupportedFormatError(
            f"Unsupported deck format '{directive}'",
            context={"supported": sorted(FORMAT_ALIASES)},
        )
    return FORMAT_ALIASES[directive]


def write_output(content: str, output_file: Path) -> None:
    """Write rendered content as UTF-8, creating parent directories.

    Raises
    ------
    OSError
        If the file cannot be written.
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(content, encoding="utf-8")


def render_deck(
    deck: Deck,
    output_file: Path,
    output_format: str,
    *,
    strict: bool = False,
) -> list[CellResult]:
    """Evaluate a parsed deck and write it in ``output_format``.

    Returns
    -------
    list[CellResult]
        Evaluation results of the run.

    Raises
    ------
    CellEvaluationError
        If ``strict`` and any cell fails.
    """
    session = EvaluationSession(output_dir=output_file.parent)
    results = session.run_deck(deck, stop_on_error=strict)
    if output_format == "markdown":
        figures_dir = output_file.parent / FIGURES_SUBDIR
        content = generate_deck_markdown(deck, results, figures_dir, FIGURES_SUBDIR)
    else:
        content = generate_deck_html(deck, results, DECK_TEMPLATE_PATH)
    write_output(content, output_file)
    logger.info("Wrote %s deck to %s", output_format, output_file)
    return results


def run_from_config(
    deck_path: Path | None = None,
    output_file: Path | None = None,
    output_format: str | None = None,
    strict: bool = False,
) -> bool:
    """Render a deck using the given paths or the configured defaults.

    Parameters
    ----------
    deck_path : Path | None, optional
        Deck document; defaults to ``DEFAULT_DECK_PATH``.
    output_file : Path | None, optional
        Destination; defaults to ``DEFAULT_HTML_OUTPUT`` or
        ``DEFAULT_MARKDOWN_OUTPUT`` depending on the format.
    output_format : str | None, optional
        Overrides the deck's format directive.
    strict : bool, optional
        Treat any failing cell as a failed run.

    Returns
    -------
    bool
        ``True`` when the output was written, ``False`` on any failure
        (the exception is logged).
    """
    deck_path = Path(deck_path) if deck_path is not None else DEFAULT_DECK_PATH
    try:
        deck = load_deck(deck_path)
        fmt = resolve_output_format(deck, output_format)
        if output_file is None:
            output_file = DEFAULT_MARKDOWN_OUTPUT if fmt == "markdown" else DEFAULT_HTML_OUTPUT
        render_deck(deck, Path(output_file), fmt, strict=strict)
        return True
    except Exception as exc:
        logger.exception("Failed to render deck %s: %s", deck_path, exc)
        return False


def check_deck(
    deck_path: Path | None = None, output_dir: Path | None = None
) -> list[CellResult]:
    """Evaluate every cell of a deck and return the failing results.

    ``output_dir`` receives any files the cells save themselves.

    Raises
    ------
    FileNotFoundError
        If the deck does not exist.
    DeckParseError
        If the deck is malformed.
    """
    deck = load_deck(Path(deck_path) if deck_path is not None else DEFAULT_DECK_PATH)
    session = EvaluationSession(output_dir=output_dir)
    results = session.run_deck(deck)
    failures = [result for result in results if not result.ok]
    for failure in failures:
        logger.error("Cell %s failed: %s", failure.location, failure.error)
    return failures


def save_labelled_plot(
    label: str,
    output_file: Path,
    deck_path: Path | None = None,
    *,
    width: float | None = None,
    height: float | None = None,
    dpi: int | None = None,
) -> Path:
    """Evaluate a deck up to a labelled cell and save that cell's plot.

    Cells before the labelled one run first so the namespace matches what
    the audience saw at that point of the workshop.

    Raises
    ------
    CellNotFoundError
        If no cell carries ``label``.
    CellEvaluationError
        If a cell fails on the way or the labelled cell has no plot.
    UnsupportedFormatError
        If the output extension is not a supported image format.
    """
    deck = load_deck(Path(deck_path) if deck_path is not None else DEFAULT_DECK_PATH)
    if deck.find_cell(label) is None:
        raise CellNotFoundError(
            f"No cell labelled '{label}'", context={"labels": deck.labels()}
        )
    session = EvaluationSession(output_dir=Path(output_file).parent)
    session.run_deck(deck, stop_on_error=True, until_label=label)
    if not is_plot(session.last_value):
        raise CellEvaluationError(
            f"Cell '{label}' does not produce a plot", context={"label": label}
        )
    return save_plot(session.last_value, output_file, width=width, height=height, dpi=dpi)
