"""Markdown handout rendering.

Writes the deck as one Markdown document for participants: every slide
becomes a heading, code cells become fenced Python blocks, plots are written
as PNG files into a figures directory and linked, and tables are inlined as
plain-text blocks.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import cast

from ggworkshop.pipeline.deck.models import CodeCell, Deck, MarkdownCell
from ggworkshop.pipeline.evaluator.session import CellResult

from .html import group_results

logger = logging.getLogger(__name__)


def figure_filename(result: CellResult, index: int) -> str:
    """Return a stable file name for the ``index``-th plot of a cell."""
    base = result.label or f"slide{result.slide_index + 1:02d}-cell{result.cell_index + 1}"
    base = re.sub(r"[^A-Za-z0-9_.-]+", "-", base).strip("-") or "figure"
    suffix = f"-{index + 1}" if index else ""
    return f"{base}{suffix}.png"


def _unique_filename(name: str, used: set[str]) -> str:
    """Return ``name``, numbered before the extension if already taken."""
    stem, suffix = name.rsplit(".", 1)
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{stem}_{counter}.{suffix}"
        counter += 1
    used.add(candidate)
    return candidate


def _render_code_cell(
    cell: CodeCell,
    result: CellResult | None,
    figures_dir: Path,
    link_base: str,
    used_names: set[str],
) -> list[str]:
    lines: list[str] = []
    if cell.echo:
        lines.extend(["```python", cell.source, "```", ""])
    if result is None:
        return lines
    if result.skipped:
        lines.extend(["*Not evaluated.*", ""])
        return lines
    if result.stdout:
        lines.extend(["```", result.stdout.rstrip("\n"), "```", ""])
    plot_index = 0
    for output in result.outputs:
        if output.kind == "plot":
            name = _unique_filename(figure_filename(result, plot_index), used_names)
            plot_index += 1
            (figures_dir / name).write_bytes(cast(bytes, output.data))
            alt = cell.caption or cell.label or "plot"
            lines.extend([f"![{alt}]({link_base}/{name})", ""])
        else:
            lines.extend(["```", output.text, "```", ""])
    if cell.caption and plot_index:
        lines.extend([f"*{cell.caption}*", ""])
    if result.error:
        lines.extend(["> **Error:** " + result.error.replace("\n", "\n> "), ""])
    return lines


def generate_deck_markdown(
    deck: Deck, results: list[CellResult], figures_dir: Path, link_base: str = "figures"
) -> str:
    """Render the deck as Markdown, writing plot images to ``figures_dir``.

    Parameters
    ----------
    deck : Deck
        Parsed deck.
    results : list[CellResult]
        Evaluation results for the deck's cells.
    figures_dir : Path
        Directory for the PNG files; created if missing.
    link_base : str, optional
        Path prefix used in image links, relative to the Markdown file.

    Returns
    -------
    str
        The handout text.
    """
    figures_dir.mkdir(parents=True, exist_ok=True)
    meta = deck.metadata
    lines: list[str] = [f"# {meta.title}", ""]
    byline = " · ".join(part for part in (meta.subtitle, meta.author, meta.date) if part)
    if byline:
        lines.extend([f"*{byline}*", ""])
    used_names: set[str] = set()
    for slide, slide_results in zip(deck.slides, group_results(deck, results)):
        if slide.title:
            marker = "##" if slide.level == 1 else "###"
            lines.extend([f"{marker} {slide.title}", ""])
        else:
            lines.extend(["---", ""])
        code_index = 0
        for cell in slide.cells:
            if isinstance(cell, MarkdownCell):
                lines.extend([cell.text, ""])
                continue
            result = slide_results[code_index] if code_index < len(slide_results) else None
            code_index += 1
            lines.extend(_render_code_cell(cell, result, figures_dir, link_base, used_names))
        if slide.notes:
            quoted = "\n".join(f"> {line}" if line else ">" for line in slide.notes.splitlines())
            lines.extend([quoted, ""])
    logger.debug("Rendered markdown handout with figures in %s", figures_dir)
    return "\n".join(lines).rstrip("\n") + "\n"
