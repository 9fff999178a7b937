"""Data model for a parsed workshop deck.

A deck is front-matter metadata plus an ordered list of slides. Each slide
holds narrative Markdown cells and executable code cells in document order,
and optionally speaker notes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ggworkshop.config import DEFAULT_DECK_FORMAT, UNTITLED_DECK


@dataclass
class DeckMetadata:
    """Front-matter fields of a deck.

    ``format`` is the rendering-format directive; unrecognised front-matter
    keys are kept in ``extra``.
    """

    title: str = UNTITLED_DECK
    subtitle: str = ""
    author: str = ""
    date: str = ""
    format: str = DEFAULT_DECK_FORMAT
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_front_matter(cls, data: dict[str, Any]) -> DeckMetadata:
        """Build metadata from a parsed front-matter mapping.

        A ``format`` given as a mapping (``format: {revealjs: {...}}``) uses
        its first key as the directive.
        """
        known = {"title", "subtitle", "author", "date", "format"}
        fmt = data.get("format", DEFAULT_DECK_FORMAT)
        if isinstance(fmt, dict):
            fmt = next(iter(fmt), DEFAULT_DECK_FORMAT)
        author = data.get("author", "")
        if isinstance(author, list):
            author = ", ".join(str(a) for a in author)
        return cls(
            title=str(data.get("title") or UNTITLED_DECK),
            subtitle=str(data.get("subtitle") or ""),
            author=str(author or ""),
            date=str(data.get("date") or ""),
            format=str(fmt or DEFAULT_DECK_FORMAT),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class MarkdownCell:
    """Narrative text of a slide."""

    text: str


@dataclass
class CodeCell:
    """Executable example with its ``#|`` options removed from ``source``."""

    source: str
    options: dict[str, Any] = field(default_factory=dict)
    line: int = 0

    @property
    def label(self) -> str | None:
        """Cell label from the ``label`` option, or ``None``."""
        value = self.options.get("label")
        return str(value) if value is not None else None

    @property
    def datasets(self) -> list[str]:
        """Names given by the ``dataset`` option, as a list."""
        value = self.options.get("dataset")
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [part.strip() for part in str(value).split(",") if part.strip()]

    @property
    def evaluate(self) -> bool:
        """Whether the cell runs (``eval`` option, default true)."""
        return bool(self.options.get("eval", True))

    @property
    def echo(self) -> bool:
        """Whether the code is shown (``echo`` option, default true)."""
        return bool(self.options.get("echo", True))

    @property
    def fig_width(self) -> float | None:
        """Figure width in inches from ``fig-width``."""
        value = self.options.get("fig-width")
        return float(value) if value is not None else None

    @property
    def fig_height(self) -> float | None:
        """Figure height in inches from ``fig-height``."""
        value = self.options.get("fig-height")
        return float(value) if value is not None else None

    @property
    def caption(self) -> str:
        """Figure caption from ``fig-cap``, empty when unset."""
        return str(self.options.get("fig-cap") or "")


Cell = MarkdownCell | CodeCell


@dataclass
class Slide:
    """One slide.

    ``level`` is 1 for a section title slide (``#``), 2 for a content slide
    (``##``) and 0 for an untitled slide opened by a ``---`` rule.
    ``section`` is the title of the enclosing level-1 slide.
    """

    title: str = ""
    level: int = 0
    cells: list[Cell] = field(default_factory=list)
    notes: str = ""
    section: str = ""

    @property
    def code_cells(self) -> list[CodeCell]:
        """Code cells of the slide in document order."""
        return [cell for cell in self.cells if isinstance(cell, CodeCell)]

    def is_empty(self) -> bool:
        """True when the slide has no title, cells or notes."""
        return not self.title and not self.cells and not self.notes


@dataclass
class Deck:
    """A parsed deck document."""

    metadata: DeckMetadata
    slides: list[Slide]
    source_path: Path | None = None

    def code_cells(self) -> Iterator[tuple[int, int, CodeCell]]:
        """Yield ``(slide_index, cell_index, cell)`` for every code cell in order.

        ``cell_index`` counts code cells within the slide.
        """
        for slide_index, slide in enumerate(self.slides):
            for cell_index, cell in enumerate(slide.code_cells):
                yield slide_index, cell_index, cell

    def find_cell(self, label: str) -> tuple[int, int, CodeCell] | None:
        """Return the position and cell carrying ``label``, if any."""
        for position in self.code_cells():
            if position[2].label == label:
                return position
        return None

    def labels(self) -> list[str]:
        """Labels of all labelled code cells in document order."""
        return [cell.label for _, _, cell in self.code_cells() if cell.label]
