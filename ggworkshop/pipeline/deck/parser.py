"""Parse workshop deck documents.

Decks are Quarto-style Markdown files:

- optional YAML front matter between two ``---`` lines at the top;
- ``#`` headings open section title slides, ``##`` headings open content
  slides and a bare ``---`` rule opens an untitled slide;
- fenced ```` ```{python} ```` blocks are executable cells whose leading
  ``#| key: value`` lines are cell options (YAML);
- ``::: {.notes}`` ... ``:::`` blocks hold speaker notes.

Headings and rules inside any code fence are ordinary text. The parser only
splits the document; it never executes code.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from ggworkshop.exceptions import DeckParseError

from .models import CodeCell, Deck, DeckMetadata, MarkdownCell, Slide

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^(#{1,2})\s+(.+?)(?:\s+#+)?\s*$")
_RULE = re.compile(r"^-{3,}\s*$")
_FENCE = re.compile(r"^(`{3,}|~{3,})\s*(.*)$")
_PYTHON_FENCE_INFO = re.compile(r"^\{\s*python\b[^}]*\}$")
_NOTES_OPEN = re.compile(r"^:{3,}\s*\{\s*\.notes\s*\}\s*$")
_DIV_CLOSE = re.compile(r"^:{3,}\s*$")
_OPTION_LINE = re.compile(r"^#\|\s?(.*)$")


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Separate YAML front matter from the deck body.

    Parameters
    ----------
    text : str
        Full deck document.

    Returns
    -------
    tuple[dict[str, Any], str]
        Parsed front matter (empty when absent) and the remaining body.

    Raises
    ------
    DeckParseError
        If the front matter is not valid YAML, is not a mapping, or is never
        closed.

    Examples
    --------
    >>> meta, body = split_front_matter("---\\ntitle: Hi\\n---\\n## A\\n")
    >>> meta["title"], body
    ('Hi', '## A\\n')
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != "---":
        return {}, text
    for index in range(1, len(lines)):
        if lines[index].strip() in ("---", "..."):
            raw = "".join(lines[1:index])
            try:
                data = yaml.safe_load(raw) if raw.strip() else {}
            except yaml.YAMLError as exc:
                raise DeckParseError(
                    f"Invalid front matter: {exc}", context={"line": 1}
                ) from exc
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise DeckParseError(
                    "Front matter must be a mapping",
                    context={"type": type(data).__name__},
                )
            return data, "".join(lines[index + 1 :])
    raise DeckParseError("Front matter is not closed", context={"line": 1})


def parse_cell_options(source: str, *, line: int = 0) -> tuple[dict[str, Any], str]:
    """Split leading ``#|`` option lines off a code cell.

    Parameters
    ----------
    source : str
        Raw code between the fences.
    line : int, optional
        Line number of the opening fence, used in error context.

    Returns
    -------
    tuple[dict[str, Any], str]
        Options mapping and the code with option lines removed.

    Raises
    ------
    DeckParseError
        If the option lines are not valid YAML mappings.
    """
    lines = source.splitlines()
    option_lines: list[str] = []
    position = 0
    while position < len(lines):
        match = _OPTION_LINE.match(lines[position])
        if not match:
            break
        option_lines.append(match.group(1))
        position += 1
    code = "\n".join(lines[position:]).strip("\n")
    if not option_lines:
        return {}, code
    try:
        options = yaml.safe_load("\n".join(option_lines))
    except yaml.YAMLError as exc:
        raise DeckParseError(
            f"Invalid cell options: {exc}", context={"line": line}
        ) from exc
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise DeckParseError("Cell options must be key: value pairs", context={"line": line})
    return options, code


class _SlideBuilder:
    """Accumulates lines into the current slide while scanning a deck body."""

    def __init__(self) -> None:
        self.slides: list[Slide] = []
        self.current = Slide()
        self.section = ""
        self._text: list[str] = []
        self._notes: list[str] = []

    def add_text(self, line: str) -> None:
        self._text.append(line)

    def add_note(self, line: str) -> None:
        self._notes.append(line)

    def flush_text(self) -> None:
        text = "".join(self._text).strip("\n")
        if text.strip():
            self.current.cells.append(MarkdownCell(text=text))
        self._text = []

    def add_code(self, cell: CodeCell) -> None:
        self.flush_text()
        self.current.cells.append(cell)

    def start_slide(self, title: str, level: int) -> None:
        self.finish_slide()
        if level == 1:
            self.section = title
        self.current = Slide(title=title, level=level, section=self.section)

    def finish_slide(self) -> None:
        self.flush_text()
        self.current.notes = "".join(self._notes).strip("\n")
        self._notes = []
        if not self.current.is_empty():
            self.slides.append(self.current)


def parse_deck(text: str, source_path: Path | None = None) -> Deck:
    """Parse a deck document into metadata and slides.

    Parameters
    ----------
    text : str
        Full deck document including front matter.
    source_path : Path | None, optional
        Where the text came from; kept on the returned deck.

    Returns
    -------
    Deck
        Parsed deck.

    Raises
    ------
    DeckParseError
        For invalid front matter or cell options, an unterminated code fence
        or notes block, or duplicated cell labels.
    """
    front_matter, body = split_front_matter(text)
    body_offset = text[: len(text) - len(body)].count("\n")
    metadata = DeckMetadata.from_front_matter(front_matter)
    builder = _SlideBuilder()

    fence: str | None = None
    fence_is_python = False
    fence_line = 0
    fence_lines: list[str] = []
    in_notes = False

    for number, line in enumerate(body.splitlines(keepends=True), start=body_offset + 1):
        stripped = line.rstrip("\n").rstrip()
        if fence is not None:
            if stripped.strip().startswith(fence) and stripped.strip().strip(fence[0]) == "":
                if fence_is_python:
                    options, code = parse_cell_options("".join(fence_lines), line=fence_line)
                    builder.add_code(CodeCell(source=code, options=options, line=fence_line))
                else:
                    target = builder.add_note if in_notes else builder.add_text
                    target("".join(fence_lines) + line)
                fence = None
                fence_lines = []
                continue
            fence_lines.append(line)
            continue

        fence_match = _FENCE.match(stripped.strip())
        if fence_match:
            fence = fence_match.group(1)
            fence_is_python = bool(_PYTHON_FENCE_INFO.match(fence_match.group(2).strip()))
            fence_line = number
            fence_lines = [] if fence_is_python else [line]
            if fence_is_python and in_notes:
                raise DeckParseError(
                    "Code cells are not allowed in speaker notes",
                    context={"line": number},
                )
            continue

        if in_notes:
            if _DIV_CLOSE.match(stripped):
                in_notes = False
            else:
                builder.add_note(line)
            continue

        if _NOTES_OPEN.match(stripped):
            in_notes = True
            continue

        heading = _HEADING.match(stripped)
        if heading:
            builder.start_slide(heading.group(2), len(heading.group(1)))
            continue

        if _RULE.match(stripped):
            builder.start_slide("", 0)
            continue

        builder.add_text(line)

    if fence is not None:
        raise DeckParseError("Unterminated code fence", context={"line": fence_line})
    if in_notes:
        raise DeckParseError("Unterminated speaker notes block")
    builder.finish_slide()

    deck = Deck(metadata=metadata, slides=builder.slides, source_path=source_path)
    seen: set[str] = set()
    for _, _, cell in deck.code_cells():
        label = cell.label
        if label is None:
            continue
        if label in seen:
            raise DeckParseError(
                f"Duplicate cell label '{label}'", context={"line": cell.line}
            )
        seen.add(label)
    logger.debug(
        "Parsed deck '%s': %d slides, %d labelled cells",
        metadata.title,
        len(deck.slides),
        len(seen),
    )
    return deck


def load_deck(path: Path) -> Deck:
    """Read and parse a deck file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    DeckParseError
        If the document is malformed.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        text = fh.read()
    return parse_deck(text, source_path=path)
