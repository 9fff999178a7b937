"""HTML rendering for the workshop slide deck.

Turns a parsed deck and its evaluation results into one standalone HTML
file: narrative Markdown is converted with ``markdown2``, code is shown in
``<pre>`` blocks unless the cell sets ``echo: false``, plots are embedded as
base64 PNG images and cell errors appear in an error block on the slide
where they happened, so a presenter sees them in context.

Example
-------
>>> from ggworkshop.pipeline.renderer import html
>>> html.markdown_to_html("**tidy** data")
'<p><strong>tidy</strong> data</p>'
"""

from __future__ import annotations

import base64
import html as html_lib
import re
from pathlib import Path
from typing import cast

import markdown2

from ggworkshop.config import SKIPPED_CELL_HTML
from ggworkshop.pipeline.deck.models import CodeCell, Deck, MarkdownCell, Slide
from ggworkshop.pipeline.evaluator.session import CellOutput, CellResult

MARKDOWN_EXTRAS: list[str] = ["tables", "fenced-code-blocks"]


def clean_html_output(html_content: str) -> str:
    r"""Normalise HTML produced from Markdown.

    Removes empty paragraphs, collapses repeated line breaks and drops
    whitespace between tags.

    Raises
    ------
    TypeError
        If input is not str.

    Examples
    --------
    >>> clean_html_output("<p></p><h1>Hi</h1><p>&nbsp;</p><br><br>")
    '<h1>Hi</h1><br>'
    """
    if not isinstance(html_content, str):
        raise TypeError("Input must be a string.")
    html_content = re.sub(r"<p>\s*</p>", "", html_content)
    html_content = re.sub(r"<p>&nbsp;</p>", "", html_content)
    html_content = re.sub(r"<p><br\s*/?>\s*</p>", "", html_content)
    html_content = re.sub(r"(<br\s*/?>\s*){2,}", "<br>", html_content)
    html_content = re.sub(r"\n\s*\n\s*\n+", "\n\n", html_content)
    html_content = re.sub(r">\s+<", "><", html_content)
    return html_content.strip()


def markdown_to_html(text: str) -> str:
    """Convert narrative Markdown to cleaned HTML."""
    converted = cast(str, markdown2.markdown(text, extras=MARKDOWN_EXTRAS))
    return clean_html_output(converted)


def render_output_html(output: CellOutput, alt: str = "") -> str:
    """Render one cell output as an HTML fragment."""
    if output.kind == "plot":
        encoded = base64.b64encode(cast(bytes, output.data)).decode("ascii")
        return (
            f'<img class="plot" alt="{html_lib.escape(alt, quote=True)}" '
            f'src="data:image/png;base64,{encoded}">'
        )
    if output.kind == "table":
        return f'<div class="table">{output.data}</div>'
    return f'<pre class="output">{html_lib.escape(output.text)}</pre>'


def render_code_cell_html(cell: CodeCell, result: CellResult | None) -> str:
    """Render a code cell with its outputs, stdout, and any error."""
    parts: list[str] = []
    if cell.echo:
        parts.append(
            '<pre class="code"><code class="language-python">'
            f"{html_lib.escape(cell.source)}</code></pre>"
        )
    if result is None or result.skipped:
        if cell.evaluate:
            return "".join(parts)
        parts.append(SKIPPED_CELL_HTML)
        return "".join(parts)
    if result.stdout:
        parts.append(f'<pre class="output">{html_lib.escape(result.stdout)}</pre>')
    alt = cell.caption or cell.label or ""
    figure_parts = [render_output_html(output, alt) for output in result.outputs]
    if figure_parts:
        caption = (
            f"<figcaption>{html_lib.escape(cell.caption)}</figcaption>"
            if cell.caption
            else ""
        )
        parts.append(f"<figure>{''.join(figure_parts)}{caption}</figure>")
    if result.error:
        parts.append(f'<pre class="error">{html_lib.escape(result.error)}</pre>')
    return "".join(parts)


def render_slide_html(slide: Slide, results: list[CellResult | None]) -> str:
    """Render one slide as a ``<section>`` element.

    Parameters
    ----------
    slide : Slide
        Slide to render.
    results : list[CellResult | None]
        One entry per code cell of the slide, in order; ``None`` for cells
        that were never evaluated.
    """
    classes = "slide section-title" if slide.level == 1 else "slide"
    parts: list[str] = [f'<section class="{classes}">']
    if slide.title:
        tag = "h1" if slide.level == 1 else "h2"
        parts.append(f"<{tag}>{html_lib.escape(slide.title)}</{tag}>")
    code_index = 0
    for cell in slide.cells:
        if isinstance(cell, MarkdownCell):
            parts.append(markdown_to_html(cell.text))
            continue
        result = results[code_index] if code_index < len(results) else None
        code_index += 1
        parts.append(render_code_cell_html(cell, result))
    if slide.notes:
        parts.append(f'<aside class="notes">{markdown_to_html(slide.notes)}</aside>')
    parts.append("</section>")
    return "".join(parts)


def group_results(deck: Deck, results: list[CellResult]) -> list[list[CellResult | None]]:
    """Arrange flat evaluation results per slide and per code cell."""
    lookup = {(r.slide_index, r.cell_index): r for r in results}
    return [
        [lookup.get((slide_index, cell_index)) for cell_index in range(len(slide.code_cells))]
        for slide_index, slide in enumerate(deck.slides)
    ]


def render_deck_header(deck: Deck) -> str:
    """Render the title slide built from the deck metadata."""
    meta = deck.metadata
    parts = ['<section class="slide title-slide">']
    parts.append(f"<h1>{html_lib.escape(meta.title)}</h1>")
    if meta.subtitle:
        parts.append(f'<p class="subtitle">{html_lib.escape(meta.subtitle)}</p>')
    if meta.author:
        parts.append(f'<p class="author">{html_lib.escape(meta.author)}</p>')
    if meta.date:
        parts.append(f'<p class="date">{html_lib.escape(meta.date)}</p>')
    parts.append("</section>")
    return "".join(parts)


def generate_deck_html(deck: Deck, results: list[CellResult], template_path: Path) -> str:
    r"""Render the whole deck into the HTML template.

    The template must contain ``{deck_title}``, ``{deck_header}`` and
    ``{deck_slides}``; they are substituted with ``str.replace`` so the
    template's CSS and script braces stay untouched.

    Raises
    ------
    OSError
        If the template file cannot be read.
    """
    with template_path.open("r", encoding="utf-8") as fh:
        template = fh.read()
    grouped = group_results(deck, results)
    slides_html = "\n".join(
        render_slide_html(slide, slide_results)
        for slide, slide_results in zip(deck.slides, grouped)
    )
    return (
        template.replace("{deck_title}", html_lib.escape(deck.metadata.title))
        .replace("{deck_header}", render_deck_header(deck))
        .replace("{deck_slides}", slides_html)
    )
