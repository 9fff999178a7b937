"""Deck renderer package.

Re-exports the HTML and Markdown renderers and the programmatic runner
entrypoints consumed by the CLI.
"""

from .html import (
    clean_html_output,
    generate_deck_html,
    markdown_to_html,
    render_slide_html,
)
from .markdown import generate_deck_markdown
from .runner import (
    check_deck,
    configure_logging,
    render_deck,
    resolve_output_format,
    run_from_config,
    save_labelled_plot,
    write_output,
)

__all__ = [
    "check_deck",
    "clean_html_output",
    "configure_logging",
    "generate_deck_html",
    "generate_deck_markdown",
    "markdown_to_html",
    "render_deck",
    "render_slide_html",
    "resolve_output_format",
    "run_from_config",
    "save_labelled_plot",
    "write_output",
]
