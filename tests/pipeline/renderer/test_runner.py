"""Tests for the programmatic render, check and save entrypoints."""

import logging

import pytest

from ggworkshop.exceptions import (
    CellEvaluationError,
    CellNotFoundError,
    UnsupportedFormatError,
)
from ggworkshop.pipeline.deck import parse_deck
from ggworkshop.pipeline.renderer import runner

FAILING_DECK = """---
title: Broken
format: gfm
---

## A

```{python}
#| label: ok
1 + 1
```

```{python}
#| label: broken
undefined_name
```
"""


@pytest.fixture
def failing_deck_path(tmp_path):
    path = tmp_path / "broken.qmd"
    path.write_text(FAILING_DECK, encoding="utf-8")
    return path


def test_configure_logging_console_only():
    """Test Without file logging only a console handler is installed."""
    saved = logging.root.handlers[:]
    try:
        runner.configure_logging("DEBUG", enable_file=False)
        assert len(logging.root.handlers) == 1
        assert isinstance(logging.root.handlers[0], logging.StreamHandler)
        assert logging.root.level == logging.DEBUG
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
        for handler in saved:
            logging.root.addHandler(handler)


def test_resolve_output_format(mini_deck_text):
    """Test Directives and overrides map to html or markdown."""
    deck = parse_deck(mini_deck_text)
    assert runner.resolve_output_format(deck) == "html"
    assert runner.resolve_output_format(deck, " GFM ") == "markdown"
    with pytest.raises(UnsupportedFormatError):
        runner.resolve_output_format(deck, "pdf")


def test_write_output_creates_parents(tmp_path):
    """Test Output is written as UTF-8 under new directories."""
    target = tmp_path / "a" / "b" / "deck.html"
    runner.write_output("<p>é</p>", target)
    assert target.read_text(encoding="utf-8") == "<p>é</p>"


def test_run_from_config_html(mini_deck_path, tmp_path):
    """Test A deck renders to a standalone HTML file."""
    output = tmp_path / "out" / "deck.html"
    assert runner.run_from_config(mini_deck_path, output) is True
    html = output.read_text(encoding="utf-8")
    assert "<title>Mini deck</title>" in html
    assert "data:image/png;base64," in html


def test_run_from_config_markdown(mini_deck_path, tmp_path):
    """Test Markdown output writes figures next to the handout."""
    output = tmp_path / "out" / "deck.md"
    assert runner.run_from_config(mini_deck_path, output, output_format="markdown")
    assert (tmp_path / "out" / "figures" / "fig-scatter.png").is_file()
    assert "![Scatter](figures/fig-scatter.png)" in output.read_text(encoding="utf-8")


def test_run_from_config_format_from_front_matter(failing_deck_path, tmp_path):
    """Test The deck's own directive picks the renderer; failures stay in place."""
    output = tmp_path / "broken.md"
    assert runner.run_from_config(failing_deck_path, output)
    assert "> **Error:** NameError" in output.read_text(encoding="utf-8")


def test_run_from_config_failures_return_false(failing_deck_path, tmp_path, caplog):
    """Test Missing decks, bad formats and strict failures are logged, not raised."""
    caplog.set_level(logging.ERROR)
    assert runner.run_from_config(tmp_path / "missing.qmd", tmp_path / "x.html") is False
    assert runner.run_from_config(failing_deck_path, tmp_path / "x.pdf", "pdf") is False
    assert runner.run_from_config(failing_deck_path, tmp_path / "y.md", strict=True) is False
    assert not (tmp_path / "y.md").exists()
    assert "Failed to render deck" in caplog.text


def test_check_deck_reports_failures(failing_deck_path, tmp_path):
    """Test Only failing cells are returned."""
    failures = runner.check_deck(failing_deck_path, output_dir=tmp_path)
    assert [f.label for f in failures] == ["broken"]
    assert failures[0].error.startswith("NameError")


def test_check_deck_clean(mini_deck_path, tmp_path):
    """Test A deck without errors has no failures."""
    assert runner.check_deck(mini_deck_path, output_dir=tmp_path) == []


def test_save_labelled_plot(mini_deck_path, tmp_path):
    """Test The labelled cell's plot is saved to the requested file."""
    target = tmp_path / "scatter.png"
    path = runner.save_labelled_plot(
        "fig-scatter", target, mini_deck_path, width=3, height=2, dpi=50
    )
    assert path == target
    assert target.read_bytes().startswith(b"\x89PNG")


def test_save_labelled_plot_unknown_label(mini_deck_path, tmp_path):
    """Test Unknown labels raise with the available labels."""
    with pytest.raises(CellNotFoundError) as info:
        runner.save_labelled_plot("fig-nope", tmp_path / "x.png", mini_deck_path)
    assert info.value.context["labels"] == ["head", "fig-scatter", "later"]


def test_save_labelled_plot_not_a_plot(mini_deck_path, tmp_path):
    """Test Cells that do not end in a plot cannot be saved."""
    with pytest.raises(CellEvaluationError):
        runner.save_labelled_plot("head", tmp_path / "x.png", mini_deck_path)


def test_save_labelled_plot_failing_cell(failing_deck_path, tmp_path):
    """Test A failing cell on the way stops the save."""
    with pytest.raises(CellEvaluationError):
        runner.save_labelled_plot("broken", tmp_path / "x.png", failing_deck_path)
