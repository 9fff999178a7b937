"""Tests for cell-by-cell evaluation in a shared namespace."""

from pathlib import Path

import pytest

from ggworkshop.config import RenderSettings
from ggworkshop.exceptions import CellEvaluationError
from ggworkshop.pipeline.deck import CodeCell, parse_deck
from ggworkshop.pipeline.evaluator import EvaluationSession, is_plot


@pytest.fixture
def session(tmp_path):
    return EvaluationSession(output_dir=tmp_path)


def test_prelude_names_available(session):
    """Test plotnine, numpy and pandas are importable from the start."""
    for name in ("ggplot", "aes", "geom_point", "np", "pd", "save_plot"):
        assert name in session.namespace


def test_trailing_expression_becomes_output(session):
    """Test The value of the last expression is shown as text."""
    result = session.run_cell(CodeCell("x = 1\nx + 1"))
    assert result.ok
    assert [(o.kind, o.text) for o in result.outputs] == [("text", "2")]
    assert session.last_value == 2


def test_statement_only_cell_has_no_output(session):
    """Test Cells ending in a statement produce nothing."""
    result = session.run_cell(CodeCell("y = 5"))
    assert result.outputs == []
    assert session.last_value is None


def test_namespace_is_shared_between_cells(session):
    """Test Later cells see names defined by earlier ones."""
    session.run_cell(CodeCell("y = 5"))
    result = session.run_cell(CodeCell("y * 2"))
    assert result.outputs[0].text == "10"


def test_stdout_is_captured(session):
    """Test Printed text is stored, and print's None result is not shown."""
    result = session.run_cell(CodeCell('print("hi")'))
    assert result.stdout == "hi\n"
    assert result.outputs == []


def test_warnings_are_captured(session):
    """Test Warnings raised by a cell are recorded on the result."""
    result = session.run_cell(CodeCell("import warnings\nwarnings.warn('careful')"))
    assert "careful" in result.warnings


def test_error_is_recorded_not_raised(session):
    """Test Exceptions become the result's error message."""
    result = session.run_cell(CodeCell("1 / 0", options={"label": "boom"}))
    assert not result.ok
    assert result.error.startswith("ZeroDivisionError")
    assert result.location == "boom"


def test_syntax_error_is_recorded(session):
    """Test Cells that do not parse fail like any other cell."""
    result = session.run_cell(CodeCell("ggplot(("))
    assert "SyntaxError" in result.error


def test_unknown_dataset_fails_cell(session):
    """Test A bad dataset option is reported as a cell error."""
    result = session.run_cell(CodeCell("1", options={"dataset": "nope"}))
    assert "Unknown dataset 'nope'" in result.error


def test_skipped_cell(session):
    """Test eval: false cells are not executed."""
    session.run_cell(CodeCell("1"))
    result = session.run_cell(CodeCell("raise RuntimeError", options={"eval": False}))
    assert result.skipped
    assert result.ok
    assert session.last_value is None


def test_datasets_are_fresh_copies(session):
    """Test Each cell gets an unmodified copy of its dataset."""
    session.run_cell(CodeCell("mpg['hwy'] = -1", options={"dataset": "mpg"}))
    result = session.run_cell(CodeCell("int(mpg['hwy'].min())", options={"dataset": "mpg"}))
    assert session.last_value > 0
    assert result.ok


def test_plot_output_is_png(session):
    """Test A ggplot value is drawn to PNG bytes."""
    cell = CodeCell(
        "ggplot(mpg, aes('displ', 'hwy')) + geom_point()",
        options={"dataset": "mpg", "fig-width": 3, "fig-height": 2},
    )
    result = session.run_cell(cell)
    assert result.ok, result.error
    assert len(result.plots()) == 1
    assert result.plots()[0].data[:8] == b"\x89PNG\r\n\x1a\n"
    assert is_plot(session.last_value)


def test_dataframe_output_is_limited_table(monkeypatch, tmp_path):
    """Test DataFrames render as HTML and text tables of table_rows rows."""
    monkeypatch.setenv("GGW_TABLE_ROWS", "2")
    session = EvaluationSession(output_dir=tmp_path, settings=RenderSettings())
    result = session.run_cell(CodeCell("pd.DataFrame({'a': range(10)})"))
    output = result.outputs[0]
    assert output.kind == "table"
    assert "<table" in output.data
    assert len(output.text.splitlines()) == 3


def test_series_output_is_table(session):
    """Test A Series is shown as a one-column table."""
    result = session.run_cell(CodeCell("pd.Series([1, 2], name='n')"))
    assert result.outputs[0].kind == "table"


def test_save_plot_helper_uses_output_dir(session, tmp_path):
    """Test The namespace's save_plot writes relative names under output_dir."""
    cell = CodeCell(
        "p = ggplot(mpg, aes('displ', 'hwy')) + geom_point()\n"
        "save_plot(p, 'plots/p.png', width=3, height=2, dpi=50)",
        options={"dataset": "mpg"},
    )
    result = session.run_cell(cell)
    assert result.ok, result.error
    assert session.last_value == tmp_path / "plots" / "p.png"
    assert Path(session.last_value).is_file()


def test_run_deck(session, mini_deck_text):
    """Test Every code cell is evaluated in order with its position."""
    results = session.run_deck(parse_deck(mini_deck_text))
    assert [r.label for r in results] == ["head", "fig-scatter", "later"]
    assert [(r.slide_index, r.cell_index) for r in results] == [(1, 0), (2, 0), (3, 0)]
    assert results[0].outputs[0].kind == "table"
    assert results[1].plots()
    assert results[2].skipped
    assert all(r.ok for r in results)


def test_run_deck_until_label(session, mini_deck_text):
    """Test Evaluation stops after the requested cell."""
    results = session.run_deck(parse_deck(mini_deck_text), until_label="head")
    assert [r.label for r in results] == ["head"]


def test_run_deck_stop_on_error(session):
    """Test stop_on_error raises at the first failing cell."""
    deck = parse_deck(
        "## A\n```{python}\n#| label: bad\n1 / 0\n```\n```{python}\n2\n```\n"
    )
    with pytest.raises(CellEvaluationError) as info:
        session.run_deck(deck, stop_on_error=True)
    assert "bad" in info.value.message
    assert info.value.context["line"] == 2


def test_run_deck_continues_after_error(session):
    """Test Without stop_on_error later cells still run."""
    deck = parse_deck("## A\n```{python}\n1 / 0\n```\n```{python}\n2\n```\n")
    results = session.run_deck(deck)
    assert [r.ok for r in results] == [False, True]
    assert results[0].location == "slide 1, cell 1"
