"""Tests for the shipped grammar of graphics workshop deck.

Every example must run against its named dataset, and every ``fig-`` cell
must end in a plot, so the deck can be presented live without surprises.
"""

import pytest

from ggworkshop.config import DEFAULT_DECK_PATH
from ggworkshop.pipeline.datasets import available_datasets
from ggworkshop.pipeline.deck import load_deck
from ggworkshop.pipeline.evaluator import EvaluationSession


@pytest.fixture(scope="module")
def deck():
    return load_deck(DEFAULT_DECK_PATH)


@pytest.fixture(scope="module")
def results(deck, tmp_path_factory):
    session = EvaluationSession(output_dir=tmp_path_factory.mktemp("deck-output"))
    return session.run_deck(deck)


def test_deck_metadata(deck):
    """Test The deck is titled and rendered as slides."""
    assert deck.metadata.title == "Data Visualization with the Grammar of Graphics"
    assert deck.metadata.format == "revealjs"


def test_deck_sections(deck):
    """Test The grammar's layers each get a section."""
    sections = [s.title for s in deck.slides if s.level == 1]
    for expected in ("Data", "Aesthetics", "Geometries", "Statistics", "Facets", "Scales", "Coordinates"):
        assert expected in sections


def test_cells_name_known_datasets(deck):
    """Test Every dataset option refers to the catalog."""
    known = set(available_datasets())
    for _, _, cell in deck.code_cells():
        assert set(cell.datasets) <= known, cell.label


def test_every_cell_is_labelled(deck):
    """Test Labels make every example addressable from the CLI."""
    assert all(cell.label for _, _, cell in deck.code_cells())


def test_every_cell_evaluates(results):
    """Test No example raises."""
    failures = {r.location: r.error for r in results if not r.ok}
    assert failures == {}


def test_figure_cells_produce_plots(results):
    """Test Each fig- cell ends in exactly one drawn plot."""
    figure_results = [r for r in results if r.label and r.label.startswith("fig-")]
    assert len(figure_results) >= 30
    for result in figure_results:
        assert len(result.plots()) == 1, result.label


def test_exercise_is_not_evaluated(results):
    """Test The participant exercise is shown but never run."""
    exercise = next(r for r in results if r.label == "exercise-msleep")
    assert exercise.skipped


def test_save_plot_cell_writes_file(results):
    """Test The save example reports the written file name."""
    saved = next(r for r in results if r.label == "save-plot")
    assert saved.outputs[0].text == "'hwy_vs_displ.png'"
