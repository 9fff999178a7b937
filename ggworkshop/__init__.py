"""Grammar of graphics workshop package.

This package ships a workshop slide deck that teaches data visualization
with plotnine's grammar of graphics, together with the small amount of
tooling a presenter needs around it: parsing the deck, evaluating its code
cells cell-by-cell against the built-in example datasets, rendering the
result to a standalone HTML slide deck or a Markdown handout, and saving
individual plots as image files.

Package Structure
-----------------
- `decks/`: The workshop deck document (Quarto-style Markdown).
- `templates/`: HTML template used for the rendered slide deck.
- `pipeline/`:
    Subpackages for the example dataset catalog, the deck parser, the cell
    evaluator and the renderers.
- `cli.py`: Command-line entrypoint (``gg-workshop``).
- `config.py`: Configuration constants and environment-driven settings.
- `exceptions.py`: Project-specific exception classes.

Examples
--------
>>> from ggworkshop.pipeline.renderer.runner import run_from_config
>>> run_from_config()  # doctest: +SKIP
True
"""

__version__ = "0.1.0"
