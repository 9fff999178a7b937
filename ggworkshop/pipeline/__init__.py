"""Headless processing layer for the workshop deck.

Subpackages
-----------
- `datasets`: Built-in example dataset catalog.
- `deck`: Deck document model and parser.
- `evaluator`: Cell-by-cell evaluation and figure output.
- `renderer`: HTML and Markdown rendering plus the programmatic runner.

Nothing here prints or prompts; the CLI layer lives in ``ggworkshop.cli``.
"""
