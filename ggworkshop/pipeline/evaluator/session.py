"""Cell-by-cell evaluation of a deck.

An ``EvaluationSession`` behaves like the interactive session a presenter
runs during the workshop: one namespace shared by all cells, executed in
document order. Each cell may name the example datasets it works on; those
are bound into the namespace as fresh copies right before the cell runs.

A cell's statements are executed and, when the cell ends with an
expression, its value becomes the cell output (plots are drawn to PNG,
DataFrames are shown as a table, anything else as text). Failures are
recorded on the ``CellResult`` and logged rather than raised, unless the
caller asks to stop at the first error.
"""

from __future__ import annotations

import ast
import contextlib
import functools
import io
import logging
import traceback
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ggworkshop.config import DEFAULT_OUTPUT_DIR, EVALUATION_PRELUDE, RenderSettings
from ggworkshop.exceptions import CellEvaluationError
from ggworkshop.pipeline.datasets import load_dataset
from ggworkshop.pipeline.deck.models import CodeCell, Deck

from .figures import is_plot, plot_to_png, save_plot

logger = logging.getLogger(__name__)


@dataclass
class CellOutput:
    """Displayable value produced by a cell.

    ``kind`` is ``"plot"`` (``data`` holds PNG bytes), ``"table"`` (``data``
    holds HTML, ``text`` a plain-text rendering) or ``"text"``.
    """

    kind: str
    data: bytes | str = ""
    text: str = ""


@dataclass
class CellResult:
    """Outcome of evaluating one code cell."""

    slide_index: int
    cell_index: int
    label: str | None = None
    outputs: list[CellOutput] = field(default_factory=list)
    stdout: str = ""
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def location(self) -> str:
        """Label of the cell, or its slide/cell position when unlabelled."""
        if self.label:
            return self.label
        return f"slide {self.slide_index + 1}, cell {self.cell_index + 1}"

    def plots(self) -> list[CellOutput]:
        return [output for output in self.outputs if output.kind == "plot"]


class EvaluationSession:
    r"""Shared namespace in which deck cells are executed in order.

    Parameters
    ----------
    output_dir : Path | None, optional
        Directory that relative ``save_plot`` filenames resolve against.
        Defaults to ``DEFAULT_OUTPUT_DIR``.
    settings : RenderSettings | None, optional
        Figure and table defaults; read from the environment when omitted.

    Notes
    -----
    The namespace starts from ``EVALUATION_PRELUDE`` (plotnine's public
    names, ``np`` and ``pd``) and a ``save_plot`` helper bound to
    ``output_dir``. ``last_value`` holds the trailing-expression value of
    the most recent cell.

    Examples
    --------
    >>> from ggworkshop.pipeline.deck.models import CodeCell
    >>> session = EvaluationSession()
    >>> cell = CodeCell("ggplot(mpg, aes('displ', 'hwy')) + geom_point()",
    ...                 options={"dataset": "mpg"})
    >>> session.run_cell(cell).outputs[0].kind  # doctest: +SKIP
    'plot'
    """

    def __init__(
        self,
        output_dir: Path | None = None,
        settings: RenderSettings | None = None,
    ) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else DEFAULT_OUTPUT_DIR
        self.settings = settings if settings is not None else RenderSettings()
        self.namespace: dict[str, Any] = {"__name__": "__workshop__"}
        exec(compile(EVALUATION_PRELUDE, "<prelude>", "exec"), self.namespace)
        self.namespace["save_plot"] = functools.partial(
            save_plot, output_dir=self.output_dir
        )
        self.last_value: Any = None

    def bind_datasets(self, names: list[str]) -> None:
        """Load each named dataset into the namespace under its own name."""
        for name in names:
            key = name.strip().lower()
            self.namespace[key] = load_dataset(key)

    def _execute(self, source: str, filename: str) -> Any:
        tree = ast.parse(source, filename=filename, mode="exec")
        trailing: ast.Expression | None = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            trailing = ast.Expression(body=tree.body.pop().value)
        exec(compile(tree, filename, "exec"), self.namespace)
        if trailing is None:
            return None
        return eval(compile(trailing, filename, "eval"), self.namespace)

    def _render_value(self, value: Any, cell: CodeCell) -> CellOutput | None:
        if value is None:
            return None
        if is_plot(value):
            width = cell.fig_width or self.settings.fig_width
            height = cell.fig_height or self.settings.fig_height
            return CellOutput(
                kind="plot",
                data=plot_to_png(value, width=width, height=height, dpi=self.settings.dpi),
            )
        if isinstance(value, pd.Series):
            value = value.to_frame()
        if isinstance(value, pd.DataFrame):
            head = value.head(self.settings.table_rows)
            return CellOutput(
                kind="table",
                data=head.to_html(index=False, border=0, classes="dataframe"),
                text=head.to_string(index=False),
            )
        return CellOutput(kind="text", text=repr(value))

    def run_cell(
        self, cell: CodeCell, *, slide_index: int = 0, cell_index: int = 0
    ) -> CellResult:
        """Evaluate one code cell.

        Parameters
        ----------
        cell : CodeCell
            Cell to run.
        slide_index, cell_index : int, optional
            Position of the cell, recorded on the result.

        Returns
        -------
        CellResult
            Outputs, captured stdout and warnings, or the error message.
            Cells with ``eval: false`` come back with ``skipped`` set.
        """
        result = CellResult(slide_index=slide_index, cell_index=cell_index, label=cell.label)
        self.last_value = None
        if not cell.evaluate:
            result.skipped = True
            return result
        filename = f"<cell {result.location}>"
        stdout = io.StringIO()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                self.bind_datasets(cell.datasets)
                with contextlib.redirect_stdout(stdout):
                    value = self._execute(cell.source, filename)
                    self.last_value = value
                    output = self._render_value(value, cell)
                if output is not None:
                    result.outputs.append(output)
            except Exception as exc:
                result.error = "".join(
                    traceback.format_exception_only(type(exc), exc)
                ).strip()
                logger.warning("Cell %s failed: %s", result.location, result.error)
        result.stdout = stdout.getvalue()
        result.warnings = [str(w.message) for w in caught]
        return result

    def run_deck(
        self,
        deck: Deck,
        *,
        stop_on_error: bool = False,
        until_label: str | None = None,
    ) -> list[CellResult]:
        """Evaluate the deck's code cells in document order.

        Parameters
        ----------
        deck : Deck
            Parsed deck.
        stop_on_error : bool, optional
            Raise on the first failing cell instead of continuing.
        until_label : str | None, optional
            Stop after the cell carrying this label.

        Returns
        -------
        list[CellResult]
            One result per evaluated cell, in order.

        Raises
        ------
        CellEvaluationError
            If ``stop_on_error`` is set and a cell fails.
        """
        results: list[CellResult] = []
        for slide_index, cell_index, cell in deck.code_cells():
            result = self.run_cell(cell, slide_index=slide_index, cell_index=cell_index)
            results.append(result)
            if stop_on_error and not result.ok:
                raise CellEvaluationError(
                    f"Cell {result.location} failed: {result.error}",
                    context={"slide": slide_index + 1, "line": cell.line},
                )
            if until_label is not None and cell.label == until_label:
                break
        logger.info(
            "Evaluated %d cells, %d failed",
            len(results),
            sum(1 for r in results if not r.ok),
        )
        return results
