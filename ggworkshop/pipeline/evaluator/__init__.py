"""Cell evaluator package.

Exposes the evaluation session and the figure helpers used to draw and
save plots produced by deck cells.
"""

from .figures import is_plot, plot_to_png, save_plot
from .session import CellOutput, CellResult, EvaluationSession

__all__ = [
    "CellOutput",
    "CellResult",
    "EvaluationSession",
    "is_plot",
    "plot_to_png",
    "save_plot",
]
