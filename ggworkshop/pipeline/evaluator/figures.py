"""Turn plot objects into image bytes and files.

Drawing and file-format handling belong to plotnine and matplotlib; this
module only picks the right call for a ``ggplot`` or a matplotlib ``Figure``,
resolves where the file goes, and closes every drawn figure afterwards so a
long deck does not pile up open figures.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from plotnine import ggplot

from ggworkshop.config import SUPPORTED_IMAGE_FORMATS
from ggworkshop.exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)

_UNITS_PER_INCH: dict[str, float] = {"in": 1.0, "cm": 2.54, "mm": 25.4}


def is_plot(value: Any) -> bool:
    """Return True for objects this module can draw."""
    return isinstance(value, (ggplot, Figure))


def figure_size(
    width: float | None, height: float | None
) -> tuple[float | None, float | None]:
    """Return ``(width, height)`` only when both are known.

    plotnine refuses a single dimension, so a lone value is dropped and the
    theme's figure size is used instead.
    """
    if width is not None and height is not None:
        return width, height
    if width is not None or height is not None:
        logger.warning(
            "Ignoring figure size %sx%s: both width and height are required",
            width,
            height,
        )
    return None, None


def _save_figure(
    figure: Figure,
    target: Path | io.BytesIO,
    *,
    fmt: str | None,
    width: float | None,
    height: float | None,
    dpi: int | None,
    units: str,
) -> None:
    bbox_inches: str | None = "tight"
    if width is not None and height is not None:
        factor = _UNITS_PER_INCH[units]
        figure.set_size_inches(width / factor, height / factor)
        # An explicit size is kept exactly
        bbox_inches = None
    figure.savefig(target, format=fmt, dpi=dpi or "figure", bbox_inches=bbox_inches)


def plot_to_png(
    plot: Any,
    width: float | None = None,
    height: float | None = None,
    dpi: int | None = None,
) -> bytes:
    """Draw a plot and return it as PNG bytes.

    Parameters
    ----------
    plot : plotnine.ggplot | matplotlib.figure.Figure
        Object to draw.
    width, height : float | None
        Size in inches; used only when both are given.
    dpi : int | None
        Resolution; ``None`` keeps the plot's own setting.

    Returns
    -------
    bytes
        PNG image data.

    Raises
    ------
    TypeError
        If ``plot`` is neither a ``ggplot`` nor a ``Figure``.
    """
    width, height = figure_size(width, height)
    buffer = io.BytesIO()
    try:
        if isinstance(plot, ggplot):
            plot.save(
                buffer,
                format="png",
                width=width,
                height=height,
                dpi=dpi,
                verbose=False,
            )
        elif isinstance(plot, Figure):
            _save_figure(
                plot, buffer, fmt="png", width=width, height=height, dpi=dpi, units="in"
            )
        else:
            raise TypeError(f"Cannot draw object of type {type(plot).__name__}")
    finally:
        plt.close("all")
    return buffer.getvalue()


def save_plot(
    plot: Any,
    filename: str | Path,
    *,
    width: float | None = None,
    height: float | None = None,
    dpi: int | None = None,
    units: str = "in",
    output_dir: str | Path | None = None,
) -> Path:
    """Save a plot to an image file.

    The image format follows the file extension. Relative filenames are
    placed under ``output_dir`` when one is given, and missing parent
    directories are created.

    Parameters
    ----------
    plot : plotnine.ggplot | matplotlib.figure.Figure
        Plot to save.
    filename : str | Path
        Target file name; its extension selects the format.
    width, height : float | None, optional
        Size in ``units``; used only when both are given.
    dpi : int | None, optional
        Resolution for raster formats.
    units : str, optional
        ``"in"``, ``"cm"`` or ``"mm"``.
    output_dir : str | Path | None, optional
        Base directory for relative filenames.

    Returns
    -------
    Path
        Where the image was written.

    Raises
    ------
    UnsupportedFormatError
        If the extension is not one of ``SUPPORTED_IMAGE_FORMATS``.
    ValueError
        If ``units`` is not recognised.
    TypeError
        If ``plot`` is neither a ``ggplot`` nor a ``Figure``.

    Examples
    --------
    >>> from plotnine import ggplot, aes, geom_point
    >>> from plotnine.data import mpg
    >>> p = ggplot(mpg, aes("displ", "hwy")) + geom_point()
    >>> save_plot(p, "hwy.png", width=6, height=4, output_dir="/tmp")  # doctest: +SKIP
    PosixPath('/tmp/hwy.png')
    """
    path = Path(filename)
    if not path.is_absolute() and output_dir is not None:
        path = Path(output_dir) / path
    fmt = path.suffix.lower().lstrip(".")
    if fmt not in SUPPORTED_IMAGE_FORMATS:
        raise UnsupportedFormatError(
            f"Cannot save plots as '{path.suffix or path.name}'",
            context={"file": str(path), "supported": list(SUPPORTED_IMAGE_FORMATS)},
        )
    if units not in _UNITS_PER_INCH:
        raise ValueError(f"units must be one of {sorted(_UNITS_PER_INCH)}")
    width, height = figure_size(width, height)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if isinstance(plot, ggplot):
            plot.save(
                path,
                width=width,
                height=height,
                units=units,
                dpi=dpi,
                verbose=False,
            )
        elif isinstance(plot, Figure):
            _save_figure(
                plot, path, fmt=fmt, width=width, height=height, dpi=dpi, units=units
            )
        else:
            raise TypeError(f"Cannot save object of type {type(plot).__name__}")
    finally:
        plt.close("all")
    logger.info("Saved plot to %s", path)
    return path
