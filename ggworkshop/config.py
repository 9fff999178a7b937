"""Global configuration constants for the workshop tooling.

Defines paths, filenames and figure defaults used across the deck parser,
the cell evaluator, the renderers and the CLI. ``RenderSettings`` reads the
few values a presenter may want to override from the environment or a
project ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from ggworkshop.exceptions import ConfigurationError

# Package files are read from the install location; logs and rendered
# output go to the directory the tools are run from.
PACKAGE_DIR: Path = Path(__file__).resolve().parent
PROJECT_ROOT: Path = Path.cwd()
LOG_DIR: Path = PROJECT_ROOT / "logs"

# Deck and template locations shipped with the package
DECKS_DIR: Path = PACKAGE_DIR / "decks"
DEFAULT_DECK_PATH: Path = DECKS_DIR / "grammar_of_graphics.qmd"
DECK_TEMPLATE_PATH: Path = PACKAGE_DIR / "templates" / "deck_template.html"

# Output defaults
DEFAULT_OUTPUT_DIR: Path = PROJECT_ROOT / "output"
DEFAULT_HTML_OUTPUT: Path = DEFAULT_OUTPUT_DIR / "grammar_of_graphics.html"
DEFAULT_MARKDOWN_OUTPUT: Path = DEFAULT_OUTPUT_DIR / "grammar_of_graphics.md"
FIGURES_SUBDIR: str = "figures"

# Deck format directives
DEFAULT_DECK_FORMAT: str = "revealjs"
FORMAT_ALIASES: dict[str, str] = {
    "revealjs": "html",
    "html": "html",
    "gfm": "markdown",
    "markdown": "markdown",
    "md": "markdown",
}

# Images written by the save-plot helper
SUPPORTED_IMAGE_FORMATS: tuple[str, ...] = (
    "png",
    "jpg",
    "jpeg",
    "pdf",
    "svg",
    "tiff",
    "eps",
)

# Evaluation prelude executed once per session
EVALUATION_PRELUDE: str = (
    "from plotnine import *\nimport numpy as np\nimport pandas as pd\n"
)

# Figure defaults (overridable through RenderSettings)
DEFAULT_DPI: int = 100
DEFAULT_TABLE_ROWS: int = 6

# Rendering fallbacks
UNTITLED_DECK: str = "Untitled deck"
SKIPPED_CELL_HTML: str = '<p class="skipped">Not evaluated.</p>'

# Logging
LOG_FILENAME: str = "gg_workshop.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _positive_number(name: str, raw: str | None, cast: type) -> float | int | None:
    """Parse an optional positive number from an environment value."""
    if raw is None or raw.strip() == "":
        return None
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a number", context={"variable": name, "value": raw}
        ) from exc
    if value <= 0:
        raise ConfigurationError(
            f"{name} must be positive", context={"variable": name, "value": raw}
        )
    return value


class RenderSettings:
    r"""Figure and table defaults for evaluated cells.

    Values come from environment variables, with the nearest ``.env`` at or
    above the working directory loaded first when present.

    Attributes
    ----------
    dpi : int
        Resolution of rendered plot images (``GGW_DPI``).
    fig_width : float | None
        Default figure width in inches (``GGW_FIG_WIDTH``). ``None`` keeps
        plotnine's theme default.
    fig_height : float | None
        Default figure height in inches (``GGW_FIG_HEIGHT``).
    table_rows : int
        Number of rows shown when a cell evaluates to a DataFrame
        (``GGW_TABLE_ROWS``).

    Raises
    ------
    ConfigurationError
        If a variable is set to a non-numeric or non-positive value.

    Examples
    --------
    >>> import os
    >>> os.environ["GGW_DPI"] = "72"
    >>> RenderSettings().dpi
    72
    """

    def __init__(self) -> None:
        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(env_path)
        self.dpi = int(
            _positive_number("GGW_DPI", os.getenv("GGW_DPI"), int) or DEFAULT_DPI
        )
        self.fig_width = _positive_number(
            "GGW_FIG_WIDTH", os.getenv("GGW_FIG_WIDTH"), float
        )
        self.fig_height = _positive_number(
            "GGW_FIG_HEIGHT", os.getenv("GGW_FIG_HEIGHT"), float
        )
        self.table_rows = int(
            _positive_number("GGW_TABLE_ROWS", os.getenv("GGW_TABLE_ROWS"), int)
            or DEFAULT_TABLE_ROWS
        )
