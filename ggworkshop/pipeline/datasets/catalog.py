"""Catalog of the built-in example datasets used throughout the workshop.

The workshop never ingests data of its own: every example draws on one of
plotnine's pre-packaged tables. This module names the tables the deck relies
on, hands out copies of them, and offers two teaching aids: a per-column
description and a quick check for the most common "untidy" layouts.

Datasets are treated as opaque tables (rows are observations, columns are
variables). No schema is enforced on them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import pandas as pd
import plotnine.data

from ggworkshop.exceptions import DatasetNotFoundError

logger = logging.getLogger(__name__)

DATASET_DESCRIPTIONS: dict[str, str] = {
    "diamonds": "Prices and attributes of almost 54,000 round cut diamonds.",
    "economics": "US economic time series, one column per indicator (wide).",
    "economics_long": "The economics table reshaped to one row per indicator and month (long).",
    "faithful": "Eruption and waiting times of the Old Faithful geyser.",
    "huron": "Yearly water level of Lake Huron, 1875-1972.",
    "midwest": "Demographic information of Midwest counties.",
    "mpg": "Fuel economy of popular car models in 1999 and 2008.",
    "msleep": "Sleep times and body weights of mammals.",
    "mtcars": "Motor Trend road tests of 32 cars from 1974.",
    "presidential": "Terms of US presidents from Eisenhower onwards.",
    "seals": "Vector field of seal movements.",
    "txhousing": "Monthly housing market statistics for Texas cities.",
}

_NUMERIC_HEADER = re.compile(r"^\d+(\.\d+)?$")


@dataclass(frozen=True)
class DatasetInfo:
    """Summary of one catalog entry."""

    name: str
    description: str
    n_rows: int
    n_columns: int


def _normalise_name(name: str) -> str:
    key = str(name).strip().lower()
    if key not in DATASET_DESCRIPTIONS:
        raise DatasetNotFoundError(
            f"Unknown dataset '{name}'",
            context={"dataset": name, "available": sorted(DATASET_DESCRIPTIONS)},
        )
    return key


def available_datasets() -> list[str]:
    """Return the sorted names of all datasets in the catalog."""
    return sorted(DATASET_DESCRIPTIONS)


def load_dataset(name: str) -> pd.DataFrame:
    """Return a copy of a built-in example dataset.

    Parameters
    ----------
    name : str
        Catalog name, matched case-insensitively.

    Returns
    -------
    pd.DataFrame
        A fresh copy, so cells that modify their data cannot leak changes
        into later cells that bind the same dataset.

    Raises
    ------
    DatasetNotFoundError
        If ``name`` is not in the catalog.

    Examples
    --------
    >>> df = load_dataset("mpg")
    >>> {"displ", "hwy", "class"} <= set(df.columns)
    True
    """
    key = _normalise_name(name)
    frame = getattr(plotnine.data, key)
    logger.debug("Loaded dataset %s with %d rows", key, len(frame))
    return frame.copy()


def dataset_info(name: str) -> DatasetInfo:
    """Return the size and description of a catalog dataset."""
    key = _normalise_name(name)
    frame = getattr(plotnine.data, key)
    return DatasetInfo(
        name=key,
        description=DATASET_DESCRIPTIONS[key],
        n_rows=int(frame.shape[0]),
        n_columns=int(frame.shape[1]),
    )


def list_datasets() -> list[DatasetInfo]:
    """Return ``DatasetInfo`` for every catalog entry, sorted by name."""
    return [dataset_info(name) for name in available_datasets()]


def describe_dataset(name: str) -> pd.DataFrame:
    """Describe each column of a dataset.

    Returns
    -------
    pd.DataFrame
        One row per column with ``column``, ``dtype``, ``non_null``,
        ``n_unique`` and ``example`` (first non-null value as text).
    """
    frame = load_dataset(name)
    rows = []
    for column in frame.columns:
        series = frame[column]
        non_null = series.dropna()
        rows.append(
            {
                "column": str(column),
                "dtype": str(series.dtype),
                "non_null": int(non_null.shape[0]),
                "n_unique": int(series.nunique(dropna=True)),
                "example": str(non_null.iloc[0]) if not non_null.empty else "",
            }
        )
    return pd.DataFrame(
        rows, columns=["column", "dtype", "non_null", "n_unique", "example"]
    )


def tidy_violations(dataframe: pd.DataFrame) -> list[str]:
    """Report obvious departures from the tidy data layout.

    Checks for duplicated column names, column headers that look like
    values (purely numeric names such as years, which usually means a
    variable is spread across columns) and columns with no values at all.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Table to inspect.

    Returns
    -------
    list[str]
        Human-readable findings; empty when nothing obvious is wrong.

    Examples
    --------
    >>> wide = pd.DataFrame({"country": ["A"], "1999": [1], "2000": [2]})
    >>> tidy_violations(wide)
    ["column headers look like values: '1999', '2000' (consider DataFrame.melt)"]
    """
    findings: list[str] = []
    columns = [str(column) for column in dataframe.columns]
    duplicated = sorted({c for c in columns if columns.count(c) > 1})
    if duplicated:
        findings.append(
            "duplicated column names: " + ", ".join(f"'{c}'" for c in duplicated)
        )
    value_headers = [c for c in columns if _NUMERIC_HEADER.match(c.strip())]
    if value_headers:
        findings.append(
            "column headers look like values: "
            + ", ".join(f"'{c}'" for c in value_headers)
            + " (consider DataFrame.melt)"
        )
    if len(dataframe.index) > 0:
        empty = [
            str(column)
            for position, column in enumerate(dataframe.columns)
            if dataframe.iloc[:, position].isna().all()
        ]
        if empty:
            findings.append(
                "columns without values: " + ", ".join(f"'{c}'" for c in empty)
            )
    return findings
