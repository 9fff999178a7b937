"""Example dataset catalog.

Thin import surface over :mod:`ggworkshop.pipeline.datasets.catalog`. The
evaluator binds datasets through ``load_dataset``; the CLI lists and
describes them.
"""

from .catalog import (
    DATASET_DESCRIPTIONS,
    DatasetInfo,
    available_datasets,
    dataset_info,
    describe_dataset,
    list_datasets,
    load_dataset,
    tidy_violations,
)

__all__ = [
    "DATASET_DESCRIPTIONS",
    "DatasetInfo",
    "available_datasets",
    "dataset_info",
    "describe_dataset",
    "list_datasets",
    "load_dataset",
    "tidy_violations",
]
