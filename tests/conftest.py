"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Forces the headless ``Agg`` matplotlib backend.
- Ensures the project root is available on ``sys.path`` for imports.
- Aborts any single test that runs longer than ``PYTEST_TEST_TIMEOUT``.
"""

import os
import signal
import sys
from pathlib import Path

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

# Evaluating the whole deck draws every plot, so allow generous time.
_TEST_TIMEOUT = int(os.environ.get("PYTEST_TEST_TIMEOUT", "300"))


def _timeout_handler(signum, frame):
    """Test Timeout handler."""
    raise TimeoutError(f"Test exceeded {_TEST_TIMEOUT} seconds timeout")


def pytest_runtest_setup(item):
    """Test Pytest runtest setup."""
    if hasattr(signal, "SIGALRM"):
        signal.signal(signal.SIGALRM, _timeout_handler)
        signal.alarm(_TEST_TIMEOUT)


def pytest_runtest_teardown(item, nextitem):
    """Test Pytest runtest teardown."""
    if hasattr(signal, "SIGALRM"):
        signal.alarm(0)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep figure settings independent of the developer's environment."""
    for name in ("GGW_DPI", "GGW_FIG_WIDTH", "GGW_FIG_HEIGHT", "GGW_TABLE_ROWS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GGW_DPI", "50")


MINI_DECK = '''---
title: "Mini deck"
author: "Tester"
date: "2026-01-01"
format: revealjs
---

# Basics

## Data

Some *narrative* text.

```{python}
#| label: head
#| dataset: mpg
mpg.head(3)
```

## A plot

```{python}
#| label: fig-scatter
#| dataset: mpg
#| fig-cap: "Scatter"
ggplot(mpg, aes("displ", "hwy")) + geom_point()
```

::: {.notes}
Remember to pause.
:::

## Skipped

```{python}
#| label: later
#| eval: false
raise RuntimeError("never runs")
```
'''


@pytest.fixture
def mini_deck_text():
    """Return a small but complete deck document."""
    return MINI_DECK


@pytest.fixture
def mini_deck_path(tmp_path):
    """Write the mini deck to disk and return its path."""
    path = tmp_path / "mini.qmd"
    path.write_text(MINI_DECK, encoding="utf-8")
    return path
