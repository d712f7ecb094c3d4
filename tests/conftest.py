from __future__ import annotations

import sys
from pathlib import Path

import pytest

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "chart_toolkit" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))

from chart_toolkit import ChartData, ManualFrameScheduler, RecordingSurface  # noqa: E402


@pytest.fixture
def frames() -> ManualFrameScheduler:
    return ManualFrameScheduler()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface(800, 600)


@pytest.fixture
def data() -> ChartData:
    store = ChartData()
    store.set_values("a", {0: 1, 1: 3, 2: 2, 3: 5})
    store.set_values("b", {0: 4, 1: 0, 2: 6, 3: 2})
    return store
