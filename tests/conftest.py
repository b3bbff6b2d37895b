"""测试初始化。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def bar_figure() -> dict:
    return {"data": [{"type": "bar", "x": [1, 2, 3], "y": [4, 5, 6]}], "layout": {}}
