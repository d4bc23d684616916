# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from freight_rates.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # ハンドラは生成時の sys.stdout を掴むのでテスト毎に作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FREIGHT_RATES_CONFIG", raising=False)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """default_file: ./data/freight_data.xlsx
cache_file: ./.cache/freight_data_cache.json
price_precision: 2
preview_rows: 5
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "freight.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def wide_rows() -> list[dict[str, Any]]:
    return [
        {"始发地": "新疆圆通仓", "目的地": "新疆维吾尔自治区", "1kg": 1.63, "2kg": 1.74},
        {"始发地": "新疆圆通仓", "目的地": "西藏自治区", "1kg": 3.5, "2kg": "n/a"},
    ]


@pytest.fixture()
def long_rows() -> list[dict[str, Any]]:
    return [
        {"始发地": "北京", "目的地": "上海", "最小重量": 0, "最大重量": 10, "价格": 100},
        {"始发地": "北京", "目的地": "上海", "最小重量": 10, "最大重量": 20, "价格": 180},
        {"始发地": "深圳", "目的地": "成都", "最小重量": 0, "最大重量": 100, "价格": 500},
    ]


def _write_workbook(path: Path, sheets: dict[str, list[dict[str, Any]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path) as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return path


@pytest.fixture()
def make_workbook() -> Callable[..., Path]:
    """Write rows (list of dicts) as a header + data sheet. ``sheets`` maps sheet name -> rows."""
    return _write_workbook


@pytest.fixture()
def default_workbook(temp_workdir: Path, long_rows) -> Path:
    return _write_workbook(temp_workdir / "data" / "freight_data.xlsx", {"Sheet1": long_rows})
