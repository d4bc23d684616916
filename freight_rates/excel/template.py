from __future__ import annotations

from pathlib import Path

import pandas as pd

"""Sample long-shape rate sheet for users starting a new table."""

TEMPLATE_SHEET = "Template"

TEMPLATE_ROWS: list[dict[str, object]] = [
    {"始发地": "北京", "目的地": "上海", "最小重量": 0, "最大重量": 10, "价格": 100},
    {"始发地": "北京", "目的地": "上海", "最小重量": 10, "最大重量": 20, "价格": 180},
    {"始发地": "深圳", "目的地": "成都", "最小重量": 0, "最大重量": 100, "价格": 500},
]


def write_template(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(TEMPLATE_ROWS).to_excel(path, sheet_name=TEMPLATE_SHEET, index=False)
    return path
