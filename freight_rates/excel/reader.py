from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

"""Spreadsheet reader: workbook -> list of row mappings.

The first row of the sheet is the header; each following row becomes a
``{header: value}`` dict. Empty cells are left out of the mapping and rows
with no values at all are skipped, so downstream alias probing only ever sees
real values. Columns with an empty header are ignored; repeated headers get a
``_1``, ``_2`` ... suffix.
"""


class SheetReadError(Exception):
    """Raised when a workbook or sheet cannot be read."""


def _header_name(value: Any) -> str | None:
    if pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    name = str(value).strip()
    return name or None


def _dedupe(headers: list[str | None]) -> list[str | None]:
    seen: dict[str, int] = {}
    result: list[str | None] = []
    for h in headers:
        if h is None:
            result.append(None)
            continue
        if h in seen:
            seen[h] += 1
            result.append(f"{h}_{seen[h]}")
        else:
            seen[h] = 0
            result.append(h)
    return result


def _plain_value(value: Any) -> Any:
    # numpy スカラー / Timestamp は JSON 化できる Python 値へ
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def read_rate_rows(path: Path, sheet: str | None = None) -> list[dict[str, Any]]:
    """Read one sheet of a rate workbook as row mappings.

    Parameters
    ----------
    path: workbook path (.xlsx)
    sheet: sheet name; None reads the first sheet

    Raises
    ------
    SheetReadError: file missing/unreadable or sheet not found
    """
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise SheetReadError(f"cannot open {path}: {e}") from e
    if not xls.sheet_names:
        raise SheetReadError(f"no sheets in {path}")
    target = sheet if sheet is not None else xls.sheet_names[0]
    if target not in xls.sheet_names:
        raise SheetReadError(f"sheet '{target}' not found in {path.name}: {xls.sheet_names}")
    try:
        df = xls.parse(target, header=None)
    except Exception as e:
        raise SheetReadError(f"cannot parse sheet '{target}' in {path}: {e}") from e

    if df.shape[0] == 0:
        return []
    headers = _dedupe([_header_name(v) for v in df.iloc[0].tolist()])
    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        row: dict[str, Any] = {}
        for header, val in zip(headers, raw.tolist(), strict=False):
            if header is None or pd.isna(val):
                continue
            if isinstance(val, str) and val.strip() == "":
                continue
            row[header] = _plain_value(val)
        if row:
            rows.append(row)
    return rows
