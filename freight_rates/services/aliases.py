from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

"""Column-name aliases for rate spreadsheets.

Each logical field has an ordered list of candidate headers (Chinese first,
then English spellings). ``probe`` walks the list and returns the first
candidate that is present with a usable value.
"""

__all__ = [
    "ORIGIN_ALIASES",
    "DESTINATION_ALIASES",
    "MIN_WEIGHT_ALIASES",
    "MAX_WEIGHT_ALIASES",
    "WEIGHT_ALIASES",
    "PRICE_ALIASES",
    "is_absent",
    "is_blank",
    "probe",
]

ORIGIN_ALIASES: tuple[str, ...] = ("始发地", "Origin", "origin")
DESTINATION_ALIASES: tuple[str, ...] = ("目的地", "Destination", "destination")
MIN_WEIGHT_ALIASES: tuple[str, ...] = ("最小重量", "MinWeight", "min_weight", "minWeight")
MAX_WEIGHT_ALIASES: tuple[str, ...] = ("最大重量", "MaxWeight", "max_weight", "maxWeight")
WEIGHT_ALIASES: tuple[str, ...] = ("重量", "Weight", "weight")
PRICE_ALIASES: tuple[str, ...] = ("价格", "金额", "Price", "Amount", "price")


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only strings (an empty spreadsheet cell)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def is_absent(value: Any) -> bool:
    """True for None, NaN and the empty string. Whitespace-only text is present."""
    if isinstance(value, str):
        return value == ""
    return is_blank(value)


def probe(row: Mapping[str, Any], aliases: tuple[str, ...]) -> tuple[str, Any] | None:
    """Return ``(header, value)`` for the first alias present in ``row``.

    Absent cells (None, NaN, "") let a later alias supply the value. A numeric
    0 and whitespace-only text are present.
    """
    for key in aliases:
        if key in row and not is_absent(row[key]):
            return key, row[key]
    return None
