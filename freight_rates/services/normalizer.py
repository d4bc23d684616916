from __future__ import annotations

import logging
import math
import re
import time
from collections.abc import Iterable, Mapping
from numbers import Real
from typing import Any

from ..models.cell_issue import CellIssue
from ..models.normalization_result import NormalizationResult
from ..models.rate_rule import ExactWeight, RateRule, Unspecified, WeightSpec, weight_spec_from_fields
from ..models.rule_set import RuleSet, TableShape
from .aliases import (
    DESTINATION_ALIASES,
    MAX_WEIGHT_ALIASES,
    MIN_WEIGHT_ALIASES,
    ORIGIN_ALIASES,
    PRICE_ALIASES,
    WEIGHT_ALIASES,
    is_blank,
    probe,
)

"""Table normalizer: raw spreadsheet rows -> RuleSet.

Two table shapes are supported and detected from the first row's headers:

- wide: one column per weight tier (``1kg``, ``2.5KG`` ...). Every parseable
  (row, weight column) cell becomes an ExactWeight rule; unparsable cells are
  dropped.
- long: one rule per row, weight given by min/max bounds or a single weight.
  A missing or unparsable price becomes 0 and the row is kept. A bound or
  weight that is present but not numeric makes the rule Unspecified, so it
  is kept but never matches.

The drop-vs-zero difference between the two shapes is long-standing
behavior and is kept as-is.
"""

__all__ = [
    "EmptyInputError",
    "UnparsableCellError",
    "WEIGHT_COLUMN_PATTERN",
    "detect_shape",
    "infer_columns",
    "normalize",
    "normalize_with_report",
]

logger = logging.getLogger(__name__)

# used with fullmatch: "$" would also accept a trailing newline
WEIGHT_COLUMN_PATTERN = re.compile(r"(\d+(?:\.\d+)?)kg", re.IGNORECASE)

IN_MEMORY_SOURCE = "<rows>"


class EmptyInputError(ValueError):
    """Raised when no rows are supplied to the normalizer."""


class UnparsableCellError(ValueError):
    """A single cell could not be read as a finite number.

    Never escapes the normalizer; it is turned into a CellIssue.
    """

    def __init__(self, value: Any, issue_type: str) -> None:
        super().__init__(f"{issue_type}: {value!r}")
        self.value = value
        self.issue_type = issue_type


def _to_number(value: Any) -> float:
    if is_blank(value):
        raise UnparsableCellError(value, "EMPTY_CELL")
    if isinstance(value, bool):
        raise UnparsableCellError(value, "NOT_A_NUMBER")
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise UnparsableCellError(value, "NOT_A_NUMBER") from None
    else:
        raise UnparsableCellError(value, "NOT_A_NUMBER")
    if not math.isfinite(number):
        raise UnparsableCellError(value, "NOT_FINITE")
    return number


def _to_text(value: Any) -> str:
    # Excel の数値セル (例: 1001.0) は整数表記に戻す
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _route(row: Mapping[str, Any]) -> tuple[str, str]:
    found_origin = probe(row, ORIGIN_ALIASES)
    found_dest = probe(row, DESTINATION_ALIASES)
    origin = _to_text(found_origin[1]) if found_origin else ""
    destination = _to_text(found_dest[1]) if found_dest else ""
    return origin, destination


def infer_columns(rows: list[Mapping[str, Any]]) -> list[str]:
    """Display column list: the first row's headers in order."""
    if not rows:
        return []
    return [str(k) for k in rows[0].keys()]


def detect_shape(rows: list[Mapping[str, Any]]) -> tuple[TableShape, list[str]]:
    """Return the table shape and, for wide sheets, the weight columns in order."""
    weight_columns = [c for c in infer_columns(rows) if WEIGHT_COLUMN_PATTERN.fullmatch(c)]
    if weight_columns:
        return "wide", weight_columns
    return "long", []


def _expand_wide(
    rows: list[Mapping[str, Any]],
    weight_columns: list[str],
    source: str,
    issues: list[CellIssue],
) -> list[RateRule]:
    weights = {col: float(WEIGHT_COLUMN_PATTERN.fullmatch(col).group(1)) for col in weight_columns}
    rules: list[RateRule] = []
    for index, row in enumerate(rows, start=1):
        origin, destination = _route(row)
        for col in weight_columns:
            try:
                price = _to_number(row.get(col))
            except UnparsableCellError as e:
                issues.append(CellIssue.create(source, index, col, e.issue_type, "DROPPED_RULE", e.value))
                continue
            rules.append(
                RateRule(
                    origin=origin,
                    destination=destination,
                    weight=ExactWeight(weights[col]),
                    price=price,
                    raw_data=dict(row),
                )
            )
    return rules


def _optional_number(
    row: Mapping[str, Any],
    aliases: tuple[str, ...],
    source: str,
    index: int,
    issues: list[CellIssue],
) -> float | None:
    found = probe(row, aliases)
    if found is None:
        return None
    header, value = found
    try:
        return _to_number(value)
    except UnparsableCellError as e:
        # 値はあるが数値でない: 欠損扱いにはせず NaN で印を付ける
        issues.append(CellIssue.create(source, index, header, e.issue_type, "KEPT_UNMATCHABLE", e.value))
        return math.nan


def _long_weight_spec(
    min_weight: float | None,
    max_weight: float | None,
    weight: float | None,
) -> WeightSpec:
    """Variant for a long row; an unparsable field it relies on makes it Unspecified."""
    spec = weight_spec_from_fields(min_weight, max_weight, weight)
    if any(math.isnan(v) for v in spec.to_fields().values()):
        return Unspecified()
    return spec


def _map_long(
    rows: list[Mapping[str, Any]],
    source: str,
    issues: list[CellIssue],
) -> list[RateRule]:
    rules: list[RateRule] = []
    for index, row in enumerate(rows, start=1):
        origin, destination = _route(row)
        spec = _long_weight_spec(
            _optional_number(row, MIN_WEIGHT_ALIASES, source, index, issues),
            _optional_number(row, MAX_WEIGHT_ALIASES, source, index, issues),
            _optional_number(row, WEIGHT_ALIASES, source, index, issues),
        )
        price = 0.0
        found = probe(row, PRICE_ALIASES)
        if found is not None:
            header, value = found
            try:
                price = _to_number(value)
            except UnparsableCellError as e:
                issues.append(CellIssue.create(source, index, header, e.issue_type, "DEFAULTED_TO_ZERO", e.value))
        rules.append(
            RateRule(
                origin=origin,
                destination=destination,
                weight=spec,
                price=price,
                raw_data=dict(row),
            )
        )
    return rules


def normalize_with_report(
    rows: Iterable[Mapping[str, Any]], source: str = IN_MEMORY_SOURCE
) -> NormalizationResult:
    """Normalize rows and report how the rule set was built.

    Args:
        rows: decoded spreadsheet rows (header -> scalar)
        source: display name of the input, used in issue records

    Returns:
        NormalizationResult holding the new RuleSet

    Raises:
        EmptyInputError: ``rows`` is empty
    """
    started = time.perf_counter()
    materialized = list(rows)
    if not materialized:
        raise EmptyInputError(f"no rows in {source}")

    shape, weight_columns = detect_shape(materialized)
    issues: list[CellIssue] = []
    if shape == "wide":
        rules = _expand_wide(materialized, weight_columns, source, issues)
    else:
        rules = _map_long(materialized, source, issues)

    for issue in issues:
        logger.debug(
            f"cell issue source={issue.source} row={issue.row} column={issue.column} "
            f"type={issue.issue_type} action={issue.action}"
        )
    logger.debug(f"normalized {source}: shape={shape} rows={len(materialized)} rules={len(rules)}")

    rule_set = RuleSet(
        rules=tuple(rules),
        columns=tuple(infer_columns(materialized)),
        shape=shape,
    )
    return NormalizationResult(
        rule_set=rule_set,
        source=source,
        total_rows=len(materialized),
        weight_columns=tuple(weight_columns),
        issues=tuple(issues),
        elapsed_seconds=time.perf_counter() - started,
    )


def normalize(rows: Iterable[Mapping[str, Any]]) -> RuleSet:
    """Convert raw spreadsheet rows into a RuleSet.

    Raises:
        EmptyInputError: ``rows`` is empty
    """
    return normalize_with_report(rows).rule_set
