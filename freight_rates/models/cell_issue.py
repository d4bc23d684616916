from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""CellIssue model for unparsable spreadsheet cells.

A CellIssue is written for every cell the normalizer could not turn into a
number. Issues are non-fatal: the normalizer either drops the rule (wide
sheets) or substitutes 0 (long sheet prices) and carries on.

JSON Lines form has exactly the dataclass keys (no extras).
"""

__all__ = [
    "CellIssue",
]


@dataclass(frozen=True)
class CellIssue:
    """Structured record of one unparsable cell.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: spreadsheet name (or "<rows>" for in-memory input)
        row: 1-based data row number. -1 when the row is unknown
        column: header of the offending cell
        issue_type: classification in UPPER_SNAKE_CASE
        action: what the normalizer did about it (DROPPED_RULE / DEFAULTED_TO_ZERO / KEPT_UNMATCHABLE)
        value: repr of the raw cell value
    """
    timestamp: str  # ISO8601 UTC
    source: str
    row: int
    column: str
    issue_type: str  # UPPER_SNAKE
    action: str
    value: str

    @staticmethod
    def create(source: str, row: int, column: str, issue_type: str, action: str, value: object) -> CellIssue:
        """Create a new CellIssue stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return CellIssue(
            timestamp=ts,
            source=source,
            row=row,
            column=column,
            issue_type=issue_type,
            action=action,
            value=repr(value),
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
