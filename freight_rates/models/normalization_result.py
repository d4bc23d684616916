from __future__ import annotations

from dataclasses import dataclass

from .cell_issue import CellIssue
from .rule_set import RuleSet

"""NormalizationResult: a RuleSet plus the bookkeeping of how it was built.

Used by the CLI for the SUMMARY line and the issue log; callers that only
need the rules use ``normalize`` and never see this type.
"""

__all__ = [
    "NormalizationResult",
]


@dataclass(frozen=True)
class NormalizationResult:
    rule_set: RuleSet
    source: str  # 表示用ソース名
    total_rows: int  # 入力行数
    weight_columns: tuple[str, ...]  # wide 形式の重量列 (long 形式では空)
    issues: tuple[CellIssue, ...]
    elapsed_seconds: float

    @property
    def rule_count(self) -> int:
        return len(self.rule_set.rules)

    @property
    def skipped_cells(self) -> int:
        """Cells whose rule was dropped (wide sheets only)."""
        return sum(1 for i in self.issues if i.action == "DROPPED_RULE")
