from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from .rate_rule import RateRule

"""RuleSet snapshot model.

A RuleSet is the ordered rule list plus the display column list detected from
the source spreadsheet. It is replaced wholesale on every load and never
mutated in place (tuples only).
"""

__all__ = [
    "RuleSet",
    "TableShape",
]

TableShape = Literal["wide", "long"]


@dataclass(frozen=True)
class RuleSet:
    """Normalized, immutable rule snapshot.

    ``created_at`` is informational (cache staleness/debugging) and is
    excluded from equality so that normalizing the same rows twice yields
    equal snapshots.
    """
    rules: tuple[RateRule, ...]
    columns: tuple[str, ...]
    shape: TableShape = "long"
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def origin_options(self) -> list[str]:
        """Distinct non-empty origins, sorted."""
        return sorted({r.origin for r in self.rules if r.origin})

    def destination_options(self) -> list[str]:
        return sorted({r.destination for r in self.rules if r.destination})

    def weight_options(self) -> list[float]:
        """Distinct exact weights ascending (wide sheets offer a fixed weight list)."""
        return sorted({r.exact_weight for r in self.rules if r.exact_weight is not None})

    def preview(self, limit: int = 5) -> list[dict[str, Any]]:
        """Raw source rows of the first ``limit`` rules."""
        return [dict(r.raw_data or {}) for r in self.rules[:limit]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rules": [r.to_dict() for r in self.rules],
            "columns": list(self.columns),
            "shape": self.shape,
            "timestamp": int(self.created_at.timestamp() * 1000),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> RuleSet:
        ts = data.get("timestamp")
        created = (
            datetime.fromtimestamp(ts / 1000, UTC) if isinstance(ts, (int, float)) else datetime.now(UTC)
        )
        return RuleSet(
            rules=tuple(RateRule.from_dict(r) for r in data["rules"]),
            columns=tuple(data["columns"]),
            shape=data.get("shape", "long"),
            created_at=created,
        )
