from __future__ import annotations

from dataclasses import dataclass

"""RateQuery model: one user lookup (origin, destination, weight)."""

__all__ = [
    "RateQuery",
]


@dataclass(frozen=True)
class RateQuery:
    origin: str
    destination: str
    weight: float

    def normalized(self) -> RateQuery:
        """Return a copy with surrounding whitespace removed from the route."""
        return RateQuery(
            origin=self.origin.strip(),
            destination=self.destination.strip(),
            weight=float(self.weight),
        )
