from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

"""RateRule domain model and the weight specifier variants.

A rate rule is one canonical (origin, destination, weight specifier, price)
record. The weight specifier is a tagged variant: exactly one of
ExactWeight / WeightInterval / LowerBound / UpperBound / Unspecified is carried
by every rule, so the resolver's weight test is a single dispatch.

Serialized form (cache payload) keeps the spreadsheet-facing key names:
``minWeight`` / ``maxWeight`` / ``weight``; only the keys the variant carries
are written.
"""

__all__ = [
    "ExactWeight",
    "WeightInterval",
    "LowerBound",
    "UpperBound",
    "Unspecified",
    "WeightSpec",
    "RateRule",
    "weight_spec_from_fields",
]


@dataclass(frozen=True)
class ExactWeight:
    """Point match: the queried weight must equal ``weight`` exactly."""
    weight: float

    def accepts(self, weight: float) -> bool:
        # 許容誤差なし (1kg 列と 1.0001 は一致しない)
        return weight == self.weight

    def to_fields(self) -> dict[str, float]:
        return {"weight": self.weight}


@dataclass(frozen=True)
class WeightInterval:
    """Closed interval, both bounds inclusive."""
    min_weight: float
    max_weight: float

    def accepts(self, weight: float) -> bool:
        return self.min_weight <= weight <= self.max_weight

    def to_fields(self) -> dict[str, float]:
        return {"minWeight": self.min_weight, "maxWeight": self.max_weight}


@dataclass(frozen=True)
class LowerBound:
    min_weight: float

    def accepts(self, weight: float) -> bool:
        return weight >= self.min_weight

    def to_fields(self) -> dict[str, float]:
        return {"minWeight": self.min_weight}


@dataclass(frozen=True)
class UpperBound:
    max_weight: float

    def accepts(self, weight: float) -> bool:
        return weight <= self.max_weight

    def to_fields(self) -> dict[str, float]:
        return {"maxWeight": self.max_weight}


@dataclass(frozen=True)
class Unspecified:
    """No weight information at all; such a rule never matches."""

    def accepts(self, weight: float) -> bool:
        return False

    def to_fields(self) -> dict[str, float]:
        return {}


WeightSpec = Union[ExactWeight, WeightInterval, LowerBound, UpperBound, Unspecified]


def weight_spec_from_fields(
    min_weight: float | None,
    max_weight: float | None,
    weight: float | None,
) -> WeightSpec:
    """Pick the weight variant from optional bound/weight fields.

    Precedence: both bounds > lower bound only > upper bound only > exact
    weight > unspecified. ``None`` means the field was absent; ``0`` is a real
    bound.
    """
    if min_weight is not None and max_weight is not None:
        return WeightInterval(min_weight, max_weight)
    if min_weight is not None:
        return LowerBound(min_weight)
    if max_weight is not None:
        return UpperBound(max_weight)
    if weight is not None:
        return ExactWeight(weight)
    return Unspecified()


@dataclass(frozen=True)
class RateRule:
    """One canonical rate rule used for lookup.

    ``raw_data`` keeps the spreadsheet row the rule came from for preview
    display; it plays no part in matching.
    """
    origin: str
    destination: str
    weight: WeightSpec
    price: float
    raw_data: dict[str, Any] | None = None

    @property
    def min_weight(self) -> float | None:
        return getattr(self.weight, "min_weight", None)

    @property
    def max_weight(self) -> float | None:
        return getattr(self.weight, "max_weight", None)

    @property
    def exact_weight(self) -> float | None:
        if isinstance(self.weight, ExactWeight):
            return self.weight.weight
        return None

    def matches_route(self, origin: str, destination: str) -> bool:
        return self.origin == origin and self.destination == destination

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "origin": self.origin,
            "destination": self.destination,
        }
        data.update(self.weight.to_fields())
        data["price"] = self.price
        if self.raw_data is not None:
            data["rawData"] = dict(self.raw_data)
        return data

    @staticmethod
    def from_dict(data: dict[str, Any]) -> RateRule:
        """Rebuild a rule from its ``to_dict`` form.

        Raises:
            KeyError: origin/destination/price missing
        """
        spec = weight_spec_from_fields(
            data.get("minWeight"),
            data.get("maxWeight"),
            data.get("weight"),
        )
        raw = data.get("rawData")
        return RateRule(
            origin=data["origin"],
            destination=data["destination"],
            weight=spec,
            price=data["price"],
            raw_data=dict(raw) if raw is not None else None,
        )
