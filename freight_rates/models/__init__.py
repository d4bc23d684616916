"""Domain models for the freight rate lookup tool."""

from .cell_issue import CellIssue
from .normalization_result import NormalizationResult
from .query import RateQuery
from .rate_rule import (
    ExactWeight,
    LowerBound,
    RateRule,
    Unspecified,
    UpperBound,
    WeightInterval,
    WeightSpec,
    weight_spec_from_fields,
)
from .rule_set import RuleSet, TableShape

__all__ = [
    # Rule models
    "RateRule",
    "WeightSpec",
    "ExactWeight",
    "WeightInterval",
    "LowerBound",
    "UpperBound",
    "Unspecified",
    "weight_spec_from_fields",
    "RuleSet",
    "TableShape",
    # Lookup / bookkeeping
    "RateQuery",
    "CellIssue",
    "NormalizationResult",
]
