"""Normalization, resolution and rule-set lifecycle services."""

from .normalizer import EmptyInputError, UnparsableCellError, normalize, normalize_with_report
from .resolver import NoMatchError, find_rule, resolve
from .state import NoRuleSetLoadedError, RuleSetHolder

__all__ = [
    "EmptyInputError",
    "UnparsableCellError",
    "normalize",
    "normalize_with_report",
    "NoMatchError",
    "find_rule",
    "resolve",
    "NoRuleSetLoadedError",
    "RuleSetHolder",
]
