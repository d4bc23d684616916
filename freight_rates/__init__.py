"""Freight rate lookup: spreadsheet rate tables -> rule set -> price.

Usage:
    from freight_rates import RateQuery, normalize, resolve

    rules = normalize(rows)
    price = resolve(rules, RateQuery(origin="北京", destination="上海", weight=10))
"""

from .models import RateQuery, RateRule, RuleSet
from .services import EmptyInputError, NoMatchError, normalize, resolve

__all__ = [
    "RateQuery",
    "RateRule",
    "RuleSet",
    "EmptyInputError",
    "NoMatchError",
    "normalize",
    "resolve",
]
