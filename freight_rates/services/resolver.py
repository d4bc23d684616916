from __future__ import annotations

import logging

from ..models.query import RateQuery
from ..models.rate_rule import RateRule
from ..models.rule_set import RuleSet

"""Rate resolver: first-match lookup of a query against a RuleSet.

Rules are scanned in stored order and the first rule whose route matches
exactly (case-sensitive, after trimming the query) and whose weight variant
accepts the weight wins. Overlapping intervals are not ranked: the earlier
row wins.
"""

__all__ = [
    "NoMatchError",
    "find_rule",
    "resolve",
]

logger = logging.getLogger(__name__)


class NoMatchError(LookupError):
    """No rule applies to the query. An expected outcome, not a fault."""

    def __init__(self, query: RateQuery) -> None:
        super().__init__(
            f"no rate rule for {query.origin!r} -> {query.destination!r} at {query.weight:g} kg"
        )
        self.query = query


def find_rule(rule_set: RuleSet, query: RateQuery) -> RateRule:
    """Return the first rule matching ``query``.

    Raises:
        NoMatchError: no rule matches
    """
    q = query.normalized()
    for rule in rule_set.rules:
        if rule.matches_route(q.origin, q.destination) and rule.weight.accepts(q.weight):
            return rule
    logger.debug(f"no match origin={q.origin} destination={q.destination} weight={q.weight}")
    raise NoMatchError(q)


def resolve(rule_set: RuleSet, query: RateQuery) -> float:
    """Return the price of the first rule matching ``query``.

    Raises:
        NoMatchError: no rule matches
    """
    return find_rule(rule_set, query).price
