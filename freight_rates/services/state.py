from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from typing import Any

from ..models.normalization_result import NormalizationResult
from ..models.query import RateQuery
from ..models.rule_set import RuleSet
from .normalizer import normalize_with_report
from .resolver import resolve

"""Holder for the current RuleSet.

One writer (load / replace / clear) swaps the whole snapshot reference under a
lock; readers grab the reference once and resolve against it, so a reload in
between never mixes two rule sets within one lookup.
"""

__all__ = [
    "NoRuleSetLoadedError",
    "RuleSetHolder",
]


class NoRuleSetLoadedError(RuntimeError):
    """Raised when quoting before any rule set was loaded."""


class RuleSetHolder:
    def __init__(self, initial: RuleSet | None = None) -> None:
        self._lock = threading.Lock()
        self._current = initial

    @property
    def current(self) -> RuleSet | None:
        with self._lock:
            return self._current

    def replace(self, rule_set: RuleSet) -> RuleSet | None:
        """Swap in ``rule_set``; returns the previous snapshot."""
        with self._lock:
            previous, self._current = self._current, rule_set
        return previous

    def load_rows(self, rows: Iterable[Mapping[str, Any]], source: str = "<rows>") -> NormalizationResult:
        """Normalize ``rows`` and make the result current.

        On EmptyInputError the current snapshot is left untouched.
        """
        result = normalize_with_report(rows, source=source)
        self.replace(result.rule_set)
        return result

    def clear(self) -> None:
        with self._lock:
            self._current = None

    def quote(self, query: RateQuery) -> float:
        """Resolve ``query`` against the snapshot current at call time.

        Raises:
            NoRuleSetLoadedError: nothing loaded yet
            NoMatchError: no rule matches
        """
        snapshot = self.current
        if snapshot is None:
            raise NoRuleSetLoadedError("no rate data loaded")
        return resolve(snapshot, query)
