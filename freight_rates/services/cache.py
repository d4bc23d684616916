from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.rule_set import RuleSet

"""Persistent cache for the last uploaded RuleSet.

Payload (JSON, UTF-8)::

    {"rules": [...], "columns": [...], "shape": "wide|long", "timestamp": <epoch ms>}

A payload that fails to parse or validate is removed and treated as absent.
Write failures are logged and reported to the caller, never raised: the
loaded rule set stays usable even when it cannot be persisted.
"""

__all__ = [
    "CACHE_SCHEMA",
    "CacheError",
    "RuleSetCache",
]

logger = logging.getLogger(__name__)

_RULE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["origin", "destination", "price"],
    "properties": {
        "origin": {"type": "string"},
        "destination": {"type": "string"},
        "price": {"type": "number"},
        "minWeight": {"type": "number"},
        "maxWeight": {"type": "number"},
        "weight": {"type": "number"},
        "rawData": {"type": "object"},
    },
    "additionalProperties": False,
}

CACHE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["rules", "columns", "timestamp"],
    "properties": {
        "rules": {"type": "array", "items": _RULE_SCHEMA},
        "columns": {"type": "array", "items": {"type": "string"}},
        "shape": {"enum": ["wide", "long"]},
        "timestamp": {"type": "integer"},
    },
    "additionalProperties": False,
}


class CacheError(Exception):
    """Cache payload could not be read or validated."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard json constant {name}")


class RuleSetCache:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, rule_set: RuleSet) -> bool:
        """Persist ``rule_set``. Returns False (and logs WARN) on failure."""
        try:
            text = json.dumps(rule_set.to_dict(), ensure_ascii=False, allow_nan=False, default=str)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"cache: could not save {len(rule_set)} rules to {self.path}: {e}")
            return False
        logger.debug(f"cache: saved {len(rule_set)} rules to {self.path}")
        return True

    def read(self) -> RuleSet:
        """Read and validate the payload.

        Raises:
            FileNotFoundError: no cache file
            CacheError: payload is not UTF-8 JSON, fails validation or
                cannot be rebuilt into a RuleSet
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CacheError(f"cache is not utf-8: {e}") from e
        try:
            data = json.loads(text, parse_constant=_reject_constant)
            jsonschema.validate(data, CACHE_SCHEMA)
        except ValidationError as e:
            raise CacheError(f"cache validation failed: {e.message}") from e
        except ValueError as e:
            raise CacheError(f"invalid cache json: {e}") from e
        try:
            return RuleSet.from_dict(data)
        except (KeyError, ValueError, OverflowError, OSError) as e:
            # 範囲外の timestamp など
            raise CacheError(f"cache payload unusable: {e}") from e

    def load(self) -> RuleSet | None:
        """Return the cached RuleSet, or None when absent or corrupt.

        A corrupt cache file is deleted.
        """
        if not self.path.exists():
            return None
        try:
            return self.read()
        except CacheError as e:
            logger.warning(f"cache: {e} -> removing {self.path}")
            self.clear()
            return None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
