from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..excel.reader import SheetReadError, read_rate_rows
from ..models.normalization_result import NormalizationResult
from .cache import RuleSetCache
from .normalizer import EmptyInputError
from .state import RuleSetHolder

"""Where the current rule set comes from.

Startup order: the cached upload (custom data) first, then the configured
default spreadsheet. The default file is never written to the cache; only an
explicit upload is.
"""

__all__ = [
    "DataOrigin",
    "LoadStatus",
    "load_current",
    "load_spreadsheet",
    "reset_to_default",
]

logger = logging.getLogger(__name__)


class DataOrigin(Enum):
    """Which data the holder currently serves."""
    CACHE = "cache"  # 前回アップロードしたデータ
    UPLOAD = "upload"
    DEFAULT = "default"
    NONE = "none"


@dataclass(frozen=True)
class LoadStatus:
    origin: DataOrigin
    message: str
    result: NormalizationResult | None = None  # None for cache restores
    cached: bool = False


def load_spreadsheet(
    path: Path,
    holder: RuleSetHolder,
    *,
    sheet: str | None = None,
    cache: RuleSetCache | None = None,
) -> LoadStatus:
    """Read, normalize and install a spreadsheet.

    With ``cache`` given the new rule set is also persisted (upload path).

    Raises:
        SheetReadError: workbook unreadable
        EmptyInputError: sheet has no data rows; the holder keeps its old snapshot
    """
    rows = read_rate_rows(path, sheet=sheet)
    result = holder.load_rows(rows, source=path.name)
    if cache is None:
        return LoadStatus(DataOrigin.DEFAULT, "loaded default rate data", result)
    saved = cache.save(result.rule_set)
    if saved:
        message = f"loaded and saved {result.rule_count} rules"
    else:
        message = f"loaded {result.rule_count} rules, but they could not be saved to the cache"
    return LoadStatus(DataOrigin.UPLOAD, message, result, cached=saved)


def _load_default(default_file: Path, holder: RuleSetHolder, sheet: str | None) -> LoadStatus:
    if not default_file.exists():
        logger.info(f"default rate file not found: {default_file}")
        return LoadStatus(DataOrigin.NONE, "no default data found, load a spreadsheet first")
    try:
        return load_spreadsheet(default_file, holder, sheet=sheet)
    except (SheetReadError, EmptyInputError) as e:
        logger.warning(f"default rate file unusable: {e}")
        return LoadStatus(DataOrigin.NONE, f"default data unusable: {e}")


def load_current(
    holder: RuleSetHolder,
    cache: RuleSetCache,
    default_file: Path,
    *,
    sheet: str | None = None,
) -> LoadStatus:
    """Install the cached rule set, falling back to the default spreadsheet."""
    cached = cache.load()
    if cached is not None:
        holder.replace(cached)
        logger.debug(f"restored {len(cached)} rules from cache {cache.path}")
        return LoadStatus(DataOrigin.CACHE, "loaded your last uploaded data")
    return _load_default(default_file, holder, sheet)


def reset_to_default(
    holder: RuleSetHolder,
    cache: RuleSetCache,
    default_file: Path,
    *,
    sheet: str | None = None,
) -> LoadStatus:
    """Forget the uploaded data and go back to the default spreadsheet."""
    cache.clear()
    holder.clear()
    return _load_default(default_file, holder, sheet)
