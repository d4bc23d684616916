from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config/freight.yml
- Validate against the packaged JSON schema (schema.json next to this module)
- Apply defaults (cache_file, sheet, price_precision, preview_rows)
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/freight.yml")
DEFAULT_CACHE_FILE = ".cache/freight_data_cache.json"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    default_file: str  # 既定の運賃表 (.xlsx)
    cache_file: str
    sheet: str | None  # None -> 先頭シート
    price_precision: int
    preview_rows: int


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the config violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    return AppConfig(
        default_file=data["default_file"],
        cache_file=data.get("cache_file", DEFAULT_CACHE_FILE),
        sheet=data.get("sheet"),
        price_precision=data.get("price_precision", 2),
        preview_rows=data.get("preview_rows", 5),
    )
