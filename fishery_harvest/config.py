"""YAML settings for the harvesters.

Sample ``config.yaml``::

    # Relative paths resolve from the config file location.
    output_dir: ./output
    lookup_table: ./lookup/thai_english_name_lookup.csv
    expansion:
      batch_size: 1000          # length records expanded per batch
      max_workers: 1            # >1 expands samples on a thread pool
      max_failures: null        # abort when more samples than this fail
      keep_original_codes: false
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from fishery_common.translation import DEFAULT_LOOKUP_PATH

DEFAULT_CONFIG_PATH = Path("config.yaml")
DEFAULT_BATCH_SIZE = 1000


class ConfigError(ValueError):
    """Raised when the YAML configuration is invalid."""


@dataclass
class ExpansionSettings:
    batch_size: int = DEFAULT_BATCH_SIZE
    max_workers: int = 1
    max_failures: Optional[int] = None
    keep_original_codes: bool = False


@dataclass
class HarvestSettings:
    output_dir: Path = Path("./output")
    lookup_table: Path = DEFAULT_LOOKUP_PATH
    expansion: ExpansionSettings = field(default_factory=ExpansionSettings)


def _resolve_path(base: Path, value: str) -> Path:
    return (base / value).expanduser().resolve()


def _as_int(section: Dict[str, Any], key: str, default: Optional[int], *, minimum: int) -> Optional[int]:
    value = section.get(key, default)
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"expansion.{key} must be an integer, got {value!r}") from exc
    if number < minimum:
        raise ConfigError(f"expansion.{key} must be >= {minimum}, got {number}")
    return number


def parse_settings(raw: Dict[str, Any], base: Path) -> HarvestSettings:
    if not isinstance(raw, dict):
        raise ConfigError("Configuration must be a mapping")

    expansion_cfg = raw.get("expansion") or {}
    if not isinstance(expansion_cfg, dict):
        raise ConfigError("`expansion` section must be a mapping")

    expansion = ExpansionSettings(
        batch_size=_as_int(expansion_cfg, "batch_size", DEFAULT_BATCH_SIZE, minimum=1),
        max_workers=_as_int(expansion_cfg, "max_workers", 1, minimum=1),
        max_failures=_as_int(expansion_cfg, "max_failures", None, minimum=0),
        keep_original_codes=bool(expansion_cfg.get("keep_original_codes", False)),
    )

    lookup = raw.get("lookup_table")
    return HarvestSettings(
        output_dir=_resolve_path(base, str(raw.get("output_dir", "./output"))),
        lookup_table=_resolve_path(base, str(lookup)) if lookup else DEFAULT_LOOKUP_PATH,
        expansion=expansion,
    )


def load_settings(path: Path | None = None) -> HarvestSettings:
    """Load settings from YAML; without an explicit path a missing config.yaml yields defaults."""

    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return HarvestSettings()
        path = DEFAULT_CONFIG_PATH
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    return parse_settings(raw, path.resolve().parent)
