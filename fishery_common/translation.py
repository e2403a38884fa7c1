"""
Thai <-> English column-name translation for statistical workbooks.

The lookup table is a two-column CSV (``thai_name``, ``english_name``). It is
loaded once by the caller and passed in; nothing here holds global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping

import polars as pl

LOOKUP_COLUMNS = ("thai_name", "english_name")
DEFAULT_LOOKUP_PATH = Path(__file__).resolve().parent / "data" / "thai_english_name_lookup.csv"


@dataclass(frozen=True)
class ColumnTranslation:
    forward: Mapping[str, str] = field(default_factory=dict)  # thai -> english
    reverse: Mapping[str, str] = field(default_factory=dict)  # english -> thai

    @classmethod
    def from_pairs(cls, pairs: Mapping[str, str]) -> "ColumnTranslation":
        forward: Dict[str, str] = {}
        reverse: Dict[str, str] = {}
        for thai, english in pairs.items():
            if not thai or not english:
                continue
            forward[str(thai).lower()] = str(english)
            # first Thai name wins when several map to one English name
            reverse.setdefault(str(english), str(thai))
        return cls(forward=forward, reverse=reverse)


def load_translation_table(path: Path | str) -> ColumnTranslation:
    """Read the lookup CSV; blank cells are ignored."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Translation lookup not found: {path}")

    table = pl.read_csv(path, infer_schema_length=0, truncate_ragged_lines=True)
    missing = [col for col in LOOKUP_COLUMNS if col not in table.columns]
    if missing:
        raise ValueError(f"Translation lookup {path} is missing columns: {', '.join(missing)}")

    pairs: Dict[str, str] = {}
    for thai, english in table.select(list(LOOKUP_COLUMNS)).rows():
        if thai is None or english is None:
            continue
        thai, english = thai.strip(), english.strip()
        if thai and english:
            pairs.setdefault(thai, english)
    return ColumnTranslation.from_pairs(pairs)


def translate_columns(df: pl.DataFrame, translation: ColumnTranslation) -> pl.DataFrame:
    """Lower-case headers, then replace known Thai names with their English names."""

    rename_map = {}
    for col in df.columns:
        lowered = col.lower()
        rename_map[col] = translation.forward.get(lowered, lowered)
    return df.rename(rename_map)


def reverse_translate_columns(df: pl.DataFrame, translation: ColumnTranslation) -> pl.DataFrame:
    """Replace English headers with their Thai names; unknown headers are kept."""

    return df.rename({col: translation.reverse.get(col, col) for col in df.columns})
