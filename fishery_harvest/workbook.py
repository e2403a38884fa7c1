"""
Sheet reading for survey workbooks.

Sheets are read through ``polars.read_excel`` (calamine engine) with a pandas /
openpyxl fallback, optionally as all-text so frequency codes survive
untouched, then converted column by column the way a text-first reader would.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd
import polars as pl

LOGGER = logging.getLogger(__name__)


def _read_with_pandas(path: Path, sheet_name: str, as_text: bool) -> pl.DataFrame:
    with pd.ExcelFile(path) as workbook:
        if sheet_name not in workbook.sheet_names:
            raise ValueError(
                f"Sheet '{sheet_name}' not found in {path}; available sheets: {', '.join(map(str, workbook.sheet_names))}"
            )
        frame = workbook.parse(sheet_name=sheet_name, dtype=str if as_text else None)
    frame.columns = [str(col) for col in frame.columns]
    if as_text:
        frame = frame.astype(object).where(frame.notna(), None)
        return pl.DataFrame(
            {col: pl.Series(col, frame[col].tolist(), dtype=pl.Utf8) for col in frame.columns}
        )
    return pl.from_pandas(frame)


def read_sheet(path: Path | str, sheet_name: str, *, as_text: bool = False) -> pl.DataFrame:
    """
    Read one named sheet into a Polars DataFrame.

    With ``as_text`` every column comes back as strings (empty cells are null).
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        read_options = {"infer_schema_length": 0} if as_text else {}
        df = pl.read_excel(path, sheet_name=sheet_name, **read_options)
        LOGGER.debug("Read sheet '%s' from %s with polars: %s", sheet_name, path, df.shape)
        return df
    except Exception as exc:  # pragma: no cover - delegated to fallback
        LOGGER.warning("polars.read_excel failed for %s [%s]; falling back to pandas. %s", path, sheet_name, exc)

    df = _read_with_pandas(path, sheet_name, as_text)
    LOGGER.debug("Read sheet '%s' from %s with pandas: %s", sheet_name, path, df.shape)
    return df


def _blank_to_null(column: str) -> pl.Expr:
    return (
        pl.when(pl.col(column).str.strip_chars().str.len_chars() == 0)
        .then(pl.lit(None))
        .otherwise(pl.col(column).str.strip_chars())
        .alias(column)
    )


def _converted(series: pl.Series) -> pl.Series:
    non_null = series.drop_nulls()
    if non_null.is_empty():
        return series
    as_int = non_null.cast(pl.Int64, strict=False)
    if as_int.null_count() == 0:
        return series.cast(pl.Int64, strict=False)
    as_float = non_null.cast(pl.Float64, strict=False)
    if as_float.null_count() == 0 and not as_float.is_nan().any():
        return series.cast(pl.Float64, strict=False)
    return series


def convert_column_types(df: pl.DataFrame, keep_text: Optional[Iterable[str]] = None) -> pl.DataFrame:
    """
    Guess numeric types for text columns.

    Blank strings become null. A column whose remaining values all parse as
    integers becomes Int64, as numbers Float64; anything else stays text.
    Columns in ``keep_text`` are only blank-stripped.
    """

    protected = set(keep_text or ())
    text_cols = [col for col, dtype in df.schema.items() if dtype == pl.Utf8]
    if not text_cols:
        return df
    df = df.with_columns([_blank_to_null(col) for col in text_cols])
    return df.with_columns(
        [_converted(df[col]) for col in text_cols if col not in protected]
    )
