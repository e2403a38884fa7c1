from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

import polars as pl

from .schema import TableSchema, ensure_columns

ROW_ORDER_COL = "__row_order__"


def _uniq(seq: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for val in seq:
        if val in seen:
            continue
        seen.add(val)
        ordered.append(val)
    return ordered


def select_renamed(df: pl.DataFrame, columns: Mapping[str, str], *, distinct: bool = False, context: str = "table") -> pl.DataFrame:
    """
    Select raw columns and rename them to canonical names.

    The same raw column may appear once only; distinct keeps the first
    occurrence of each row.
    """

    ensure_columns(df.columns, columns.keys(), context)
    selected = df.select([pl.col(raw).alias(canon) for raw, canon in columns.items()])
    if distinct:
        selected = selected.unique(maintain_order=True)
    return selected


def select_table(df: pl.DataFrame, schema: TableSchema) -> pl.DataFrame:
    """Project a frame onto an output table schema."""

    return select_renamed(df, schema.columns, distinct=schema.distinct, context=schema.name)


def distinct_keys(df: pl.DataFrame, keys: Sequence[str], *, context: str = "keys") -> pl.DataFrame:
    """Distinct combinations of ``keys`` in first-seen order."""

    ensure_columns(df.columns, keys, context)
    return df.select(list(keys)).unique(maintain_order=True)


def number_rows(df: pl.DataFrame, name: str) -> pl.DataFrame:
    """Append a 1-based sequential identifier column."""

    return df.with_row_index(name, offset=1).select([*df.columns, name]).with_columns(
        pl.col(name).cast(pl.Int64)
    )


def append_missing_keys(base: pl.DataFrame, other: pl.DataFrame, keys: Sequence[str]) -> pl.DataFrame:
    """
    Rows of ``base`` followed by key combinations only present in ``other``.

    Nulls compare equal, so a blank key cell matches a blank key cell. Extra
    columns of ``base`` are null for the appended rows.
    """

    key_list = list(keys)
    other_keys = other.select(key_list).unique(maintain_order=True).with_row_index(ROW_ORDER_COL)
    extra = (
        other_keys.join(base.select(key_list), on=key_list, how="anti", nulls_equal=True)
        .sort(ROW_ORDER_COL)
        .drop(ROW_ORDER_COL)
    )
    if extra.is_empty():
        return base
    return pl.concat([base, extra], how="diagonal_relaxed")


def attach_ids(df: pl.DataFrame, id_table: pl.DataFrame, keys: Sequence[str]) -> pl.DataFrame:
    """Left-join identifiers from ``id_table`` onto ``df`` by the key columns, keeping row order."""

    key_list = _uniq(keys)
    return (
        df.with_row_index(ROW_ORDER_COL)
        .join(id_table, on=key_list, how="left", nulls_equal=True, coalesce=True)
        .sort(ROW_ORDER_COL)
        .drop(ROW_ORDER_COL)
    )


def lowercase_headers(df: pl.DataFrame) -> pl.DataFrame:
    return df.rename({col: col.lower() for col in df.columns})
