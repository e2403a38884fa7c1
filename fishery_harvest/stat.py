"""
Statistical (stat) catch and effort harvester.

Column headers in stat workbooks may be Thai; they are translated to English
through an injected ``ColumnTranslation`` before any selection. Each distinct
combination of the stat key columns becomes one ``stat_info`` record with a
sequential ``stat_record_ids``; catch and effort values reference it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import polars as pl

from fishery_common.normalize import append_missing_keys, attach_ids, distinct_keys, number_rows, select_table
from fishery_common.schema import (
    STAT_AREA_COLUMNS,
    STAT_CATCH_VALUE_COLUMNS,
    STAT_EFFORT_VALUE_COLUMNS,
    STAT_KEY_COLUMNS,
    STAT_RECORD_ID,
    STAT_SPECIES_RENAMES,
    TABLE_SCHEMAS,
    ensure_columns,
)
from fishery_common.translation import (
    ColumnTranslation,
    load_translation_table,
    reverse_translate_columns,
    translate_columns,
)

from .config import HarvestSettings
from .output import write_table
from .report import HarvestReport
from .workbook import convert_column_types, read_sheet

LOGGER = logging.getLogger(__name__)
CATCH_SHEET = "catch"
EFFORT_SHEET = "effort"


def _read_translated(path: Path, sheet: str, translation: ColumnTranslation) -> pl.DataFrame:
    frame = translate_columns(read_sheet(path, sheet, as_text=True), translation)
    LOGGER.debug("Translated '%s' columns: %s", sheet, frame.columns)
    # keys stay text until output so joins never see mismatched dtypes
    return convert_column_types(frame, keep_text=frame.columns)


def _write(report: HarvestReport, name: str, frame: pl.DataFrame, output_dir: Path) -> None:
    schema = TABLE_SCHEMAS[name]
    frame = convert_column_types(frame)
    report.record(name, write_table(frame, output_dir / schema.file_name), frame.height)


def build_catch_tables(catch: pl.DataFrame) -> tuple[pl.DataFrame, pl.DataFrame, pl.DataFrame]:
    """Return (species_info, stat_info_catch, catch_info) from a translated catch sheet."""

    ensure_columns(
        catch.columns,
        [*STAT_KEY_COLUMNS, *STAT_CATCH_VALUE_COLUMNS, *STAT_SPECIES_RENAMES],
        "stat catch sheet",
    )
    species_info = catch.rename(dict(STAT_SPECIES_RENAMES))
    stat_info_catch = number_rows(distinct_keys(catch, STAT_KEY_COLUMNS), STAT_RECORD_ID)
    catch_info = attach_ids(catch, stat_info_catch, STAT_KEY_COLUMNS).select(
        [STAT_RECORD_ID, *STAT_CATCH_VALUE_COLUMNS]
    )
    return species_info, stat_info_catch, catch_info


def build_effort_tables(
    effort: pl.DataFrame, stat_info_catch: pl.DataFrame
) -> tuple[pl.DataFrame, pl.DataFrame, pl.DataFrame]:
    """
    Return (stat_area_info, stat_info, effort_info) from a translated effort sheet.

    ``stat_info`` lists the catch key combinations first, then those only seen
    in effort, renumbered from 1; catch identifiers are therefore unchanged.
    """

    ensure_columns(
        effort.columns,
        [*STAT_KEY_COLUMNS, *STAT_AREA_COLUMNS, *STAT_EFFORT_VALUE_COLUMNS],
        "stat effort sheet",
    )
    area_info = select_table(effort, TABLE_SCHEMAS["stat_area"])

    combined = append_missing_keys(stat_info_catch, distinct_keys(effort, STAT_KEY_COLUMNS), STAT_KEY_COLUMNS)
    stat_info = number_rows(combined.drop(STAT_RECORD_ID), STAT_RECORD_ID)

    effort_info = (
        attach_ids(effort, stat_info, STAT_KEY_COLUMNS)
        .select([STAT_RECORD_ID, *STAT_EFFORT_VALUE_COLUMNS])
        .filter(pl.any_horizontal([pl.col(col).is_not_null() for col in STAT_EFFORT_VALUE_COLUMNS]))
    )
    return area_info, stat_info, effort_info


def harvest_stat(
    excel_path: Path | str,
    output_dir: Path | str,
    translation: Optional[ColumnTranslation] = None,
    settings: HarvestSettings | None = None,
) -> HarvestReport:
    """Harvest a statistical workbook into CSV tables under ``output_dir``."""

    settings = settings or HarvestSettings()
    excel_path = Path(excel_path)
    output_dir = Path(output_dir)
    if not excel_path.exists():
        raise FileNotFoundError(f"File not found: {excel_path}")
    if translation is None:
        translation = load_translation_table(settings.lookup_table)

    report = HarvestReport(source=excel_path)

    catch = _read_translated(excel_path, CATCH_SHEET, translation)
    species_info, stat_info_catch, catch_info = build_catch_tables(catch)
    _write(report, "stat_species", species_info, output_dir)
    _write(report, "stat_catch", catch_info, output_dir)
    del catch, species_info, catch_info
    LOGGER.info("Harvesting of catch data completed.")

    effort = _read_translated(excel_path, EFFORT_SHEET, translation)
    area_info, stat_info, effort_info = build_effort_tables(effort, stat_info_catch)

    _write(report, "stat_area", area_info, output_dir)
    _write(report, "stat_info", reverse_translate_columns(stat_info, translation), output_dir)
    _write(report, "stat_effort", effort_info, output_dir)

    LOGGER.info("Harvesting of effort data completed.")
    return report
