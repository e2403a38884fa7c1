"""
Research-vessel (RV) survey harvester.

Reads the ``catch`` and ``effort`` sheets of an RV workbook and writes:

- length_info.csv: expanded length-frequency rows
- species_info.csv: distinct species
- RV_catch_info.csv: per-sample catch records
- rv_effort_info.csv: effort records
- rv_info.csv: distinct research vessels
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import List, Optional

import polars as pl

from fishery_common.expansion import ExpansionNotice, expand_all, samples_from_frame
from fishery_common.normalize import lowercase_headers, select_table
from fishery_common.schema import (
    LENGTH_OUTPUT_COLUMNS,
    ORIGINAL_CODE_COLUMNS,
    RV_EFFORT_DROP,
    RV_EFFORT_RENAMES,
    RV_FREQUENCY_CODE_COLS,
    TABLE_SCHEMAS,
    ensure_columns,
)

from .config import ExpansionSettings, HarvestSettings
from .output import CsvAppender, write_table
from .report import HarvestError, HarvestReport
from .workbook import convert_column_types, read_sheet

LOGGER = logging.getLogger(__name__)
CATCH_SHEET = "catch"
EFFORT_SHEET = "effort"


def _check_failures(notices: List[ExpansionNotice], max_failures: Optional[int]) -> None:
    if max_failures is not None and len(notices) > max_failures:
        raise HarvestError(
            f"{len(notices)} length samples failed to expand (limit {max_failures}); "
            f"first failure: sample {notices[0].sample_id}: {notices[0].reason}"
        )


def expand_length_table(
    length_input: pl.DataFrame,
    path: Path,
    expansion: ExpansionSettings,
) -> tuple[int, List[ExpansionNotice]]:
    """
    Expand the length input table batch by batch, streaming rows to ``path``.

    Returns (rows_written, notices); notice indexes refer to rows of
    ``length_input``.
    """

    columns = list(LENGTH_OUTPUT_COLUMNS)
    if expansion.keep_original_codes:
        columns.extend(ORIGINAL_CODE_COLUMNS.values())

    notices: List[ExpansionNotice] = []
    total = length_input.height
    n_batches = -(-total // expansion.batch_size) if total else 0

    with CsvAppender(path, columns) as appender:
        for batch_no, start in enumerate(range(0, total, expansion.batch_size), start=1):
            batch = length_input.slice(start, expansion.batch_size)
            samples = samples_from_frame(batch)
            result = expand_all(samples, max_workers=expansion.max_workers)

            frame = result.to_polars()
            if expansion.keep_original_codes:
                frame = frame.with_columns(
                    pl.Series(
                        ORIGINAL_CODE_COLUMNS["freq_raw"],
                        [samples[i].raw_code for i in result.row_sources],
                        dtype=pl.Utf8,
                    ),
                    pl.Series(
                        ORIGINAL_CODE_COLUMNS["freq_rise"],
                        [samples[i].raised_code for i in result.row_sources],
                        dtype=pl.Utf8,
                    ),
                )
            appender.append(frame.select(columns))

            notices.extend(dataclasses.replace(n, index=n.index + start) for n in result.notices)
            LOGGER.info(
                "Length batch %d/%d: %d samples -> %d rows (%d skipped)",
                batch_no,
                n_batches,
                result.samples_seen,
                len(result.rows),
                len(result.notices),
            )
            _check_failures(notices, expansion.max_failures)

    return appender.rows_written, notices


def harvest_rv(
    excel_path: Path | str,
    output_dir: Path | str,
    settings: HarvestSettings | None = None,
) -> HarvestReport:
    """Harvest an RV workbook into CSV tables under ``output_dir``."""

    settings = settings or HarvestSettings()
    excel_path = Path(excel_path)
    output_dir = Path(output_dir)
    if not excel_path.exists():
        raise FileNotFoundError(f"File not found: {excel_path}")

    report = HarvestReport(source=excel_path)

    catch = read_sheet(excel_path, CATCH_SHEET, as_text=True)
    ensure_columns(catch.columns, RV_FREQUENCY_CODE_COLS, "RV catch sheet")
    catch = convert_column_types(catch, keep_text=RV_FREQUENCY_CODE_COLS).rename(dict(RV_FREQUENCY_CODE_COLS))

    catch_tables = {name: select_table(catch, TABLE_SCHEMAS[name]) for name in ("species", "sampling")}
    length_schema = TABLE_SCHEMAS["length"]
    length_input = select_table(catch, length_schema)
    del catch

    length_path = output_dir / length_schema.file_name
    rows, notices = expand_length_table(length_input, length_path, settings.expansion)
    report.record(length_schema.name, length_path, rows)
    report.notices.extend(notices)

    for name, table in catch_tables.items():
        schema = TABLE_SCHEMAS[name]
        report.record(name, write_table(table, output_dir / schema.file_name), table.height)

    del catch_tables, length_input
    LOGGER.info("Harvesting of catch data completed.")

    effort = convert_column_types(read_sheet(excel_path, EFFORT_SHEET, as_text=True))
    ensure_columns(effort.columns, [*RV_EFFORT_DROP, *RV_EFFORT_RENAMES], "RV effort sheet")

    effort_schema = TABLE_SCHEMAS["rv_effort"]
    rv_effort = lowercase_headers(effort.drop(list(RV_EFFORT_DROP)).rename(dict(RV_EFFORT_RENAMES)))
    report.record(
        effort_schema.name, write_table(rv_effort, output_dir / effort_schema.file_name), rv_effort.height
    )

    vessel_schema = TABLE_SCHEMAS["rv_vessel"]
    rv_info = select_table(effort, vessel_schema)
    report.record(vessel_schema.name, write_table(rv_info, output_dir / vessel_schema.file_name), rv_info.height)

    LOGGER.info("Harvesting of effort data completed.")
    return report
