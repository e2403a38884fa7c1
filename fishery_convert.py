#!/usr/bin/env python3
"""Fishery survey workbook converter.

Turns Research-Vessel (RV) and statistical (stat) survey workbooks into
normalized CSV tables. Each workbook must carry a ``catch`` and an ``effort``
sheet.

Usage
-----
- ``python fishery_convert.py rv --input ./inputs --file rv_2023.xlsx``
- ``python fishery_convert.py stat --input ./inputs --file stat_2023.xlsx --lookup lookup.csv``
- ``python fishery_convert.py expand --code "0.5,7.5,1,2,1" --raised "0.5,7.5,10,20,10"``

Settings (output directory, lookup table, expansion batch size, worker count
and failure threshold) come from ``config.yaml``; see
``fishery_harvest.config`` for the format.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from fishery_common.expansion import LengthSample, expand_all
from fishery_common.frequency import FrequencyParseError, decode_frequency_code
from fishery_common.translation import load_translation_table
from fishery_harvest.config import ConfigError, HarvestSettings, load_settings
from fishery_harvest.report import HarvestError, HarvestReport
from fishery_harvest.rv import harvest_rv
from fishery_harvest.stat import harvest_stat

LOGGER = logging.getLogger("fishery_convert")


def _settings(args: argparse.Namespace) -> HarvestSettings:
    settings = load_settings(args.config)
    if getattr(args, "output", None):
        settings.output_dir = args.output
    if getattr(args, "lookup", None):
        settings.lookup_table = args.lookup
    for option, attr in (("batch_size", "batch_size"), ("workers", "max_workers")):
        value = getattr(args, option, None)
        if value is None:
            continue
        if value < 1:
            raise ConfigError(f"--{option.replace('_', '-')} must be >= 1, got {value}")
        setattr(settings.expansion, attr, value)
    return settings


def _log_report(report: HarvestReport) -> None:
    for table, rows in report.table_row_counts.items():
        LOGGER.info("%-12s %8d rows -> %s", table, rows, report.written[table])
    if report.notices:
        LOGGER.warning("%d length sample(s) were skipped", len(report.notices))


def cmd_rv(args: argparse.Namespace) -> int:
    settings = _settings(args)
    report = harvest_rv(args.input / args.file, settings.output_dir, settings)
    _log_report(report)
    return 0


def cmd_stat(args: argparse.Namespace) -> int:
    settings = _settings(args)
    translation = load_translation_table(settings.lookup_table)
    report = harvest_stat(args.input / args.file, settings.output_dir, translation, settings)
    _log_report(report)
    return 0


def _format_value(value: Optional[float]) -> str:
    return "NA" if value is None else f"{value:g}"


def cmd_expand(args: argparse.Namespace) -> int:
    if args.raised is None:
        try:
            points = decode_frequency_code(args.code)
        except FrequencyParseError as exc:
            LOGGER.error("%s", exc)
            return 1
        for point in points:
            print(f"{point.size:g}\t{point.frequency:g}")
        return 0

    result = expand_all([LengthSample("cli", None, args.code, args.raised)])
    for row in result.rows:
        values = (row.raw_length, row.raw_frequency, row.raised_length, row.raised_frequency)
        print("\t".join(_format_value(value) for value in values))
    return 1 if result.notices else 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert fishery survey workbooks into normalized CSV tables",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    subparsers = parser.add_subparsers(dest="command")

    def add_harvest_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--input", type=Path, required=True, help="Directory containing the workbook.")
        sub.add_argument("--file", required=True, help="Workbook file name.")
        sub.add_argument("--output", type=Path, help="Output directory (default: from config).")
        sub.add_argument("--config", type=Path, help="Path to YAML config (default: config.yaml if present).")
        sub.add_argument("--batch-size", type=int, help="Length records expanded per batch.")
        sub.add_argument("--workers", type=int, help="Threads used to expand length samples.")

    rv = subparsers.add_parser("rv", help="Harvest a Research-Vessel survey workbook.")
    add_harvest_args(rv)
    rv.set_defaults(func=cmd_rv)

    stat = subparsers.add_parser("stat", help="Harvest a statistical catch/effort workbook.")
    add_harvest_args(stat)
    stat.add_argument("--lookup", type=Path, help="Thai/English column lookup CSV.")
    stat.set_defaults(func=cmd_stat)

    expand = subparsers.add_parser("expand", help="Decode a length-frequency code and print its size classes.")
    expand.add_argument("--code", required=True, help="Raw frequency code, e.g. '0.5,7.5,1,2,1'.")
    expand.add_argument("--raised", help="Raised frequency code to pair with the raw code.")
    expand.set_defaults(func=cmd_expand)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    level = logging.DEBUG if args.verbose > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    try:
        return args.func(args)
    except (ConfigError, HarvestError, FileNotFoundError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
