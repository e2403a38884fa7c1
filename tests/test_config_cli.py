from pathlib import Path

import polars as pl
import pytest

import fishery_convert
from fishery_common.translation import (
    ColumnTranslation,
    load_translation_table,
    reverse_translate_columns,
    translate_columns,
)
from fishery_harvest.config import DEFAULT_BATCH_SIZE, ConfigError, load_settings

from conftest import write_workbook


def test_load_settings_resolves_relative_paths(tmp_path):
    config_path = Path(tmp_path) / "config.yaml"
    config_path.write_text(
        "output_dir: ./tables\n"
        "lookup_table: ./lookup.csv\n"
        "expansion:\n"
        "  batch_size: 250\n"
        "  max_workers: 4\n"
        "  max_failures: 3\n"
        "  keep_original_codes: true\n",
        encoding="utf-8",
    )
    settings = load_settings(config_path)

    assert settings.output_dir == (tmp_path / "tables").resolve()
    assert settings.lookup_table == (tmp_path / "lookup.csv").resolve()
    assert settings.expansion.batch_size == 250
    assert settings.expansion.max_workers == 4
    assert settings.expansion.max_failures == 3
    assert settings.expansion.keep_original_codes is True


def test_load_settings_defaults_for_empty_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("# nothing here\n", encoding="utf-8")
    settings = load_settings(config_path)
    assert settings.expansion.batch_size == DEFAULT_BATCH_SIZE
    assert settings.expansion.max_failures is None


@pytest.mark.parametrize(
    "body",
    [
        "expansion:\n  batch_size: 0\n",
        "expansion:\n  batch_size: many\n",
        "expansion:\n  max_failures: -1\n",
        "expansion: [1, 2]\n",
        "- just\n- a list\n",
        "expansion: {batch_size: [\n",
    ],
)
def test_invalid_config_raises(tmp_path, body):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(config_path)


def test_explicit_missing_config_raises(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "absent.yaml")


def test_translation_lookup_round_trip(tmp_path):
    lookup = tmp_path / "lookup.csv"
    lookup.write_text(
        "thai_name,english_name\nปี ค.ศ.,yearAD\nyearad,yearAD\nผลจับ,stat_yield_t\n,orphan\n",
        encoding="utf-8",
    )
    translation = load_translation_table(lookup)
    assert translation.reverse["yearAD"] == "ปี ค.ศ."

    df = pl.DataFrame({"ปี ค.ศ.": [2023], "Other": [1], "ผลจับ": [1.0]})
    translated = translate_columns(df, translation)
    assert translated.columns == ["yearAD", "other", "stat_yield_t"]
    assert reverse_translate_columns(translated, translation).columns == ["ปี ค.ศ.", "other", "ผลจับ"]


def test_translation_lookup_validates_columns(tmp_path):
    lookup = tmp_path / "lookup.csv"
    lookup.write_text("thai,english\nก,a\n", encoding="utf-8")
    with pytest.raises(ValueError, match="thai_name"):
        load_translation_table(lookup)
    with pytest.raises(FileNotFoundError):
        load_translation_table(tmp_path / "missing.csv")


def test_mixed_case_english_headers_are_matched_after_lowercasing():
    translation = ColumnTranslation.from_pairs({"YearAD": "yearAD"})
    df = pl.DataFrame({"YEARAD": [1]})
    assert translate_columns(df, translation).columns == ["yearAD"]


def test_cli_expand_prints_points(capsys):
    assert fishery_convert.main(["expand", "--code", "1,10,0,5,0"]) == 0
    assert capsys.readouterr().out.strip() == "11\t5"


def test_cli_expand_pairs_raw_and_raised(capsys):
    code = fishery_convert.main(["expand", "--code", "1,1,2,3", "--raised", "1,1,20,30"])
    assert code == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == ["1\t2\t1\t20", "2\t3\t2\t30"]


def test_cli_expand_reports_bad_code():
    assert fishery_convert.main(["expand", "--code", "0,1,2"]) == 1
    assert fishery_convert.main(["expand", "--code", "1,1,2,3", "--raised", "1,1,2"]) == 1


def test_cli_expand_blank_raw_code_prints_placeholder_row(capsys):
    assert fishery_convert.main(["expand", "--code", " ", "--raised", "1,1,2"]) == 0
    assert capsys.readouterr().out.strip() == "NA\tNA\tNA\tNA"


def test_cli_rv_harvest(rv_workbook, tmp_path):
    out = tmp_path / "cli_out"
    argv = ["rv", "--input", str(rv_workbook.parent), "--file", rv_workbook.name, "--output", str(out), "--batch-size", "2"]
    assert fishery_convert.main(argv) == 0
    assert (out / "length_info.csv").exists()
    assert (out / "rv_info.csv").exists()


def test_cli_missing_workbook_returns_error(tmp_path):
    argv = ["rv", "--input", str(tmp_path), "--file", "missing.xlsx", "--output", str(tmp_path / "out")]
    assert fishery_convert.main(argv) == 1


def test_cli_rejects_non_positive_batch_size(rv_workbook, tmp_path):
    argv = ["rv", "--input", str(rv_workbook.parent), "--file", rv_workbook.name, "--batch-size", "0"]
    assert fishery_convert.main(argv) == 1


def test_cli_without_command_prints_help(capsys):
    assert fishery_convert.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_cli_missing_sheet_returns_error(tmp_path):
    path = write_workbook(tmp_path / "rv.xlsx", {"effort": {"link": ["L1"]}})
    argv = ["rv", "--input", str(tmp_path), "--file", path.name, "--output", str(tmp_path / "out")]
    assert fishery_convert.main(argv) == 1


def test_cli_malformed_lookup_returns_error(rv_workbook, tmp_path):
    lookup = tmp_path / "lookup.csv"
    lookup.write_text("thai,english\nก,a\n", encoding="utf-8")
    argv = [
        "stat",
        "--input",
        str(rv_workbook.parent),
        "--file",
        rv_workbook.name,
        "--output",
        str(tmp_path / "out"),
        "--lookup",
        str(lookup),
    ]
    assert fishery_convert.main(argv) == 1
