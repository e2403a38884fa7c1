import polars as pl
import pytest

from fishery_common.schema import STAT_KEY_COLUMNS
from fishery_common.translation import DEFAULT_LOOKUP_PATH, ColumnTranslation, load_translation_table
from fishery_harvest.stat import build_catch_tables, build_effort_tables, harvest_stat

from conftest import write_workbook


def _keys(months, stat_area="1"):
    n = len(months)
    return {
        "yearAD": ["2023"] * n,
        "yearBE": ["2566"] * n,
        "month": list(months),
        "month_thai": [f"m{m}" for m in months],
        "gear_group_thai2": ["อวนลาก"] * n,
        "gear_group_eng": ["trawl"] * n,
        "vessel_size_thai": ["ใหญ่"] * n,
        "vessel_class": ["L"] * n,
        "stat_area": [stat_area] * n,
        "fishing_sector": ["commercial"] * n,
    }


def _catch():
    return pl.DataFrame(
        {
            **_keys(["1", "1", "2"]),
            "group_species": ["pelagic", "demersal", "pelagic"],
            "stat_name_code": ["A1", "B2", "A1"],
            "stat_yield_t": ["1.5", "2.0", "3.0"],
        }
    )


def _effort():
    return pl.DataFrame(
        {
            **_keys(["2", "3", "4"]),
            "area_gotand": ["gulf", "gulf", "gulf"],
            "in_out": ["in", "out", "in"],
            "effort_trip": ["10", "5", None],
            "effort_day": ["3", None, None],
            "effort_haulset": [None, "7", None],
            "effort_hour": [None, None, None],
        }
    )


def test_catch_records_share_ids_per_key_combination():
    species, stat_info_catch, catch_info = build_catch_tables(_catch())

    assert "Species_group" in species.columns and "group_species" not in species.columns
    assert stat_info_catch.columns == [*STAT_KEY_COLUMNS, "stat_record_ids"]
    assert stat_info_catch["month"].to_list() == ["1", "2"]
    assert stat_info_catch["stat_record_ids"].to_list() == [1, 2]
    assert catch_info.columns == ["stat_record_ids", "stat_name_code", "stat_yield_t"]
    assert catch_info["stat_record_ids"].to_list() == [1, 1, 2]


def test_effort_only_keys_are_appended_after_catch_keys():
    _, stat_info_catch, _ = build_catch_tables(_catch())
    area, stat_info, effort_info = build_effort_tables(_effort(), stat_info_catch)

    assert area.rows() == [("1", "gulf", "in"), ("1", "gulf", "out")]
    assert stat_info["month"].to_list() == ["1", "2", "3", "4"]
    assert stat_info["stat_record_ids"].to_list() == [1, 2, 3, 4]
    # month 4 has no effort values at all
    assert effort_info["stat_record_ids"].to_list() == [2, 3]
    assert effort_info["effort_trip"].to_list() == ["10", "5"]


def test_blank_keys_match_each_other():
    catch = _catch().with_columns(pl.lit(None, dtype=pl.Utf8).alias("stat_area"))
    _, stat_info_catch, catch_info = build_catch_tables(catch)
    assert stat_info_catch.height == 2
    assert catch_info["stat_record_ids"].null_count() == 0


def test_missing_stat_columns_are_reported():
    with pytest.raises(ValueError, match="stat_yield_t"):
        build_catch_tables(_catch().drop("stat_yield_t"))


THAI_HEADERS = {
    "yearAD": "ปี ค.ศ.",
    "yearBE": "ปี พ.ศ.",
    "month": "เดือนที่",
    "month_thai": "เดือน",
    "gear_group_thai2": "กลุ่มเครื่องมือ",
    "stat_area": "พื้นที่สถิติ",
    "group_species": "กลุ่มสัตว์น้ำ",
    "stat_yield_t": "ผลจับ (ตัน)",
    "effort_trip": "จำนวนเที่ยว",
}


def _thai(frame: pl.DataFrame) -> dict:
    return {THAI_HEADERS.get(col, col): frame[col].to_list() for col in frame.columns}


def test_harvest_stat_translates_headers_end_to_end(tmp_path):
    path = write_workbook(
        tmp_path / "stat.xlsx",
        {"catch": _thai(_catch()), "effort": _thai(_effort())},
    )
    out = tmp_path / "out"
    translation = load_translation_table(DEFAULT_LOOKUP_PATH)

    report = harvest_stat(path, out, translation)

    assert {p.name for p in out.iterdir()} == {
        "stat_species_info.csv",
        "stat_catch_info.csv",
        "stat_area_info.csv",
        "stat_info.csv",
        "stat_effort_info.csv",
    }
    assert report.table_row_counts["stat_info"] == 4
    assert report.table_row_counts["stat_effort"] == 2

    stat_info = pl.read_csv(out / "stat_info.csv", infer_schema_length=0)
    assert stat_info.columns[0] == "ปี ค.ศ."
    assert "เดือนที่" in stat_info.columns
    assert stat_info.columns[-1] == "stat_record_ids"

    catch_info = pl.read_csv(out / "stat_catch_info.csv")
    assert catch_info["stat_record_ids"].to_list() == [1, 1, 2]
    assert catch_info["stat_yield_t"].to_list() == [1.5, 2.0, 3.0]

    species = pl.read_csv(out / "stat_species_info.csv", infer_schema_length=0)
    assert "Species_group" in species.columns


def test_harvest_stat_with_injected_translation(tmp_path):
    translation = ColumnTranslation.from_pairs({"ปี ค.ศ.": "yearAD", "yearad": "yearAD", "yearbe": "yearBE"})
    catch = _catch().rename({"yearAD": "YEARAD"})
    path = write_workbook(
        tmp_path / "stat.xlsx",
        {"catch": catch.to_dict(as_series=False), "effort": _effort().to_dict(as_series=False)},
    )
    report = harvest_stat(path, tmp_path / "out", translation)
    assert report.table_row_counts["stat_catch"] == 3
