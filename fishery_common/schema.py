from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Sequence


@dataclass(frozen=True)
class TableSchema:
    """Output table: source columns renamed to canonical names, optionally deduplicated."""

    name: str
    file_name: str
    columns: Mapping[str, str]  # raw -> canonical column name
    distinct: bool = False


LENGTH_OUTPUT_COLUMNS: Sequence[str] = (
    "sample_id",
    "species_id",
    "raw_length",
    "raw_frequency",
    "raised_length",
    "raised_frequency",
)
ORIGINAL_CODE_COLUMNS: Mapping[str, str] = {
    "freq_raw": "original_raw_frequency",
    "freq_rise": "original_raised_frequency",
}

RV_FREQUENCY_CODE_COLS: Mapping[str, str] = {
    "Freqtext(raw)": "freq_raw",
    "Freqtext(raise)": "freq_rise",
}

RV_SPECIES_COLS: Mapping[str, str] = {
    "IdSPP": "species_id",
    "codename": "species_name",
}

RV_SAMPLING_COLS: Mapping[str, str] = {
    "link": "sample_id",
    "Station": "station",
    "IdSPP": "species_id",
    "Size": "cod_cover",
    "sex": "sex",
    "Number": "number",
    "SamW": "sample_weight",
    "Tot_Weight": "total_weight",
}

RV_LENGTH_COLS: Mapping[str, str] = {
    "link": "sample_id",
    "IdSPP": "species_id",
    "freq_raw": "freq_raw",
    "freq_rise": "freq_rise",
}

RV_EFFORT_DROP: Sequence[str] = ("Zone", "VesselName")
RV_EFFORT_RENAMES: Mapping[str, str] = {
    "link": "sample_id",
    "office": "center_id",
    "Area": "rv_area_id",
    "Time": "time_deply",
    "Tow": "towing_time",
}

RV_VESSEL_COLS: Mapping[str, str] = {
    "office": "center_id",
    "VesselName": "rv_name",
}

STAT_KEY_COLUMNS: Sequence[str] = (
    "yearAD",
    "yearBE",
    "month",
    "month_thai",
    "gear_group_thai2",
    "gear_group_eng",
    "vessel_size_thai",
    "vessel_class",
    "stat_area",
    "fishing_sector",
)
STAT_RECORD_ID = "stat_record_ids"
STAT_SPECIES_RENAMES: Mapping[str, str] = {"group_species": "Species_group"}
STAT_CATCH_VALUE_COLUMNS: Sequence[str] = ("stat_name_code", "stat_yield_t")
STAT_AREA_COLUMNS: Sequence[str] = ("stat_area", "area_gotand", "in_out")
STAT_EFFORT_VALUE_COLUMNS: Sequence[str] = (
    "effort_trip",
    "effort_day",
    "effort_haulset",
    "effort_hour",
)


def _table_schema() -> Dict[str, TableSchema]:
    """Build immutable output table map."""

    return {
        "species": TableSchema("species", "species_info.csv", RV_SPECIES_COLS, distinct=True),
        "sampling": TableSchema("sampling", "RV_catch_info.csv", RV_SAMPLING_COLS),
        "length": TableSchema("length", "length_info.csv", RV_LENGTH_COLS),
        "rv_effort": TableSchema("rv_effort", "rv_effort_info.csv", RV_EFFORT_RENAMES),
        "rv_vessel": TableSchema("rv_vessel", "rv_info.csv", RV_VESSEL_COLS, distinct=True),
        "stat_species": TableSchema("stat_species", "stat_species_info.csv", STAT_SPECIES_RENAMES),
        "stat_catch": TableSchema(
            "stat_catch",
            "stat_catch_info.csv",
            {c: c for c in (STAT_RECORD_ID, *STAT_CATCH_VALUE_COLUMNS)},
        ),
        "stat_area": TableSchema(
            "stat_area", "stat_area_info.csv", {c: c for c in STAT_AREA_COLUMNS}, distinct=True
        ),
        "stat_info": TableSchema(
            "stat_info", "stat_info.csv", {c: c for c in (*STAT_KEY_COLUMNS, STAT_RECORD_ID)}, distinct=True
        ),
        "stat_effort": TableSchema(
            "stat_effort",
            "stat_effort_info.csv",
            {c: c for c in (STAT_RECORD_ID, *STAT_EFFORT_VALUE_COLUMNS)},
        ),
    }


TABLE_SCHEMAS: Dict[str, TableSchema] = _table_schema()


def ensure_columns(columns: Iterable[str], required: Iterable[str], context: str) -> None:
    """Raise a clear error if any required columns are missing."""

    present = set(columns)
    missing = [col for col in required if col not in present]
    if missing:
        missing_str = ", ".join(missing)
        raise ValueError(f"Missing required columns for {context}: {missing_str}")
