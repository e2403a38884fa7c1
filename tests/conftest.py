from pathlib import Path

import pandas as pd
import pytest


def write_workbook(path: Path, sheets: dict) -> Path:
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return path


RV_CATCH = {
    "link": ["L1", "L2", "L3", "L4"],
    "Station": ["ST01", "ST01", "ST02", "ST03"],
    "IdSPP": ["S101", "S102", "S101", "S103"],
    "codename": ["Sardine", "Squid", "Sardine", "Crab"],
    "Size": ["A", "A", "B", "B"],
    "sex": ["F", "M", "F", "U"],
    "Number": ["4", "0", "6", "2"],
    "SamW": ["1.5", "0.2", "2.5", "0.8"],
    "Tot_Weight": ["10.5", "0.2", "12.0", "3.1"],
    "Freqtext(raw)": ["0.5,7.5,1,2,1", None, "1,1,1,2,3", "1,5,0,+8,2"],
    "Freqtext(raise)": ["0.5,7.5,10,20,10", None, "1,1,5,6", "1,5,0,+8,20"],
}

RV_EFFORT = {
    "link": ["L1", "L3", "L4"],
    "office": ["C1", "C1", "C2"],
    "Area": ["A1", "A2", "A3"],
    "Time": ["06:30", "09:15", "13:00"],
    "Tow": ["60", "45", "30"],
    "Zone": ["Z1", "Z1", "Z2"],
    "VesselName": ["Pramong 4", "Pramong 4", "Pramong 9"],
    "Depth": ["20", "35", "18"],
}


@pytest.fixture
def rv_workbook(tmp_path):
    return write_workbook(tmp_path / "rv_survey.xlsx", {"catch": RV_CATCH, "effort": RV_EFFORT})
