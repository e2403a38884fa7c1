"""
Workbook harvesters that turn RV and statistical survey spreadsheets into
normalized CSV tables.
"""

from .config import ConfigError, ExpansionSettings, HarvestSettings, load_settings  # noqa: F401
from .report import HarvestError, HarvestReport  # noqa: F401
from .rv import expand_length_table, harvest_rv  # noqa: F401
from .stat import build_catch_tables, build_effort_tables, harvest_stat  # noqa: F401
from .workbook import convert_column_types, read_sheet  # noqa: F401

__all__ = [
    "ConfigError",
    "ExpansionSettings",
    "HarvestSettings",
    "load_settings",
    "HarvestError",
    "HarvestReport",
    "expand_length_table",
    "harvest_rv",
    "build_catch_tables",
    "build_effort_tables",
    "harvest_stat",
    "convert_column_types",
    "read_sheet",
]
