from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from fishery_common.expansion import ExpansionNotice


class HarvestError(RuntimeError):
    """Raised when a harvest run is aborted by policy (e.g. too many failed samples)."""


@dataclass
class HarvestReport:
    source: Path
    table_row_counts: Dict[str, int] = field(default_factory=dict)
    written: Dict[str, Path] = field(default_factory=dict)
    notices: List[ExpansionNotice] = field(default_factory=list)

    def record(self, table: str, path: Path, rows: int) -> None:
        self.written[table] = path
        self.table_row_counts[table] = rows
