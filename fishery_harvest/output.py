from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional

import polars as pl

LOGGER = logging.getLogger(__name__)


def write_table(frame: pl.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.write_csv(path, include_header=True)
    LOGGER.info("Wrote %s (%d rows)", path, frame.height)
    return path


class CsvAppender:
    """
    Stream successive frames into one CSV file.

    The header is written with the first frame only; frames must share the
    same columns. Closing without any frame writes a header-only file when
    ``columns`` is given.
    """

    def __init__(self, path: Path, columns: Optional[list[str]] = None):
        self.path = path
        self.columns = list(columns) if columns is not None else None
        self.rows_written = 0
        self._handle: Optional[IO[bytes]] = None
        self._header_written = False

    def __enter__(self) -> "CsvAppender":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("wb")
        return self

    def append(self, frame: pl.DataFrame) -> None:
        if self._handle is None:
            raise RuntimeError("CsvAppender must be used as a context manager")
        if self.columns is None:
            self.columns = list(frame.columns)
        elif list(frame.columns) != self.columns:
            raise ValueError(f"Column mismatch writing {self.path}: {frame.columns} != {self.columns}")
        if frame.height == 0 and self._header_written:
            return
        frame.write_csv(self._handle, include_header=not self._header_written)
        self._header_written = True
        self.rows_written += frame.height

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._handle is None:
            return
        try:
            if not self._header_written and self.columns is not None and exc_type is None:
                pl.DataFrame({col: [] for col in self.columns}).write_csv(self._handle, include_header=True)
        finally:
            self._handle.close()
            self._handle = None
        if exc_type is None:
            LOGGER.info("Wrote %s (%d rows)", self.path, self.rows_written)
