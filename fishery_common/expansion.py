"""
Length-frequency expansion: one sample's raw/raised codes -> per-size-class rows.

`expand_sample` pairs the decoded raw and raised sequences of a single sample;
`expand_all` runs it over a whole dataset, collecting failed samples as
notices instead of aborting.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import polars as pl

from .frequency import FrequencyParseError, SizeFrequencyPoint, decode_frequency_code
from .schema import LENGTH_OUTPUT_COLUMNS

LOGGER = logging.getLogger(__name__)


class ExpansionError(ValueError):
    """Base class for per-sample expansion failures."""


class FrequencyMismatch(ExpansionError):
    """Raw and raised codes decode to a different number of size classes."""

    def __init__(self, sample_id: Any, raw_count: int, raised_count: int):
        super().__init__(
            f"Mismatch in raw and raised frequency rows for sample {sample_id}: "
            f"{raw_count} raw vs {raised_count} raised"
        )
        self.sample_id = sample_id
        self.raw_count = raw_count
        self.raised_count = raised_count


def _clean_code(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class LengthSample:
    sample_id: Any
    species_id: Any
    raw_code: Optional[str] = None
    raised_code: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_code", _clean_code(self.raw_code))
        object.__setattr__(self, "raised_code", _clean_code(self.raised_code))


@dataclass(frozen=True)
class ExpandedLengthRow:
    sample_id: Any
    species_id: Any
    raw_length: Optional[float] = None
    raw_frequency: Optional[float] = None
    raised_length: Optional[float] = None
    raised_frequency: Optional[float] = None


@dataclass(frozen=True)
class ExpansionNotice:
    index: int
    sample_id: Any
    reason: str


@dataclass
class ExpansionResult:
    rows: List[ExpandedLengthRow] = field(default_factory=list)
    notices: List[ExpansionNotice] = field(default_factory=list)
    samples_seen: int = 0
    row_sources: List[int] = field(default_factory=list)  # input position of each row

    def to_polars(self) -> pl.DataFrame:
        """Rows as a frame in output column order; numeric columns are Float64."""

        data = {col: [getattr(row, col) for row in self.rows] for col in LENGTH_OUTPUT_COLUMNS}
        frame = pl.DataFrame(data, strict=False)
        return frame.with_columns(
            [pl.col(col).cast(pl.Float64) for col in LENGTH_OUTPUT_COLUMNS[2:]]
        )


def expand_sample(sample: LengthSample) -> List[ExpandedLengthRow]:
    """
    Expand one sample into paired raw/raised rows.

    A sample without a raw code yields a single placeholder row with null
    lengths and frequencies. Raises FrequencyMismatch when the two codes
    decode to different lengths; FrequencyParseError propagates.
    """

    if sample.raw_code is None:
        return [ExpandedLengthRow(sample.sample_id, sample.species_id)]

    raw_points = decode_frequency_code(sample.raw_code)
    raised_points: List[SizeFrequencyPoint] = []
    if sample.raised_code is not None:
        raised_points = decode_frequency_code(sample.raised_code)

    if len(raw_points) != len(raised_points):
        raise FrequencyMismatch(sample.sample_id, len(raw_points), len(raised_points))

    rows = [
        ExpandedLengthRow(
            sample.sample_id,
            sample.species_id,
            raw_length=raw.size,
            raw_frequency=raw.frequency,
            raised_length=raised.size,
            raised_frequency=raised.frequency,
        )
        for raw, raised in zip(raw_points, raised_points)
    ]
    return [row for row in rows if row.raw_frequency is not None and row.raised_frequency is not None]


def _expand_indexed(item: Tuple[int, LengthSample]) -> Tuple[int, List[ExpandedLengthRow], Optional[ExpansionNotice]]:
    index, sample = item
    try:
        return index, expand_sample(sample), None
    except (ExpansionError, FrequencyParseError) as exc:
        return index, [], ExpansionNotice(index, sample.sample_id, str(exc))


def expand_all(samples: Iterable[LengthSample], *, max_workers: int | None = None) -> ExpansionResult:
    """
    Expand every sample, keeping input order.

    Failed samples contribute no rows and are reported as notices. With
    ``max_workers`` > 1 samples are expanded on a thread pool; results are
    still assembled by original position. Decoding is pure Python, so on a
    GIL build the pool gives no speedup; it pays off on free-threaded
    interpreters. Serial and pooled runs give identical output.
    """

    indexed = list(enumerate(samples))
    if max_workers and max_workers > 1 and len(indexed) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            outcomes = list(ex.map(_expand_indexed, indexed))
    else:
        outcomes = [_expand_indexed(item) for item in indexed]

    result = ExpansionResult(samples_seen=len(indexed))
    for index, rows, notice in sorted(outcomes, key=lambda outcome: outcome[0]):
        result.rows.extend(rows)
        result.row_sources.extend([index] * len(rows))
        if notice is not None:
            LOGGER.warning("Skipping sample %s (row %d): %s", notice.sample_id, notice.index + 1, notice.reason)
            result.notices.append(notice)
    return result


def samples_from_frame(
    df: pl.DataFrame,
    *,
    sample_col: str = "sample_id",
    species_col: str = "species_id",
    raw_col: str = "freq_raw",
    raised_col: str = "freq_rise",
) -> List[LengthSample]:
    """Build LengthSample records from the four relevant frame columns."""

    missing = [c for c in (sample_col, species_col, raw_col, raised_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns for length expansion: {', '.join(missing)}")

    selected: Sequence[Tuple[Any, Any, Any, Any]] = df.select(
        [sample_col, species_col, raw_col, raised_col]
    ).rows()
    return [LengthSample(*values) for values in selected]
