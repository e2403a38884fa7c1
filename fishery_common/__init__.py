"""
Shared fishery schema, length-frequency codec and expansion helpers used by
the RV and statistical harvesters.
"""

from .frequency import (  # noqa: F401
    FrequencyParseError,
    SizeFrequencyPoint,
    decode_frequency_code,
    encode_frequency_points,
)

from .expansion import (  # noqa: F401
    ExpandedLengthRow,
    ExpansionError,
    ExpansionNotice,
    ExpansionResult,
    FrequencyMismatch,
    LengthSample,
    expand_all,
    expand_sample,
    samples_from_frame,
)

from .schema import (  # noqa: F401
    LENGTH_OUTPUT_COLUMNS,
    STAT_KEY_COLUMNS,
    TABLE_SCHEMAS,
    TableSchema,
    ensure_columns,
)

from .translation import (  # noqa: F401
    ColumnTranslation,
    load_translation_table,
    reverse_translate_columns,
    translate_columns,
)

__all__ = [
    "FrequencyParseError",
    "SizeFrequencyPoint",
    "decode_frequency_code",
    "encode_frequency_points",
    "ExpandedLengthRow",
    "ExpansionError",
    "ExpansionNotice",
    "ExpansionResult",
    "FrequencyMismatch",
    "LengthSample",
    "expand_all",
    "expand_sample",
    "samples_from_frame",
    "LENGTH_OUTPUT_COLUMNS",
    "STAT_KEY_COLUMNS",
    "TABLE_SCHEMAS",
    "TableSchema",
    "ensure_columns",
    "ColumnTranslation",
    "load_translation_table",
    "reverse_translate_columns",
    "translate_columns",
]
