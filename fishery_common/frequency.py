from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

NUMBER_PATTERN = r"[-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
PLUS_RE = re.compile(r"^\+\s*(" + NUMBER_PATTERN + r")$")
NUMBER_RE = re.compile(r"^" + NUMBER_PATTERN + r"$")
SIZE_DECIMALS = 10
SIZE_TOLERANCE = 1e-9


class FrequencyParseError(ValueError):
    """Raised when a length-frequency code cannot be decoded."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message if code is None else f"{message} (code: {code!r})")
        self.code = code


@dataclass(frozen=True)
class SizeFrequencyPoint:
    size: float
    frequency: float


def _parse_number(token: str, what: str, code: str) -> float:
    if not NUMBER_RE.match(token):
        raise FrequencyParseError(f"Non-numeric {what} token {token!r}", code)
    return float(token)


def _split_tokens(code: str) -> List[str]:
    tokens = [tok.strip() for tok in str(code).split(",")]
    # "1,2,3," leaves one trailing empty token
    if len(tokens) > 1 and tokens[-1] == "":
        tokens.pop()
    for position, tok in enumerate(tokens):
        if tok == "":
            raise FrequencyParseError(f"Empty token at position {position}", code)
    return tokens


def _size_at(min_size: float, width: float, step: int) -> float:
    return round(min_size + step * width, SIZE_DECIMALS)


def _size_index(value: float, min_size: float, width: float) -> int | None:
    """Return the progression step landing on ``value``, or None if unreachable."""

    offset = (value - min_size) / width
    step = round(offset)
    if step < 0 or not math.isclose(offset, step, rel_tol=0.0, abs_tol=SIZE_TOLERANCE * max(1.0, abs(offset))):
        return None
    return int(step)


def _find_plus_tokens(tokens: Sequence[str], code: str) -> List[Tuple[int, float]]:
    found: List[Tuple[int, float]] = []
    for idx in range(2, len(tokens)):
        tok = tokens[idx]
        if "+" not in tok:
            continue
        match = PLUS_RE.match(tok)
        if not match:
            raise FrequencyParseError(f"Malformed plus-group token {tok!r}", code)
        found.append((idx, float(match.group(1))))
    return found


def _decode_plus_group(
    tokens: Sequence[str],
    width: float,
    min_size: float,
    plus_tokens: Sequence[Tuple[int, float]],
    code: str,
) -> List[Tuple[float, float]]:
    max_size = max(size for _, size in plus_tokens)
    last_step = _size_index(max_size, min_size, width)
    if last_step is None:
        raise FrequencyParseError(
            f"Plus-group size {max_size:g} is not reachable from {min_size:g} in steps of {width:g}", code
        )
    sizes = [_size_at(min_size, width, step) for step in range(last_step + 1)]
    frequencies = [0.0] * len(sizes)
    consumed = set()

    first_plus = plus_tokens[0][0]
    leading = tokens[2:first_plus]
    if len(leading) > len(sizes):
        raise FrequencyParseError(
            f"{len(leading)} leading frequencies exceed the {len(sizes)} size classes up to {max_size:g}", code
        )
    for offset, tok in enumerate(leading):
        frequencies[offset] = _parse_number(tok, "frequency", code)
        consumed.add(2 + offset)

    for idx, size in plus_tokens:
        if idx + 1 >= len(tokens):
            raise FrequencyParseError(f"Plus-group token {tokens[idx]!r} has no frequency", code)
        freq_token = tokens[idx + 1]
        if freq_token.startswith("+"):
            raise FrequencyParseError(f"Plus-group token {tokens[idx]!r} is followed by another plus token", code)
        step = _size_index(size, min_size, width)
        if step is None:
            raise FrequencyParseError(
                f"Plus-group size {size:g} is not reachable from {min_size:g} in steps of {width:g}", code
            )
        frequencies[step] = _parse_number(freq_token, "frequency", code)
        consumed.update((idx, idx + 1))

    stray = [tokens[i] for i in range(2, len(tokens)) if i not in consumed]
    if stray:
        raise FrequencyParseError(f"Unexpected frequency tokens around plus groups: {', '.join(stray)}", code)
    return list(zip(sizes, frequencies))


def decode_frequency_code(code: str) -> List[SizeFrequencyPoint]:
    """
    Decode a length-frequency code into (size, frequency) points.

    The code is ``width,min_size,f1,f2,...``. A ``+<size>`` token marks an
    open-ended plus group whose frequency is the next token; size classes
    between the leading frequencies and the plus group are implicitly zero.
    Points with a frequency <= 0 are dropped. Returned points are in
    ascending size order.
    """

    if code is None:
        raise FrequencyParseError("Missing frequency code")
    code = str(code)
    tokens = _split_tokens(code)
    if len(tokens) < 2:
        raise FrequencyParseError("Frequency code needs at least a width and a minimum size", code)

    width = _parse_number(tokens[0], "width", code)
    min_size = _parse_number(tokens[1], "minimum size", code)
    if width <= 0:
        raise FrequencyParseError(f"Class width must be positive, got {width:g}", code)

    plus_tokens = _find_plus_tokens(tokens, code)
    if plus_tokens:
        pairs = _decode_plus_group(tokens, width, min_size, plus_tokens, code)
    else:
        frequencies = [_parse_number(tok, "frequency", code) for tok in tokens[2:]]
        pairs = [(_size_at(min_size, width, step), freq) for step, freq in enumerate(frequencies)]

    return [SizeFrequencyPoint(size, freq) for size, freq in pairs if freq > 0]


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def encode_frequency_points(points: Iterable[SizeFrequencyPoint], width: float, min_size: float) -> str:
    """Encode points back to the plain ``width,min_size,f1,...`` form, zero-filling gaps."""

    if width <= 0:
        raise ValueError(f"Class width must be positive, got {width:g}")
    by_step = {}
    for point in points:
        step = _size_index(point.size, min_size, width)
        if step is None:
            raise ValueError(f"Size {point.size:g} does not fall on the {width:g} grid from {min_size:g}")
        by_step[step] = point.frequency
    last = max(by_step) if by_step else -1
    frequencies = [_format_number(by_step.get(step, 0)) for step in range(last + 1)]
    return ",".join([_format_number(width), _format_number(min_size), *frequencies])
