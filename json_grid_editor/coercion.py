"""Text-to-value coercion for edited cells.

The numeric grammar is a plain decimal literal: optional sign, ASCII digits with an
optional fraction (``.5`` and ``5.`` are accepted), optional exponent. Leading
zeros are allowed, so ``"007"`` is stored as ``7``. Hex/octal/binary literals,
``Infinity`` and ``NaN`` are not numbers here and are kept as text.
"""

from __future__ import annotations

import math
import re
from typing import Union

NUMERIC_LITERAL = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?', re.ASCII)

Scalar = Union[int, float, str]


def parse_number(text: str) -> Union[int, float, None]:
    """Return the numeric value of `text`, or None if it is not a full numeric literal."""
    if not NUMERIC_LITERAL.fullmatch(text):
        return None
    if not any(ch in text for ch in '.eE'):
        try:
            return int(text)
        except ValueError:
            # Beyond the interpreter's int-conversion digit limit.
            return None
    value = float(text)
    if not math.isfinite(value):
        return None
    # Integral floats are stored as ints ("1e3" -> 1000, "2.0" -> 2).
    if value.is_integer():
        return int(value)
    return value


def coerce(text: str) -> Scalar:
    """Convert user-entered text into the stored primitive.

    The trimmed text is tested for a number; when it is not one the original,
    untrimmed text is stored.
    """
    if text is None:
        return ''
    if not isinstance(text, str):
        text = str(text)
    stripped = text.strip()
    if not stripped:
        return text
    number = parse_number(stripped)
    return text if number is None else number
