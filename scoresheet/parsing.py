"""Lenient number parsing shared by the calculator and the keypad."""

import math
import re
from decimal import Decimal
from typing import Any

# Leading numeric prefix, e.g. "5." -> "5", "3abc" -> "3", "-.5" -> "-.5"
_NUMBER_PREFIX = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


def parse_number(raw: Any) -> float:
    """
    Interpret a raw entry as a number, degrading to 0 instead of raising.

    Accepts ints, floats, booleans and numeric strings. Strings are read up
    to the end of their leading numeric prefix, so in-progress keypad text
    such as "5." or "-3" parses cleanly while a lone "-" or an empty string
    becomes 0.

    Args:
        raw: Value typed or stored for a cell (any type)

    Returns:
        Finite float (0.0 for anything unparsable)

    Example:
        parse_number('5.')   # 5.0
        parse_number('-')    # 0.0
        parse_number(None)   # 0.0
    """
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0

    match = _NUMBER_PREFIX.match(str(raw).strip())
    if not match:
        return 0.0
    value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def format_number(raw: Any) -> str:
    """
    Render a keypad target the way the user sees it.

    Strings are returned untouched so partial input ("0.", "12.5") survives.
    Whole floats drop their ".0" (negative zero renders as "0"). Other
    numbers are written out positionally (1e-05 -> "0.00001") so keypad
    edits can keep appending to the text.

    Args:
        raw: Number or in-progress string

    Returns:
        Display string
    """
    if isinstance(raw, str):
        return raw
    value = parse_number(raw)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), 'f')


def is_numeric_text(text: str) -> bool:
    """Check whether a string starts with something parse_number can read."""
    return bool(_NUMBER_PREFIX.match(text.strip()))
