"""
Explicit coercion of loosely typed form input.

Each helper documents what it returns for input it cannot parse, so callers
never rely on implicit conversion.
"""

import math
import re
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_TIME_FORMAT = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


def parse_capacity(value: Any) -> int:
    """
    Parse a slot capacity.

    Reads the leading integer of the input ("3 cars" -> 3). Negative numbers
    clamp to 0 and anything unparseable returns 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if math.isfinite(value) else 0

    match = _LEADING_INT.match(str(value)) if value is not None else None
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def parse_price(value: Any) -> Optional[float]:
    """
    Parse a wash price.

    Returns the leading decimal number, or None when the input has none
    (the price is then treated as not set). Negative prices return None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT.match(str(value))
        if not match:
            return None
        number = float(match.group(1))

    if not math.isfinite(number) or number < 0:
        return None
    return number


def sanitize_phone_number(value: str, max_digits: int = 10) -> Optional[str]:
    """
    Strip everything except digits from a phone number.

    Returns None when more than ``max_digits`` digits remain, so the caller
    can keep the previous value.
    """
    digits = re.sub(r"\D", "", value or "")
    if len(digits) > max_digits:
        return None
    return digits


def is_valid_time(value: str) -> bool:
    """Check that a value is a 24h "HH:MM" time."""
    return isinstance(value, str) and _TIME_FORMAT.fullmatch(value) is not None


def format_hour(hour: int) -> str:
    """Format a whole hour as "HH:00", wrapping modulo 24."""
    return f"{hour % 24:02d}:00"
