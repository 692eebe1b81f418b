"""Unit suffix normalization for comparison operands."""

import math
from typing import Optional, Union

from streamsift.utils.logger import get_logger

logger = get_logger(__name__)

# Checked in order; "mbps"/"kbps" must come before the shorter byte suffixes
UNIT_MULTIPLIERS = (
    ("mbps", 1_000_000),
    ("kbps", 1_000),
    ("gb", 1024**3),
    ("tb", 1024**4),
)


def format_number(value: Union[int, float]) -> str:
    """Format a number without a trailing ".0" for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_number(text: str) -> Optional[float]:
    """Parse a finite numeric literal, returning None instead of raising.

    "nan", "inf" and digit separators ("1_000") are rejected even though
    float() accepts them.
    """
    if not isinstance(text, str) or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def normalize_unit(value: str) -> str:
    """Convert a unit-suffixed value to a plain number string.

    Recognized suffixes (case-insensitive): mbps, kbps, gb, tb.
    "5mbps" becomes "5000000", "1.5GB" becomes "1610612736".

    Args:
        value: Comparison operand, possibly with a unit suffix

    Returns:
        Plain number string, or the original value when the suffix is
        unknown or the numeric part does not parse
    """
    if not value or not value.strip():
        return ""

    adjusted = value.strip().lower()
    for suffix, multiplier in UNIT_MULTIPLIERS:
        if not adjusted.endswith(suffix):
            continue

        number = parse_number(adjusted[: -len(suffix)])
        if number is None:
            logger.debug("Unit value has no numeric part", value=value, unit=suffix)
            return value
        return format_number(number * multiplier)

    return value
