"""String processing utilities for the funding client.

The backend returns most amounts as strings ("125000000.00"), sometimes as
numbers and sometimes not at all, so every numeric read goes through
safe_float().
"""

import math

from utils.patterns import WHITESPACE, CURRENCY_SYMBOLS, NON_DIGITS


def safe_float(val, default: float = 0.0) -> float:
    """Safely convert value to float with fallback default.

    Handles:
    - None, empty strings -> default
    - Numeric types -> float (NaN -> default)
    - Strings with currency symbols, whitespace, commas
    - Invalid input -> default

    Args:
        val: Value to convert (any type)
        default: Value to return on failure (default: 0.0)

    Returns:
        float: Parsed value or default
    """
    if val is None or val == '':
        return default
    if isinstance(val, bool):
        return float(val)
    if isinstance(val, (int, float)):
        return default if math.isnan(val) else float(val)

    try:
        s = str(val).strip()
        # Remove currency symbols and Indian/Western digit grouping
        s = CURRENCY_SYMBOLS.sub('', s)
        s = s.replace(',', '').strip()
        result = float(s) if s else default
    except (ValueError, TypeError):
        return default
    return default if math.isnan(result) else result


def optional_float(val):
    """Like safe_float() but keeps "missing" distinct from zero.

    Returns None for None, blank strings, NaN and unparsable input.
    """
    parsed = safe_float(val, default=math.nan)
    return None if math.isnan(parsed) else parsed


def normalize_whitespace(s: str) -> str:
    """Normalize multiple whitespace characters to single spaces.

    Example:
        "Smart   Water\\n  Grid" -> "Smart Water Grid"
    """
    return WHITESPACE.sub(' ', s).strip()


def digits_only(s: str) -> str:
    """Strip everything but digits ("+91 98765-43210" -> "919876543210")."""
    return NON_DIGITS.sub('', s or '')
