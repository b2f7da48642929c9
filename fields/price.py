"""
Tolerant price parsing for catalog cells.

Supplier sheets mix numeric cells with strings such as "€ 1,299.00" or
"12.5 £". Parsing keeps the leading number after cleanup and rejects values
outside the sanity bound [0, MAX_PRICE).
"""

from __future__ import annotations

import math
import re
from typing import Optional

from config.settings import MAX_PRICE

_CURRENCY_SYMBOLS = re.compile(r"[€$£¥₹]")
_SEPARATORS = re.compile(r"[,\s]")
# every dot that still has another dot after it
_EXTRA_DOTS = re.compile(r"\.(?=.*\.)")
_LEADING_NUMBER = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")


def _in_bounds(value: float) -> Optional[float]:
    if math.isnan(value) or value < 0 or value >= MAX_PRICE:
        return None
    return value


def parse_price(value) -> Optional[float]:
    """
    Convert a cell value into a price.

    - Numbers are kept when within bounds.
    - Strings lose currency symbols, thousands separators and spaces; when
      several dots remain only the last one is kept as decimal point.
    - Anything else (dates, booleans, junk) returns None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _in_bounds(float(value))
    if not isinstance(value, str):
        return None

    cleaned = _CURRENCY_SYMBOLS.sub("", value)
    cleaned = _SEPARATORS.sub("", cleaned)
    cleaned = _EXTRA_DOTS.sub("", cleaned).strip()
    if not cleaned:
        return None

    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None

    try:
        return _in_bounds(float(match.group(0)))
    except ValueError:
        return None
