"""
Barcode normalization.

The normalized form (digits only) is the join key between label documents and
catalog entries. All functions are pure.
"""

from __future__ import annotations

import re
from typing import Optional

from config.settings import VALID_BARCODE_LENGTHS

_NON_DIGITS = re.compile(r"\D")


def normalize_barcode(raw: Optional[str]) -> str:
    """Remove every character that is not a decimal digit. None/empty -> ''."""
    if not raw:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def is_valid_barcode_format(raw: Optional[str]) -> bool:
    """True when the normalized form has a standard length (EAN-8, UPC-A, EAN-13, GTIN-14)."""
    if not raw or not isinstance(raw, str):
        return False
    normalized = normalize_barcode(raw)
    return len(normalized) in VALID_BARCODE_LENGTHS and normalized.isdigit()


def barcode_similarity(first: Optional[str], second: Optional[str]) -> float:
    """
    Exact-match indicator after normalization.

    Not a fuzzy metric: returns 1.0 when both normalized forms are equal, else 0.0.
    """
    return 1.0 if normalize_barcode(first) == normalize_barcode(second) else 0.0


def is_plausible_catalog_barcode(raw: Optional[str], min_length: int, max_length: int) -> bool:
    """Digits-only length within [min_length, max_length] and not a zero placeholder."""
    digits = normalize_barcode(raw)
    if not digits or not (min_length <= len(digits) <= max_length):
        return False
    return digits != "0" * len(digits)
