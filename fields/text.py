"""Cell-to-text conversion and input sanitizing."""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any

_HTML_HAZARDS = re.compile(r"[<>\"'&]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")


def cell_to_text(value: Any) -> str:
    """
    Render a spreadsheet cell as text.

    Integral floats lose their ".0" so numeric barcode cells keep their digits.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def sanitize_input(text: str) -> str:
    """Strip HTML-hazard and control characters, then surrounding whitespace."""
    if not text:
        return ""
    text = _HTML_HAZARDS.sub("", text)
    text = _CONTROL_CHARS.sub("", text)
    return text.strip()


def is_blank(value: Any) -> bool:
    return not cell_to_text(value).strip()
