"""
Rich/legacy catalog classification.

Single source of truth: the extractor, the comparison engine and the metrics
calculator all call `detect_catalog_format` (or receive its result) instead of
re-deriving the rule.
"""

from __future__ import annotations

from typing import Iterable

from domain.models import CatalogEntry, CatalogFormat


def detect_catalog_format(entries: Iterable[CatalogEntry]) -> CatalogFormat:
    """RICH when some entry has a color, some has a size and one has both euro and pound prices."""
    has_color = False
    has_size = False
    has_dual_currency = False

    for entry in entries:
        has_color = has_color or bool(entry.color)
        has_size = has_size or bool(entry.size)
        has_dual_currency = has_dual_currency or bool(entry.price_euro and entry.price_pound)
        if has_color and has_size and has_dual_currency:
            return CatalogFormat.RICH

    return CatalogFormat.LEGACY
