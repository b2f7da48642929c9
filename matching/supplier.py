"""
Supplier identification from document product references.

A multi-supplier catalog is scoped down to one supplier before comparison.
The supplier is guessed by matching the 9-character references printed on
the labels against each supplier's product references.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from domain.models import CatalogEntry, ProductReference, SupplierInfo, SupplierValidation

logger = logging.getLogger(__name__)

HIGH_MATCH_RATIO = 0.5
HIGH_MATCH_COUNT = 5


def supplier_id(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


def available_suppliers(entries: Iterable[CatalogEntry]) -> List[SupplierInfo]:
    """Distinct supplier names with their entry counts, largest first."""
    counts = Counter(entry.supplier for entry in entries if entry.supplier)
    suppliers = [
        SupplierInfo(id=supplier_id(name), name=name, product_count=count)
        for name, count in counts.items()
    ]
    # stable: equal counts keep first-seen order
    return sorted(suppliers, key=lambda s: s.product_count, reverse=True)


def _reference_matches(code: str, catalog_references: Sequence[str]) -> bool:
    return any(code in ref or ref in code for ref in catalog_references)


def identify_supplier(
    references: Sequence[ProductReference],
    entries: Sequence[CatalogEntry],
) -> Optional[SupplierInfo]:
    """
    Return the first supplier (by descending product count) whose catalog
    references match at least one document reference.

    Confidence is matched references / all document references. Returns None
    when there are no references or nothing matches.
    """
    if not references:
        return None

    for supplier in available_suppliers(entries):
        catalog_references = [
            entry.product_reference
            for entry in entries
            if entry.supplier == supplier.name and entry.product_reference
        ]
        if not catalog_references:
            continue

        matched = [ref.code for ref in references if _reference_matches(ref.code, catalog_references)]
        if matched:
            confidence = len(matched) / len(references)
            logger.info(
                f"Supplier detected: {supplier.name} ({len(matched)}/{len(references)} references, "
                f"confidence {confidence:.0%})"
            )
            return SupplierInfo(
                id=supplier.id,
                name=supplier.name,
                product_count=supplier.product_count,
                detected_references=tuple(matched),
                confidence=confidence,
            )

    logger.info(f"No supplier matched any of the {len(references)} document references")
    return None


def validate_detection(supplier: SupplierInfo, total_references: int) -> SupplierValidation:
    matches = len(supplier.detected_references)
    ratio = matches / total_references if total_references > 0 else 0.0

    if ratio >= HIGH_MATCH_RATIO or matches >= HIGH_MATCH_COUNT:
        return SupplierValidation(True, "high", f"Strong match ({matches} references found)")
    if matches >= 1:
        return SupplierValidation(True, "medium", f"Partial match ({matches} references found)")
    return SupplierValidation(False, "low", "No matching reference found")


def filter_catalog_by_supplier(
    entries: Iterable[CatalogEntry],
    supplier: Optional[SupplierInfo],
) -> List[CatalogEntry]:
    """Entries of one supplier; with no supplier the whole catalog is kept."""
    if supplier is None:
        return list(entries)
    return [entry for entry in entries if entry.supplier == supplier.name]
