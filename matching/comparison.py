"""
Reconciliation of document barcodes against a supplier catalog.

Each document barcode goes through a lookup chain and the first step that
finds an entry wins:

1. normalized barcode index
2. raw barcode index
3. truncated code: drop the first digit of codes longer than FUZZY_MIN_LENGTH
   and look for an entry equal to, or ending with, the remainder

Matched codes become exact_match/low, unmatched ones pdf_only/high. Catalog
entries no document barcode consumed are reported as excel_only/low, most
expensive first, capped to keep the list readable. The final list is ordered
high -> medium -> low severity, source order preserved within a level.

The engine never prints: per-code outcomes are returned in MatchDiagnostics
and a one-line summary is logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from config.settings import FUZZY_MIN_LENGTH, MAX_EXCEL_ONLY_LEGACY, MAX_EXCEL_ONLY_RICH
from domain.models import (
    SEVERITY_ORDER,
    CatalogEntry,
    CatalogFormat,
    ComparisonResult,
    Currency,
    DocumentBarcode,
    MatchStatus,
    Severity,
)
from fields.catalog_format import detect_catalog_format
from fields.text import cell_to_text

logger = logging.getLogger(__name__)

UNKNOWN_SUPPLIER = "unknown supplier"

REASON_NORMALIZED = "Exact match on normalized code"
REASON_RAW = "Exact match on raw code"
REASON_TRUNCATED = "Match on truncated code"
REASON_NONE = "No match found"
REASON_ABSENT = "Code absent from the whole catalog"


@dataclass(frozen=True)
class MatchDetail:
    pdf_code: str
    match_type: str  # "exact" | "fuzzy" | "none"
    reason: str
    excel_code: Optional[str] = None


@dataclass(frozen=True)
class MissingCodeAnalysis:
    pdf_code: str
    exists_in_catalog: bool
    reason: str
    other_supplier: Optional[str] = None
    other_price: Optional[float] = None


@dataclass
class MatchDiagnostics:
    catalog_format: CatalogFormat
    supplier_name: str
    pdf_codes_processed: int = 0
    exact_matches: int = 0
    fuzzy_matches: int = 0
    not_found: int = 0
    excel_only_reported: int = 0
    excel_only_available: int = 0
    missing_codes: List[str] = field(default_factory=list)
    missing_code_analysis: List[MissingCodeAnalysis] = field(default_factory=list)
    match_details: List[MatchDetail] = field(default_factory=list)


def find_fuzzy_match(normalized: str, catalog: Sequence[CatalogEntry]) -> Optional[CatalogEntry]:
    """First entry (catalog order) matching the code without its leading digit."""
    if len(normalized) <= FUZZY_MIN_LENGTH:
        return None
    short_code = normalized[1:]
    for entry in catalog:
        if entry.normalized_barcode == short_code or entry.normalized_barcode.endswith(short_code):
            return entry
    return None


def analyze_missing_code(
    pdf_data: DocumentBarcode,
    supplier_name: str,
    other_catalog: Sequence[CatalogEntry],
) -> MissingCodeAnalysis:
    for entry in other_catalog:
        if entry.normalized_barcode == pdf_data.normalized_barcode and entry.supplier != supplier_name:
            other = entry.supplier or UNKNOWN_SUPPLIER
            return MissingCodeAnalysis(
                pdf_code=pdf_data.barcode,
                exists_in_catalog=True,
                reason=f"Found at {other}",
                other_supplier=other,
                other_price=entry.price or entry.price_euro,
            )
    return MissingCodeAnalysis(pdf_code=pdf_data.barcode, exists_in_catalog=False, reason=REASON_ABSENT)


def _matched_description(entry: CatalogEntry, reason: str, catalog_format: CatalogFormat) -> str:
    text = f"{reason} at {entry.supplier or UNKNOWN_SUPPLIER}"
    if catalog_format is CatalogFormat.RICH and entry.color and entry.size:
        text += f" | {entry.color} - {entry.size}"
        if entry.price_euro and entry.price_pound:
            text += f" | {cell_to_text(entry.price_euro)}€ / {cell_to_text(entry.price_pound)}£"
    return text


def _excel_only_description(entry: CatalogEntry, catalog_format: CatalogFormat) -> str:
    text = f"Available at {entry.supplier or UNKNOWN_SUPPLIER} but missing from the PDF"
    if catalog_format is CatalogFormat.RICH and entry.color and entry.size:
        text += f" | {entry.color} - {entry.size}"

    price = entry.price_euro or entry.price
    if price:
        symbol = "£" if entry.currency is Currency.GBP and not entry.price_euro else "€"
        text += f" ({price:.2f}{symbol})"
    return text


def _sort_price(entry: CatalogEntry) -> float:
    return entry.price or entry.price_euro or 0.0


def compare_data_with_diagnostics(
    pdf_barcodes: Sequence[DocumentBarcode],
    catalog: Sequence[CatalogEntry],
    catalog_format: Optional[CatalogFormat] = None,
    other_catalog: Optional[Sequence[CatalogEntry]] = None,
) -> Tuple[List[ComparisonResult], MatchDiagnostics]:
    """
    Reconcile document barcodes with catalog entries.

    Args:
        pdf_barcodes: Barcodes extracted from the document, in document order
        catalog: Catalog entries in scope (usually one supplier)
        catalog_format: Classification of `catalog`; computed when omitted
        other_catalog: Full catalog, used to tell which other supplier
            carries a missing code. Defaults to `catalog`.

    Returns:
        (results sorted by severity, diagnostics)
    """
    if catalog_format is None:
        catalog_format = detect_catalog_format(catalog)
    if other_catalog is None:
        other_catalog = catalog

    by_normalized: Dict[str, CatalogEntry] = {e.normalized_barcode: e for e in catalog}
    by_raw: Dict[str, CatalogEntry] = {e.barcode: e for e in catalog}

    supplier_name = (catalog[0].supplier if catalog else None) or UNKNOWN_SUPPLIER
    diagnostics = MatchDiagnostics(catalog_format=catalog_format, supplier_name=supplier_name)
    results: List[ComparisonResult] = []
    consumed: Set[str] = set()

    for pdf_data in pdf_barcodes:
        diagnostics.pdf_codes_processed += 1
        consumed.add(pdf_data.normalized_barcode)

        match_type = "exact"
        match = by_normalized.get(pdf_data.normalized_barcode)
        reason = REASON_NORMALIZED

        if match is None:
            match = by_raw.get(pdf_data.barcode)
            reason = REASON_RAW

        if match is None:
            match = find_fuzzy_match(pdf_data.normalized_barcode, catalog)
            match_type, reason = "fuzzy", REASON_TRUNCATED

        if match is None:
            match_type, reason = "none", REASON_NONE
            diagnostics.not_found += 1
            diagnostics.missing_codes.append(pdf_data.barcode)
            analysis = analyze_missing_code(pdf_data, supplier_name, other_catalog)
            diagnostics.missing_code_analysis.append(analysis)

            discrepancy = f"PDF code not found at {supplier_name} - {reason}"
            if analysis.exists_in_catalog:
                discrepancy += f" ({analysis.reason})"

            results.append(ComparisonResult(
                barcode=pdf_data.barcode,
                normalized_barcode=pdf_data.normalized_barcode,
                status=MatchStatus.PDF_ONLY,
                severity=Severity.HIGH,
                discrepancy=discrepancy,
                pdf_data=pdf_data,
            ))
        else:
            if match_type == "fuzzy":
                diagnostics.fuzzy_matches += 1
            else:
                diagnostics.exact_matches += 1
            consumed.add(match.normalized_barcode)

            results.append(ComparisonResult(
                barcode=pdf_data.barcode,
                normalized_barcode=pdf_data.normalized_barcode,
                status=MatchStatus.EXACT_MATCH,
                severity=Severity.LOW,
                discrepancy=_matched_description(match, reason, catalog_format),
                pdf_data=pdf_data,
                excel_data=match,
            ))

        diagnostics.match_details.append(MatchDetail(
            pdf_code=pdf_data.barcode,
            match_type=match_type,
            reason=reason,
            excel_code=match.barcode if match is not None else None,
        ))

    unmatched = [e for e in catalog if e.normalized_barcode not in consumed]
    cap = MAX_EXCEL_ONLY_RICH if catalog_format is CatalogFormat.RICH else MAX_EXCEL_ONLY_LEGACY
    excel_only = sorted(unmatched, key=_sort_price, reverse=True)[:cap]

    for entry in excel_only:
        results.append(ComparisonResult(
            barcode=entry.barcode,
            normalized_barcode=entry.normalized_barcode,
            status=MatchStatus.EXCEL_ONLY,
            severity=Severity.LOW,
            discrepancy=_excel_only_description(entry, catalog_format),
            excel_data=entry,
        ))

    diagnostics.excel_only_available = len(unmatched)
    diagnostics.excel_only_reported = len(excel_only)

    logger.info(
        f"Comparison ({catalog_format.value}) for {supplier_name}: {len(pdf_barcodes)} PDF codes vs "
        f"{len(catalog)} catalog codes - exact {diagnostics.exact_matches}, fuzzy {diagnostics.fuzzy_matches}, "
        f"not found {diagnostics.not_found}, catalog only {len(excel_only)}/{len(unmatched)}"
    )
    if diagnostics.missing_codes:
        logger.debug(f"Missing PDF codes: {', '.join(diagnostics.missing_codes[:10])}")

    results.sort(key=lambda r: SEVERITY_ORDER[r.severity])
    return results, diagnostics


def compare_data(
    pdf_barcodes: Sequence[DocumentBarcode],
    catalog: Sequence[CatalogEntry],
    catalog_format: Optional[CatalogFormat] = None,
    other_catalog: Optional[Sequence[CatalogEntry]] = None,
) -> List[ComparisonResult]:
    results, _ = compare_data_with_diagnostics(pdf_barcodes, catalog, catalog_format, other_catalog)
    return results
