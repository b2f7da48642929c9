"""Compliance metrics over comparison results."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional, Sequence

from domain.models import (
    CatalogEntry,
    CatalogFormat,
    ComparisonResult,
    ComplianceMetrics,
    CurrencyAnalysis,
    MatchStatus,
    Severity,
)
from fields.catalog_format import detect_catalog_format

logger = logging.getLogger(__name__)


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def calculate_compliance_metrics(
    results: Sequence[ComparisonResult],
    supplier_name: Optional[str] = None,
    pdf_count: Optional[int] = None,
    catalog_format: Optional[CatalogFormat] = None,
) -> ComplianceMetrics:
    """
    Aggregate rates, distributions and currency statistics.

    Args:
        results: Output of compare_data
        supplier_name: Supplier the comparison was scoped to
        pdf_count: Number of barcodes extracted from the document. The result
            list is capped, so this is the authoritative denominator; when
            omitted (or 0) the results carrying document data are counted.
        catalog_format: Classification computed upstream; derived from the
            catalog data in the results when omitted

    Returns:
        ComplianceMetrics with rates as percentages
    """
    statuses = Counter(r.status for r in results)
    exact_matches = statuses[MatchStatus.EXACT_MATCH]
    price_mismatches = statuses[MatchStatus.PRICE_MISMATCH]
    pdf_only = statuses[MatchStatus.PDF_ONLY]
    excel_only = statuses[MatchStatus.EXCEL_ONLY]
    critical_errors = sum(1 for r in results if r.severity is Severity.HIGH)

    pdf_codes = pdf_count or sum(1 for r in results if r.pdf_data is not None)
    found = exact_matches + price_mismatches
    compliance_rate = found / pdf_codes * 100 if pdf_codes > 0 else 0.0
    error_rate = pdf_only / pdf_codes * 100 if pdf_codes > 0 else 0.0

    catalog_data: List[CatalogEntry] = [r.excel_data for r in results if r.excel_data is not None]

    colors = Counter(e.color for e in catalog_data if e.color)
    sizes = Counter(e.size for e in catalog_data if e.size)
    suppliers = Counter(e.supplier for e in catalog_data if e.supplier)

    eur_prices = [e.price_euro for e in catalog_data if e.price_euro]
    gbp_prices = [e.price_pound for e in catalog_data if e.price_pound]

    differences = [r.price_difference for r in results if r.price_difference is not None]

    if catalog_format is None:
        catalog_format = detect_catalog_format(catalog_data)

    metrics = ComplianceMetrics(
        total=len(results),
        exact_matches=exact_matches,
        price_mismatches=price_mismatches,
        pdf_only=pdf_only,
        excel_only=excel_only,
        critical_errors=critical_errors,
        compliance_rate=compliance_rate,
        error_rate=error_rate,
        average_price_difference=_mean(differences) or 0.0,
        supplier_name=supplier_name,
        format_detected=catalog_format,
        color_distribution=dict(colors),
        size_distribution=dict(sizes),
        supplier_distribution=dict(suppliers),
        currency_analysis=CurrencyAnalysis(
            eur_count=len(eur_prices),
            gbp_count=len(gbp_prices),
            average_price_eur=_mean(eur_prices),
            average_price_gbp=_mean(gbp_prices),
            price_discrepancies=price_mismatches,
        ),
    )

    logger.info(
        f"Metrics ({catalog_format.value}) for {supplier_name or 'all suppliers'}: "
        f"{found}/{pdf_codes} PDF codes found ({compliance_rate:.1f}%), {pdf_only} missing ({error_rate:.1f}%)"
    )
    return metrics
