import pytest

from domain.models import (
    CatalogFormat,
    ComparisonResult,
    Currency,
    DocumentBarcode,
    MatchStatus,
    Severity,
)
from matching.comparison import compare_data, compare_data_with_diagnostics
from conftest import catalog_entry, document_barcodes


def by_barcode(results):
    return {r.barcode: r for r in results}


def test_exact_matches_and_missing_codes():
    catalog = [catalog_entry("3605168507131", 45.0), catalog_entry("3605168507148", 45.0)]
    pdf = document_barcodes(["3605168507131", "3605168999999"])

    results = by_barcode(compare_data(pdf, catalog))

    matched = results["3605168507131"]
    assert matched.status is MatchStatus.EXACT_MATCH
    assert matched.severity is Severity.LOW
    assert matched.excel_data.barcode == "3605168507131"
    assert "normalized code" in matched.discrepancy
    assert "OXBOW SAS" in matched.discrepancy

    missing = results["3605168999999"]
    assert missing.status is MatchStatus.PDF_ONLY
    assert missing.severity is Severity.HIGH
    assert missing.excel_data is None
    assert "OXBOW SAS" in missing.discrepancy


def test_raw_barcode_lookup():
    # catalog entry whose raw form is what the document carries
    entry = catalog_entry("3605168-507131")
    pdf = [DocumentBarcode(barcode="3605168-507131", normalized_barcode="36051685071310")]

    results, diagnostics = compare_data_with_diagnostics(pdf, [entry])

    assert results[0].status is MatchStatus.EXACT_MATCH
    assert diagnostics.match_details[0].reason == "Exact match on raw code"


def test_fuzzy_truncated_code_match():
    catalog = [catalog_entry("605168123456", 10.0)]
    pdf = document_barcodes(["3605168123456"])

    results, diagnostics = compare_data_with_diagnostics(pdf, catalog)

    assert len(results) == 1
    assert results[0].status is MatchStatus.EXACT_MATCH
    assert results[0].excel_data.normalized_barcode == "605168123456"
    assert diagnostics.fuzzy_matches == 1
    assert diagnostics.match_details[0].match_type == "fuzzy"


def test_fuzzy_match_by_suffix():
    catalog = [catalog_entry("00605168123456")]
    results = compare_data(document_barcodes(["3605168123456"]), catalog)
    assert results[0].status is MatchStatus.EXACT_MATCH


def test_short_codes_never_fuzzy_matched():
    catalog = [catalog_entry("2345678901")]
    results = compare_data(document_barcodes(["1234567890"]), catalog)
    assert by_barcode(results)["1234567890"].status is MatchStatus.PDF_ONLY


def test_excel_only_capped_and_sorted_by_price():
    catalog = [catalog_entry(f"36051680{i:05d}", float(i + 1)) for i in range(200)]

    results = compare_data([], catalog)

    assert len(results) == 50
    assert all(r.status is MatchStatus.EXCEL_ONLY for r in results)
    prices = [r.excel_data.price for r in results]
    assert prices == sorted(prices, reverse=True)
    assert prices[0] == 200.0
    assert prices[-1] == 151.0


def test_rich_format_cap_is_higher():
    catalog = [
        catalog_entry(f"36051680{i:05d}", color="NAVY", size="M", price_euro=float(i + 1), price_pound=1.0)
        for i in range(200)
    ]
    results = compare_data([], catalog)
    assert len(results) == 100


def test_high_severity_first_and_stable():
    catalog = [catalog_entry("3605168507131", 10.0), catalog_entry("3605168507148", 99.0)]
    pdf = document_barcodes(["3605168507131", "3605168000001", "3605168000002"])

    results = compare_data(pdf, catalog)

    assert [r.barcode for r in results] == [
        "3605168000001",
        "3605168000002",
        "3605168507131",
        "3605168507148",
    ]
    assert [r.status for r in results] == [
        MatchStatus.PDF_ONLY,
        MatchStatus.PDF_ONLY,
        MatchStatus.EXACT_MATCH,
        MatchStatus.EXCEL_ONLY,
    ]


def test_fuzzy_matched_entry_not_reported_as_excel_only():
    catalog = [catalog_entry("605168123456", 10.0), catalog_entry("3605168507148", 20.0)]
    results = compare_data(document_barcodes(["3605168123456"]), catalog)

    excel_only = [r.barcode for r in results if r.status is MatchStatus.EXCEL_ONLY]
    assert excel_only == ["3605168507148"]


def test_missing_code_traced_to_other_supplier():
    oxbow = [catalog_entry("3605168507131", supplier="OXBOW SAS")]
    everything = oxbow + [catalog_entry("3605168654224", 80.0, supplier="TEXTIL CO")]

    results, diagnostics = compare_data_with_diagnostics(
        document_barcodes(["3605168654224"]), oxbow, other_catalog=everything
    )

    missing = by_barcode(results)["3605168654224"]
    assert missing.status is MatchStatus.PDF_ONLY
    assert "TEXTIL CO" in missing.discrepancy
    analysis = diagnostics.missing_code_analysis[0]
    assert analysis.exists_in_catalog
    assert analysis.other_supplier == "TEXTIL CO"
    assert analysis.other_price == 80.0


def test_rich_discrepancy_details():
    entry = catalog_entry("3605168507131", color="NAVY", size="M", price_euro=45.0, price_pound=39.5)
    results = compare_data(document_barcodes(["3605168507131"]), [entry])
    assert results[0].discrepancy.endswith("| NAVY - M | 45€ / 39.5£")


def test_excel_only_pound_price_label():
    entry = catalog_entry("3605168507131", 39.0, currency=Currency.GBP, price_pound=39.0)
    results = compare_data([], [entry])
    assert results[0].discrepancy.endswith("(39.00£)")


def test_catalog_format_passed_in_is_used():
    catalog = [catalog_entry(f"36051680{i:05d}", float(i)) for i in range(80)]
    _, diagnostics = compare_data_with_diagnostics([], catalog, catalog_format=CatalogFormat.RICH)
    assert diagnostics.catalog_format is CatalogFormat.RICH
    assert diagnostics.excel_only_reported == 80


def test_empty_inputs():
    results, diagnostics = compare_data_with_diagnostics([], [])
    assert results == []
    assert diagnostics.supplier_name == "unknown supplier"


def test_result_invariants_enforced():
    pdf = document_barcodes(["3605168507131"])[0]
    with pytest.raises(ValueError):
        ComparisonResult(
            barcode="3605168507131",
            normalized_barcode="3605168507131",
            status=MatchStatus.PDF_ONLY,
            severity=Severity.LOW,
            pdf_data=pdf,
        )
    with pytest.raises(ValueError):
        ComparisonResult(
            barcode="3605168507131",
            normalized_barcode="3605168507131",
            status=MatchStatus.EXACT_MATCH,
            severity=Severity.LOW,
            pdf_data=pdf,
        )
