"""
EXCEL REPORT WRITER
-------------------
Writes a reconciliation report to .xlsx with openpyxl:
- Summary: key figures of the run
- Details: one row per comparison result
- Critical: high-severity results only (PDF codes missing from the catalog), headers only when none
- Suppliers: per-supplier breakdown, only when results span several suppliers

Content only; the layout is kept to bold headers and sized columns.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from domain.models import ComparisonResult, MatchStatus, Severity

if TYPE_CHECKING:
    from interface.processor import ReconciliationReport

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "Barcode",
    "Normalized barcode",
    "Status",
    "Severity",
    "In PDF",
    "In catalog",
    "Price",
    "Currency",
    "Price EUR",
    "Price GBP",
    "Description",
    "Supplier",
    "Product reference",
    "Color",
    "Size",
    "Price difference",
    "Observation",
]

CRITICAL_COLUMNS = ["Priority", "Barcode", "Error type", "Supplier", "Action", "Observation"]

SUPPLIER_COLUMNS = ["Supplier", "Products", "Matches", "Errors", "Compliance rate", "Average price"]

MAX_COLUMN_WIDTH = 60

STATUS_LABELS = {
    MatchStatus.EXACT_MATCH: "Match",
    MatchStatus.PDF_ONLY: "Missing from catalog",
    MatchStatus.EXCEL_ONLY: "Catalog only",
    MatchStatus.PRICE_MISMATCH: "Price mismatch",
}

REQUIRED_ACTIONS = {
    MatchStatus.EXACT_MATCH: "None",
    MatchStatus.PDF_ONLY: "Check the label barcode with the supplier",
    MatchStatus.EXCEL_ONLY: "Check whether the product should have a label",
    MatchStatus.PRICE_MISMATCH: "Align the printed price with the catalog",
}


def _yes_no(present: bool) -> str:
    return "Yes" if present else "No"


def result_rows(results: Sequence[ComparisonResult]) -> List[Dict[str, Any]]:
    """Flatten comparison results into dicts keyed by RESULT_COLUMNS."""
    rows = []
    for r in results:
        entry = r.excel_data
        rows.append({
            "Barcode": r.barcode,
            "Normalized barcode": r.normalized_barcode,
            "Status": r.status.value,
            "Severity": r.severity.value,
            "In PDF": _yes_no(r.pdf_data is not None),
            "In catalog": _yes_no(entry is not None),
            "Price": entry.price if entry else None,
            "Currency": entry.currency.value if entry and entry.currency else None,
            "Price EUR": entry.price_euro if entry else None,
            "Price GBP": entry.price_pound if entry else None,
            "Description": entry.description if entry else None,
            "Supplier": entry.supplier if entry else None,
            "Product reference": entry.product_reference if entry else None,
            "Color": entry.color if entry else None,
            "Size": entry.size if entry else None,
            "Price difference": r.price_difference,
            "Observation": r.discrepancy,
        })
    return rows


def _percent(part: int, whole: int) -> str:
    return f"{part / whole * 100:.1f}%" if whole else "0.0%"


def summary_rows(report: "ReconciliationReport", generated_at: datetime) -> List[List[Any]]:
    m = report.metrics
    return [
        ["Barcode compliance report", ""],
        ["Generated", generated_at.strftime("%Y-%m-%d %H:%M")],
        ["Supplier", m.supplier_name or "All suppliers"],
        ["Catalog format", m.format_detected.value],
        ["", ""],
        ["PDF barcodes", report.pdf_count],
        ["Catalog entries in scope", report.catalog_count],
        ["Results", m.total],
        ["Matches", f"{m.exact_matches} ({_percent(m.exact_matches, report.pdf_count)})"],
        ["Missing from catalog", f"{m.pdf_only} ({_percent(m.pdf_only, report.pdf_count)})"],
        ["Catalog only (reported)", m.excel_only],
        ["Price mismatches", m.price_mismatches],
        ["", ""],
        ["Compliance rate", f"{m.compliance_rate:.1f}%"],
        ["Error rate", f"{m.error_rate:.1f}%"],
        ["Critical errors", m.critical_errors],
        ["Average price difference", f"{m.average_price_difference:.2f}"],
    ]


def critical_rows(report: "ReconciliationReport") -> List[List[Any]]:
    rows = []
    critical = [r for r in report.results if r.severity is Severity.HIGH or r.status is MatchStatus.PDF_ONLY]
    for i, r in enumerate(critical, start=1):
        supplier = (r.excel_data.supplier if r.excel_data else None) or report.metrics.supplier_name or "N/A"
        rows.append([
            i,
            r.barcode,
            STATUS_LABELS[r.status],
            supplier,
            REQUIRED_ACTIONS[r.status],
            r.discrepancy,
        ])
    return rows


def supplier_rows(results: Sequence[ComparisonResult]) -> List[List[Any]]:
    totals: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"total": 0, "matches": 0, "errors": 0, "prices": []})
    for r in results:
        if r.excel_data is None or not r.excel_data.supplier:
            continue
        stats = totals[r.excel_data.supplier]
        stats["total"] += 1
        if r.status is MatchStatus.EXACT_MATCH:
            stats["matches"] += 1
        elif r.severity is Severity.HIGH:
            stats["errors"] += 1
        if r.excel_data.price:
            stats["prices"].append(r.excel_data.price)

    rows = []
    for name, stats in totals.items():
        prices = stats["prices"]
        rows.append([
            name,
            stats["total"],
            stats["matches"],
            stats["errors"],
            _percent(stats["matches"], stats["total"]),
            round(sum(prices) / len(prices), 2) if prices else None,
        ])
    return rows


def _write_sheet(wb: Workbook, title: str, headers: Optional[List[str]], rows: List[List[Any]]) -> None:
    ws = wb.create_sheet(title=title)
    if headers:
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)

    for col_idx, column in enumerate(ws.iter_cols(values_only=True), start=1):
        longest = max((len(str(v)) for v in column if v is not None), default=8)
        ws.column_dimensions[get_column_letter(col_idx)].width = min(longest + 2, MAX_COLUMN_WIDTH)


def generate_file_name(supplier_name: Optional[str], now: datetime, prefix: str = "barcode-compliance") -> str:
    supplier = f"_{re.sub(r'[^a-zA-Z0-9]', '_', supplier_name)}" if supplier_name else ""
    return f"{prefix}{supplier}_{now.strftime('%Y-%m-%d_%H-%M')}.xlsx"


def write_report_xlsx(
    output_path: Path,
    report: "ReconciliationReport",
    generated_at: Optional[datetime] = None,
) -> Path:
    """
    Write the report workbook.

    Args:
        output_path: Destination .xlsx (parent directories are created)
        report: Result of run_reconciliation
        generated_at: Timestamp shown in the summary (defaults to now)

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    generated_at = generated_at or datetime.now()

    wb = Workbook()
    wb.remove(wb.active)

    _write_sheet(wb, "Summary", None, summary_rows(report, generated_at))
    wb["Summary"]["A1"].font = Font(bold=True, size=14)

    details = [[row[c] for c in RESULT_COLUMNS] for row in result_rows(report.results)]
    _write_sheet(wb, "Details", RESULT_COLUMNS, details)

    _write_sheet(wb, "Critical", CRITICAL_COLUMNS, critical_rows(report))

    suppliers = supplier_rows(report.results)
    if len(suppliers) > 1:
        _write_sheet(wb, "Suppliers", SUPPLIER_COLUMNS, suppliers)

    wb.save(output_path)
    logger.info(f"Report written to {output_path} ({len(report.results)} results)")
    return output_path
