"""
Catalog extraction from supplier workbooks.

This module walks every data row of the detected catalog sheet and turns it
into CatalogEntry records, while filling an ExtractionReport.

Key behaviors:
- Rows are processed in chunks of CHUNK_SIZE; control is yielded between
  chunks so a long extraction never monopolises the interpreter.
- Row-level problems (blank barcode, malformed barcode, exception) are
  counted and skipped; they never abort the pass.
- Duplicate normalized barcodes: the first occurrence wins, later rows are dropped.
- Structural problems (no sheet, no barcode column, nothing extracted) raise
  errors whose message is meant to be shown to the user as-is.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Set, Tuple

from config.settings import (
    CHUNK_SIZE,
    FEW_ENTRIES_THRESHOLD,
    LOW_QUALITY_SCORE,
    MAX_CATALOG_BARCODE_LENGTH,
    MAX_FILE_SIZE_MB,
    MIN_CATALOG_BARCODE_LENGTH,
    SLOW_PROCESSING_SECONDS,
)
from domain.errors import (
    BarcodeColumnNotFoundError,
    EmptyExtractionError,
    FileValidationError,
    WorkbookStructureError,
)
from domain.models import CatalogEntry, CatalogFormat, Currency
from fields.barcode import is_plausible_catalog_barcode, normalize_barcode
from fields.catalog_format import detect_catalog_format
from fields.price import parse_price
from fields.text import cell_to_text, is_blank, sanitize_input
from input_readers.excel import Workbook, WorkbookSource, read_workbook

from .column_detector import ColumnMapping, detect_columns, detect_header_row, select_best_sheet
from .report import DataQuality, ExtractionReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# Optional text fields copied verbatim (sanitized) from their mapped column
TEXT_FIELDS = (
    "description",
    "supplier",
    "product_reference",
    "color",
    "size",
    "color_code",
    "season",
    "creation_season",
    "brand_code",
    "commercial_delay",
)

# Not worth a "missing column" suggestion
NON_ESSENTIAL_FIELDS = {"price", "commercial_delay"}

RICH_FORMAT_FIELDS = {"color", "size", "price_euro", "price_pound"}


@dataclass(frozen=True)
class CatalogExtraction:
    entries: Tuple[CatalogEntry, ...]
    report: ExtractionReport
    catalog_format: CatalogFormat


# ============================================================================
# ROW HELPERS
# ============================================================================

def _cell(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def _text_field(row: Sequence[Any], mapping: ColumnMapping, field_name: str) -> Optional[str]:
    value = _cell(row, mapping.index_of(field_name))
    text = sanitize_input(cell_to_text(value))
    return text or None


def _price_field(row: Sequence[Any], mapping: ColumnMapping, field_name: str) -> Optional[float]:
    if field_name not in mapping:
        return None
    return parse_price(_cell(row, mapping.index_of(field_name)))


def _build_entry(row: Sequence[Any], mapping: ColumnMapping, barcode: str, normalized: str) -> CatalogEntry:
    price = _price_field(row, mapping, "price")
    price_euro = _price_field(row, mapping, "price_euro")
    price_pound = _price_field(row, mapping, "price_pound")
    currency: Optional[Currency] = None

    if price_euro is not None:
        price, currency = price_euro, Currency.EUR
    elif price_pound is not None:
        price, currency = price_pound, Currency.GBP

    texts = {name: _text_field(row, mapping, name) for name in TEXT_FIELDS}

    return CatalogEntry(
        barcode=barcode,
        normalized_barcode=normalized,
        price=price,
        price_euro=price_euro,
        price_pound=price_pound,
        currency=currency,
        **texts,
    )


def _process_rows_in_chunks(
    rows: List[List[Any]],
    mapping: ColumnMapping,
    report: ExtractionReport,
    chunk_size: int,
    on_progress: Optional[ProgressCallback],
) -> List[CatalogEntry]:
    entries: List[CatalogEntry] = []
    seen: Set[str] = set()
    quality = report.data_quality
    barcode_index = mapping.index_of("barcode")
    total = len(rows)

    for chunk_start in range(0, total, chunk_size):
        chunk = rows[chunk_start:chunk_start + chunk_size]

        for offset, row in enumerate(chunk):
            # position among the non-empty data rows; the reader drops blank sheet rows
            row_number = chunk_start + offset + 1

            if not row or all(is_blank(v) for v in row):
                quality.empty_rows += 1
                continue

            try:
                raw_barcode = sanitize_input(cell_to_text(_cell(row, barcode_index)))

                if not raw_barcode or len(raw_barcode) < MIN_CATALOG_BARCODE_LENGTH:
                    quality.empty_rows += 1
                    continue

                if not is_plausible_catalog_barcode(
                    raw_barcode, MIN_CATALOG_BARCODE_LENGTH, MAX_CATALOG_BARCODE_LENGTH
                ):
                    quality.error_rows += 1
                    continue

                normalized = normalize_barcode(raw_barcode)
                if normalized in seen:
                    quality.duplicates += 1
                    continue

                entry = _build_entry(row, mapping, raw_barcode, normalized)
            except Exception as e:
                quality.error_rows += 1
                report.warnings.append(f"Data row {row_number}: {e}")
                logger.debug(f"Data row {row_number} skipped: {e}")
                continue

            seen.add(normalized)
            entries.append(entry)
            quality.valid_rows += 1

        report.performance.chunks_processed += 1
        if on_progress is not None:
            on_progress(min(chunk_start + chunk_size, total), total)

        # cooperative yield between chunks
        time.sleep(0)

    return entries


# ============================================================================
# QUALITY AND SUGGESTIONS
# ============================================================================

def compute_quality_score(quality: DataQuality, detected_columns: int) -> int:
    """100*valid - 50*errors - 20*empty (as ratios of data rows) + 5 per detected column, in [0, 100]."""
    total = quality.total_rows
    if total == 0:
        return 0

    score = quality.valid_rows / total * 100
    score -= quality.error_rows / total * 50
    score -= quality.empty_rows / total * 20
    score += detected_columns * 5

    return max(0, min(100, round(score)))


def _add_suggestions(report: ExtractionReport, result_count: int) -> None:
    suggestions = report.suggestions
    quality = report.data_quality
    detected = set(report.detected_fields)

    if RICH_FORMAT_FIELDS <= detected:
        suggestions.append("Rich format detected: colors, sizes and EUR/GBP prices available")
    elif {"barcode", "price"} <= detected:
        suggestions.append("Legacy format detected: barcode and single price columns")

    if quality.quality_score < LOW_QUALITY_SCORE:
        suggestions.append("Low data quality: check the file layout")

    if quality.error_rows > quality.valid_rows * 0.1:
        suggestions.append("Many invalid rows: check barcode and price formats")

    if quality.duplicates > 0:
        suggestions.append(f"{quality.duplicates} duplicate barcodes removed (first occurrence kept)")

    missing = [
        name for name, detection in report.column_detection.items()
        if not detection.detected and name not in NON_ESSENTIAL_FIELDS
    ]
    if missing:
        suggestions.append(f"Columns not detected: {', '.join(missing)}")

    if report.file_analysis.processing_time > SLOW_PROCESSING_SECONDS:
        suggestions.append("Large file: consider splitting it into several workbooks")

    if result_count == 0:
        suggestions.append("No data extracted: check the sheet and its columns")
    elif result_count < FEW_ENTRIES_THRESHOLD:
        suggestions.append("Few entries extracted: check that the right sheet was selected")


# ============================================================================
# ERROR MESSAGES
# ============================================================================

def build_column_error(report: ExtractionReport, headers: Sequence[str]) -> str:
    analysis = report.file_analysis
    detection = report.column_detection.get("barcode")
    columns = ", ".join(f'{i}: "{h}"' for i, h in enumerate(headers)) or "none"

    lines = [
        "Barcode column not found.",
        "",
        "FILE ANALYSIS:",
        f'- Worksheet used: "{analysis.selected_sheet}"',
        f"- Available worksheets: {', '.join(analysis.sheets)}",
        f"- Header row: {analysis.header_row_index + 1}",
        f"- Detected headers: {columns}",
        f"- Rows analysed: {report.data_quality.total_rows}",
        "",
    ]

    if detection and detection.alternatives:
        lines.append("CANDIDATE COLUMNS:")
        for i, alt in enumerate(detection.alternatives, start=1):
            lines.append(f'{i}. "{alt.name}" (confidence: {alt.confidence * 100:.0f}%)')
        lines.append("")

    lines += [
        "POSSIBLE FIXES:",
        '1. Rich format: name the barcode column "Gencod"',
        '2. Legacy format: name it "code-barres", "barcode" or "ean"',
        f'3. Check that worksheet "{analysis.selected_sheet}" holds the product data',
        "4. Barcodes must be numeric (e.g. 3605168507131)",
    ]
    return "\n".join(lines)


def build_no_data_error(report: ExtractionReport) -> str:
    quality = report.data_quality
    return "\n".join([
        f'No valid barcode found in worksheet "{report.file_analysis.selected_sheet}".',
        "",
        "STATISTICS:",
        f"- Total rows: {quality.total_rows}",
        f"- Valid rows: {quality.valid_rows}",
        f"- Rows with errors: {quality.error_rows}",
        f"- Empty rows: {quality.empty_rows}",
        f"- Duplicates: {quality.duplicates}",
        f"- Quality score: {quality.quality_score}%",
        "",
        "CHECKS:",
        "1. Barcodes must be entirely numeric",
        f"2. Accepted length: {MIN_CATALOG_BARCODE_LENGTH} to {MAX_CATALOG_BARCODE_LENGTH} digits",
        "3. Expected values look like 3605168654224",
    ])


# ============================================================================
# PUBLIC API
# ============================================================================

def extract_catalog(
    workbook: Workbook,
    file_name: str = "",
    file_size: int = 0,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = CHUNK_SIZE,
) -> CatalogExtraction:
    """
    Extract catalog entries from an already-read workbook.

    Args:
        workbook: Sheet name -> raw grid (see input_readers.read_workbook)
        file_name: Original file name, for diagnostics
        file_size: Original size in bytes; above MAX_FILE_SIZE_MB is rejected
        on_progress: Called with (rows_done, rows_total) after every chunk
        chunk_size: Rows processed between two cooperative yields

    Returns:
        CatalogExtraction with entries in sheet order, the report and the catalog format

    Raises:
        FileValidationError: If the file is too large
        WorkbookStructureError: If no usable sheet exists
        BarcodeColumnNotFoundError: If no column qualifies as barcode column
        EmptyExtractionError: If no row produced an entry
    """
    start = time.perf_counter()
    report = ExtractionReport()
    report.file_analysis.file_name = file_name
    report.file_analysis.file_size = file_size
    report.file_analysis.sheets = list(workbook)

    try:
        if file_size > MAX_FILE_SIZE_MB * 1024 * 1024:
            raise FileValidationError(
                f"File too large ({file_size / 1024 / 1024:.1f}MB). Maximum allowed: {MAX_FILE_SIZE_MB}MB"
            )

        selection = select_best_sheet(workbook)
        if selection is None:
            raise WorkbookStructureError("The workbook contains no worksheet", report)

        report.file_analysis.selected_sheet = selection.name
        report.file_analysis.sheet_selection_method = selection.method
        if selection.method == "name_priority":
            report.suggestions.append(f'Worksheet selected automatically: "{selection.name}"')
        logger.info(f"Selected worksheet: '{selection.name}' ({selection.method})")

        grid = workbook[selection.name]
        if len(grid) < 2:
            raise WorkbookStructureError(
                f'Worksheet "{selection.name}" must contain a header row and at least one data row',
                report,
            )

        header_row = detect_header_row(grid)
        report.file_analysis.header_row_index = header_row.index
        if not header_row.detected:
            report.warnings.append(
                f"No clear header row detected, using row {header_row.index + 1}"
            )

        data_rows = grid[header_row.index + 1:]
        report.data_quality.total_rows = len(data_rows)

        mapping = detect_columns(grid, header_row)
        report.column_detection = mapping.detections

        if "barcode" not in mapping:
            raise BarcodeColumnNotFoundError(build_column_error(report, header_row.headers), report)

        process_start = time.perf_counter()
        entries = _process_rows_in_chunks(
            data_rows,
            mapping,
            report,
            chunk_size=chunk_size,
            on_progress=on_progress,
        )
        report.performance.process_time = time.perf_counter() - process_start
        report.file_analysis.processing_time = time.perf_counter() - start

        report.data_quality.quality_score = compute_quality_score(
            report.data_quality, len(report.detected_fields)
        )
        _add_suggestions(report, len(entries))

        if not entries:
            raise EmptyExtractionError(build_no_data_error(report), report)

    except (WorkbookStructureError, FileValidationError) as e:
        report.errors.append(str(e))
        report.file_analysis.processing_time = time.perf_counter() - start
        raise

    catalog_format = detect_catalog_format(entries)
    quality = report.data_quality
    logger.info(
        f"Catalog extraction ({catalog_format.value} format): {len(entries)} entries from "
        f"'{report.file_analysis.selected_sheet}' - valid {quality.valid_rows}, errors {quality.error_rows}, "
        f"empty {quality.empty_rows}, duplicates {quality.duplicates}, quality {quality.quality_score}%"
    )

    return CatalogExtraction(tuple(entries), report, catalog_format)


def extract_catalog_file(
    source: WorkbookSource,
    file_name: str | None = None,
    on_progress: Optional[ProgressCallback] = None,
) -> CatalogExtraction:
    """Read a workbook (path, bytes or stream) and extract its catalog."""
    if isinstance(source, (str, Path)):
        path = Path(source).expanduser().resolve()
        file_name = file_name or path.name
        file_size = path.stat().st_size if path.exists() else 0
    elif isinstance(source, (bytes, bytearray)):
        file_size = len(source)
    else:
        file_size = 0

    if file_size > MAX_FILE_SIZE_MB * 1024 * 1024:
        raise FileValidationError(
            f"File too large ({file_size / 1024 / 1024:.1f}MB). Maximum allowed: {MAX_FILE_SIZE_MB}MB"
        )

    parse_start = time.perf_counter()
    try:
        workbook = read_workbook(source, file_name=file_name)
    except ValueError as e:
        raise WorkbookStructureError(str(e)) from e
    parse_time = time.perf_counter() - parse_start

    extraction = extract_catalog(
        workbook,
        file_name=file_name or "",
        file_size=file_size,
        on_progress=on_progress,
    )
    extraction.report.performance.parse_time = parse_time
    return extraction
