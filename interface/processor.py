"""
Pipeline orchestration for the UI.

Two stages, matching the two screens of the app:
- load_inputs: read both uploads, extract barcodes/references and the catalog,
  list suppliers and guess which one the labels belong to.
- run_reconciliation: scope the catalog to the chosen supplier, compare and
  compute metrics.

Extractions are cached per session by file digest, so choosing another
supplier only re-runs the comparison.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd

from domain.errors import ReconciliationError
from domain.models import (
    CatalogFormat,
    ComparisonResult,
    ComplianceMetrics,
    SupplierInfo,
    SupplierValidation,
)
from extraction.document import DocumentExtraction, extract_document_file
from extraction.spreadsheet import CatalogExtraction, extract_catalog_file
from fields.catalog_format import detect_catalog_format
from input_readers.validation import ensure_valid, validate_excel_upload, validate_pdf_upload
from matching.comparison import MatchDiagnostics, compare_data_with_diagnostics
from matching.metrics import calculate_compliance_metrics
from matching.supplier import (
    available_suppliers,
    filter_catalog_by_supplier,
    identify_supplier,
    validate_detection,
)
from services.cache import ResultCache, content_key
from services.performance import PerformanceMonitor
from writers.excel_writer import RESULT_COLUMNS, result_rows

logger = logging.getLogger(__name__)

FileInput = Union[bytes, str, Path]


@dataclass(frozen=True)
class LoadedInputs:
    document: DocumentExtraction
    catalog: CatalogExtraction
    suppliers: List[SupplierInfo]
    detected_supplier: Optional[SupplierInfo]
    validation: Optional[SupplierValidation]

    @property
    def pdf_count(self) -> int:
        return len(self.document.barcodes)


@dataclass(frozen=True)
class ReconciliationReport:
    supplier: Optional[SupplierInfo]
    results: List[ComparisonResult]
    metrics: ComplianceMetrics
    diagnostics: MatchDiagnostics
    catalog_format: CatalogFormat
    pdf_count: int
    catalog_count: int


def _as_bytes(source: FileInput) -> Tuple[bytes, str]:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), ""
    path = Path(source).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_bytes(), path.name


def load_inputs(
    pdf: FileInput,
    workbook: FileInput,
    pdf_name: Optional[str] = None,
    workbook_name: Optional[str] = None,
    cache: Optional[ResultCache] = None,
    monitor: Optional[PerformanceMonitor] = None,
    validate: bool = True,
) -> LoadedInputs:
    """
    Extract both inputs and detect the supplier.

    Args:
        pdf: Label PDF (bytes or path)
        workbook: Catalog workbook (bytes or path)
        pdf_name / workbook_name: Original upload names, needed for bytes input
        cache: Session cache for extraction results
        monitor: Session performance monitor
        validate: Run the upload checks (size, extension, signature) first

    Raises:
        FileValidationError: If an upload fails validation
        DocumentExtractionError: If the PDF cannot be read
        WorkbookStructureError: If the catalog cannot be extracted
    """
    monitor = monitor or PerformanceMonitor()
    pdf_bytes, pdf_default_name = _as_bytes(pdf)
    workbook_bytes, workbook_default_name = _as_bytes(workbook)
    pdf_name = pdf_name or pdf_default_name or "labels.pdf"
    workbook_name = workbook_name or workbook_default_name or "catalog.xlsx"

    if validate:
        ensure_valid(validate_pdf_upload(pdf_name, pdf_bytes) + validate_excel_upload(workbook_name, workbook_bytes))

    pdf_key = content_key("pdf", pdf_bytes)
    document = cache.get(pdf_key) if cache is not None else None
    if document is None:
        with monitor.measure("pdf_extraction", file=pdf_name):
            document = extract_document_file(pdf_bytes)
        if cache is not None:
            cache.set(pdf_key, document)

    workbook_key = content_key("excel", workbook_bytes)
    catalog = cache.get(workbook_key) if cache is not None else None
    if catalog is None:
        with monitor.measure("excel_extraction", file=workbook_name):
            catalog = extract_catalog_file(workbook_bytes, file_name=workbook_name)
        if cache is not None:
            cache.set(workbook_key, catalog)

    with monitor.measure("supplier_detection"):
        suppliers = available_suppliers(catalog.entries)
        detected = identify_supplier(document.references, catalog.entries)
        validation = validate_detection(detected, len(document.references)) if detected else None

    logger.info(
        f"Inputs loaded: {len(document.barcodes)} PDF barcodes, {len(catalog.entries)} catalog entries, "
        f"{len(suppliers)} suppliers, detected: {detected.name if detected else 'none'}"
    )
    return LoadedInputs(document, catalog, suppliers, detected, validation)


def find_supplier(inputs: LoadedInputs, name: Optional[str]) -> Optional[SupplierInfo]:
    if not name:
        return None
    if inputs.detected_supplier and inputs.detected_supplier.name == name:
        return inputs.detected_supplier
    for supplier in inputs.suppliers:
        if supplier.name == name:
            return supplier
    raise ReconciliationError(f"Unknown supplier: {name}")


def run_reconciliation(
    inputs: LoadedInputs,
    supplier: Optional[SupplierInfo],
    monitor: Optional[PerformanceMonitor] = None,
) -> ReconciliationReport:
    """
    Compare the document barcodes with the supplier's catalog entries.

    With no supplier the whole catalog is used. The unfiltered catalog is
    passed along so missing codes can be traced to another supplier.
    """
    monitor = monitor or PerformanceMonitor()
    all_entries = list(inputs.catalog.entries)
    scoped = filter_catalog_by_supplier(all_entries, supplier)
    catalog_format = detect_catalog_format(scoped)

    with monitor.measure("comparison", supplier=supplier.name if supplier else None):
        results, diagnostics = compare_data_with_diagnostics(
            inputs.document.barcodes,
            scoped,
            catalog_format=catalog_format,
            other_catalog=all_entries,
        )

    metrics = calculate_compliance_metrics(
        results,
        supplier_name=supplier.name if supplier else None,
        pdf_count=inputs.pdf_count,
        catalog_format=catalog_format,
    )

    return ReconciliationReport(
        supplier=supplier,
        results=results,
        metrics=metrics,
        diagnostics=diagnostics,
        catalog_format=catalog_format,
        pdf_count=inputs.pdf_count,
        catalog_count=len(scoped),
    )


def process_uploaded_files(
    pdf_file,
    excel_file,
    cache: Optional[ResultCache] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> Tuple[bool, Optional[LoadedInputs], Optional[str]]:
    """
    Streamlit entry point for the load stage.

    Returns:
        (success, inputs, error message)
    """
    try:
        inputs = load_inputs(
            pdf_file.getvalue(),
            excel_file.getvalue(),
            pdf_name=pdf_file.name,
            workbook_name=excel_file.name,
            cache=cache,
            monitor=monitor,
        )
        return True, inputs, None
    except ReconciliationError as e:
        logger.warning(f"Upload processing failed: {e}")
        return False, None, str(e)


def results_to_dataframe(results: Sequence[ComparisonResult]) -> pd.DataFrame:
    """Flatten comparison results into one row per result."""
    return pd.DataFrame(result_rows(results), columns=RESULT_COLUMNS)
