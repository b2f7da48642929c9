"""
Exception taxonomy.

Structural failures (unusable workbook, missing barcode column, nothing
extracted) carry the diagnostic report gathered so far, so callers can show
the user what was detected. Row-level problems never raise; they are counted
in the report instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from extraction.report import ExtractionReport
    from input_readers.validation import ValidationIssue


class ReconciliationError(RuntimeError):
    """Base class for every error raised by the reconciliation pipeline."""
    pass


class FileValidationError(ReconciliationError):
    """Raised when an uploaded file fails size, type or signature checks."""

    def __init__(self, message: str, issues: Optional[List["ValidationIssue"]] = None):
        super().__init__(message)
        self.issues = list(issues or [])


class WorkbookStructureError(ReconciliationError):
    """Raised when a workbook cannot be used at all (no sheet, no header, unreadable)."""

    def __init__(self, message: str, report: Optional["ExtractionReport"] = None):
        super().__init__(message)
        self.report = report


class BarcodeColumnNotFoundError(WorkbookStructureError):
    """Raised when no column qualifies as the mandatory barcode column."""
    pass


class EmptyExtractionError(WorkbookStructureError):
    """Raised when a full pass over the data rows produced no catalog entry."""
    pass


class DocumentExtractionError(ReconciliationError):
    """Raised when a label PDF cannot be opened or its text cannot be read."""
    pass
