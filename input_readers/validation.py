"""
Upload validation: extension, size bounds and magic-byte signatures.

Checks return a list of issues rather than raising, so the UI can show every
problem at once; `ensure_valid` turns a non-empty list into an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from config.settings import (
    MAX_PDF_SIZE_MB,
    MIN_EXCEL_SIZE_BYTES,
    MIN_PDF_SIZE_BYTES,
    UI_MAX_EXCEL_SIZE_MB,
)
from domain.errors import FileValidationError

PDF_SIGNATURES = (b"%PDF",)

EXCEL_SIGNATURES = (
    b"PK\x03\x04",          # ZIP (xlsx/xlsm)
    b"PK\x05\x06",          # empty ZIP
)

LEGACY_EXCEL_EXTENSIONS = {".xls"}

EXCEL_EXTENSIONS = {".xlsx", ".xlsm", ".csv"}


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str


def _size_mb(data: bytes) -> float:
    return len(data) / 1024 / 1024


def has_valid_signature(data: bytes, kind: str) -> bool:
    """Compare the leading bytes against the known signatures for 'pdf' or 'excel'."""
    signatures = PDF_SIGNATURES if kind == "pdf" else EXCEL_SIGNATURES
    head = data[:8]
    return any(head.startswith(signature) for signature in signatures)


def validate_pdf_upload(file_name: str, data: bytes) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    if Path(file_name).suffix.lower() != ".pdf":
        issues.append(ValidationIssue("pdf", "The label file must be a PDF"))

    if _size_mb(data) > MAX_PDF_SIZE_MB:
        issues.append(ValidationIssue("pdf", f"The PDF must not exceed {MAX_PDF_SIZE_MB}MB"))

    if len(data) < MIN_PDF_SIZE_BYTES:
        issues.append(ValidationIssue("pdf", "The PDF looks empty or corrupted"))
    elif not has_valid_signature(data, "pdf"):
        issues.append(ValidationIssue("pdf", "The file content is not a PDF document"))

    return issues


def validate_excel_upload(file_name: str, data: bytes) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    suffix = Path(file_name).suffix.lower()

    if suffix in LEGACY_EXCEL_EXTENSIONS:
        issues.append(ValidationIssue("excel", "Legacy .xls workbooks are not supported, save the catalog as .xlsx"))
        return issues
    if suffix not in EXCEL_EXTENSIONS:
        issues.append(ValidationIssue("excel", "The catalog must be an Excel file (.xlsx, .xlsm) or CSV"))

    if _size_mb(data) > UI_MAX_EXCEL_SIZE_MB:
        issues.append(ValidationIssue("excel", f"The catalog must not exceed {UI_MAX_EXCEL_SIZE_MB}MB"))

    if len(data) < MIN_EXCEL_SIZE_BYTES:
        issues.append(ValidationIssue("excel", "The catalog looks empty or corrupted"))
    elif suffix != ".csv" and not has_valid_signature(data, "excel"):
        issues.append(ValidationIssue("excel", "The file content is not an Excel workbook"))

    return issues


def ensure_valid(issues: List[ValidationIssue]) -> None:
    """Raise FileValidationError listing every issue, if any."""
    if issues:
        message = "; ".join(issue.message for issue in issues)
        raise FileValidationError(message, issues)


def sanitize_file_name(file_name: str) -> str:
    """Keep letters, digits, dots and dashes; collapse underscores; max 100 chars."""
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", file_name)
    cleaned = re.sub(r"_{2,}", "_", cleaned)
    return cleaned[:100]
