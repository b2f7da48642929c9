from .excel import Grid, Workbook, read_workbook
from .pdf import read_pdf, read_pdf_pages
from .validation import (
    ValidationIssue,
    ensure_valid,
    has_valid_signature,
    sanitize_file_name,
    validate_excel_upload,
    validate_pdf_upload,
)
