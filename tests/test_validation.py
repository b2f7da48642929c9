import pytest

from domain.errors import FileValidationError
from input_readers.validation import (
    ensure_valid,
    has_valid_signature,
    sanitize_file_name,
    validate_excel_upload,
    validate_pdf_upload,
)

PDF_BYTES = b"%PDF-1.7\n" + b"0" * 2048
XLSX_BYTES = b"PK\x03\x04" + b"0" * 512
XLS_BYTES = b"\xD0\xCF\x11\xE0" + b"0" * 512


def messages(issues):
    return [issue.message for issue in issues]


def test_signatures():
    assert has_valid_signature(PDF_BYTES, "pdf")
    assert not has_valid_signature(XLSX_BYTES, "pdf")
    assert has_valid_signature(XLSX_BYTES, "excel")
    assert not has_valid_signature(XLS_BYTES, "excel")
    assert not has_valid_signature(PDF_BYTES, "excel")


def test_valid_pdf_upload():
    assert validate_pdf_upload("labels.PDF", PDF_BYTES) == []


def test_pdf_upload_problems_are_all_reported():
    issues = validate_pdf_upload("labels.txt", b"hello")
    assert messages(issues) == ["The label file must be a PDF", "The PDF looks empty or corrupted"]
    assert all(issue.field == "pdf" for issue in issues)


def test_pdf_with_wrong_content():
    issues = validate_pdf_upload("labels.pdf", b"GIF89a" + b"0" * 2048)
    assert messages(issues) == ["The file content is not a PDF document"]


def test_oversized_pdf():
    issues = validate_pdf_upload("labels.pdf", b"%PDF" + b"0" * (51 * 1024 * 1024))
    assert messages(issues) == ["The PDF must not exceed 50MB"]


def test_valid_excel_uploads():
    assert validate_excel_upload("catalog.xlsx", XLSX_BYTES) == []
    assert validate_excel_upload("catalog.xlsm", XLSX_BYTES) == []


def test_legacy_xls_rejected_with_conversion_hint():
    assert messages(validate_excel_upload("catalog.xls", XLS_BYTES)) == [
        "Legacy .xls workbooks are not supported, save the catalog as .xlsx"
    ]
    assert messages(validate_excel_upload("catalog.xlsx", XLS_BYTES)) == [
        "The file content is not an Excel workbook"
    ]


def test_csv_has_no_signature_check():
    assert validate_excel_upload("catalog.csv", b"Gencod;Prix\n" * 20) == []


def test_excel_upload_problems():
    assert messages(validate_excel_upload("catalog.docx", XLSX_BYTES)) == [
        "The catalog must be an Excel file (.xlsx, .xlsm) or CSV"
    ]
    assert messages(validate_excel_upload("catalog.xlsx", b"PK")) == ["The catalog looks empty or corrupted"]
    assert messages(validate_excel_upload("catalog.xlsx", PDF_BYTES)) == [
        "The file content is not an Excel workbook"
    ]
    assert messages(validate_excel_upload("catalog.xlsx", b"PK\x03\x04" + b"0" * (21 * 1024 * 1024))) == [
        "The catalog must not exceed 20MB"
    ]


def test_ensure_valid_raises_with_every_issue():
    ensure_valid([])

    issues = validate_pdf_upload("labels.txt", b"hello")
    with pytest.raises(FileValidationError) as excinfo:
        ensure_valid(issues)

    assert excinfo.value.issues == issues
    assert str(excinfo.value) == "The label file must be a PDF; The PDF looks empty or corrupted"


def test_sanitize_file_name():
    assert sanitize_file_name("Catalogue été 2026 (v2).xlsx") == "Catalogue_t_2026_v2_.xlsx"
    assert sanitize_file_name("a" * 150 + ".pdf") == "a" * 100
