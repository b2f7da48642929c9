import pytest

from domain.errors import DocumentExtractionError
from extraction.document import BarcodePatternSet, extract_document_data, extract_document_file
from input_readers.pdf import read_pdf_pages

LABEL_TEXT = """
OXBOW TEE SHIRT P1TEE0001 NAVY M
EAN 3605168507131 45,00 EUR
OXBOW TEE SHIRT P1TEE0001 NAVY L
EAN 3 605168 507148
BOARD SHORT P1BRD0002 BLACK 32
EAN 3 6051 68 632215
EAN 3605168507131
"""


def test_barcodes_extracted_once_each():
    extraction = extract_document_data(LABEL_TEXT)
    codes = [b.barcode for b in extraction.barcodes]

    assert codes == ["3605168507131", "3605168507148", "3605168632215"]
    assert all(b.normalized_barcode == b.barcode for b in extraction.barcodes)
    assert all(b.source == "document" for b in extraction.barcodes)
    assert not extraction.stats.used_fallback


def test_product_references_are_nine_character_tokens():
    extraction = extract_document_data(LABEL_TEXT)
    codes = extraction.reference_codes

    assert codes.count("P1TEE0001") == 2
    assert "P1BRD0002" in codes
    assert all(len(code) == 9 for code in codes)
    assert extraction.references[0].pattern == "DIRECT"


def test_other_prefixes_ignored_by_default():
    extraction = extract_document_data("EAN 4006381333931 and 3605168507131")
    assert [b.barcode for b in extraction.barcodes] == ["3605168507131"]


def test_fallback_scan_on_flattened_text():
    # digits split in a way none of the prefix patterns tolerate
    text = "EAN 36051\n6850 7131"
    extraction = extract_document_data(text)

    assert [b.barcode for b in extraction.barcodes] == ["3605168507131"]
    assert extraction.stats.used_fallback


def test_configured_prefixes():
    patterns = BarcodePatternSet(prefixes=("400638",), length=13)
    extraction = extract_document_data("EAN 4006381333931 and 3605168507131", patterns)
    assert [b.barcode for b in extraction.barcodes] == ["4006381333931"]


def test_empty_prefix_set_accepts_any_code_of_the_length():
    patterns = BarcodePatternSet(prefixes=(), length=13)
    extraction = extract_document_data("4006381333931 / 3605168507131 / 12345", patterns)
    assert [b.barcode for b in extraction.barcodes] == ["4006381333931", "3605168507131"]


def test_text_without_barcodes():
    extraction = extract_document_data("nothing to see here")
    assert extraction.barcodes == []
    assert extraction.stats.valid_barcodes_extracted == 0
    assert extraction.text_sample == "nothing to see here"


def test_unreadable_pdf_raises():
    with pytest.raises(DocumentExtractionError):
        extract_document_file(b"%PDF-1.4 garbage that is not a document")


def test_missing_pdf_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_document_file(tmp_path / "missing.pdf")


def one_page_pdf(lines):
    """Minimal one-page PDF with a Helvetica text layer, one text line per entry."""
    text_ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        text_ops.append(f"({line}) Tj T*")
    text_ops.append("ET")
    stream = "\n".join(text_ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_start = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_start}\n%%EOF\n".encode()
    return bytes(out)


@pytest.fixture
def label_pdf(tmp_path):
    path = tmp_path / "labels.pdf"
    path.write_bytes(one_page_pdf(["OXBOW TEE SHIRT P1TEE0001 NAVY M", "EAN 3605168507131"]))
    return path


def test_read_pdf_pages_returns_text_layer(label_pdf):
    pages = read_pdf_pages(label_pdf)

    assert len(pages) == 1
    assert "P1TEE0001" in pages[0]
    assert "3605168507131" in pages[0]


def test_extract_document_file_from_pdf(label_pdf):
    extraction = extract_document_file(label_pdf.read_bytes())

    assert [b.barcode for b in extraction.barcodes] == ["3605168507131"]
    assert "P1TEE0001" in extraction.reference_codes
