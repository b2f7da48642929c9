"""
PDF READER
----------
Extracts raw page text from label PDFs. Layout is ignored: the extraction
layer only needs the text stream to run its barcode patterns over.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, List, Union

import pdfplumber

from domain.errors import DocumentExtractionError

logger = logging.getLogger(__name__)

PdfSource = Union[Path, str, bytes, BinaryIO]


def read_pdf_pages(source: PdfSource) -> List[str]:
    """
    Extract the text of every page.

    Args:
        source: Path, bytes or binary stream of a PDF

    Returns:
        One string per page ("" for pages without a text layer)

    Raises:
        FileNotFoundError: If a path is given and doesn't exist
        DocumentExtractionError: If the PDF cannot be opened
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    elif isinstance(source, (str, Path)):
        source = Path(source).expanduser().resolve()
        if not source.exists():
            raise FileNotFoundError(f"PDF file not found: {source}")

    pages: List[str] = []
    try:
        with pdfplumber.open(source) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                try:
                    page_text = page.extract_text() or ""
                except Exception as e:
                    logger.warning(f"Page {page_num}: text extraction failed ({e})")
                    page_text = ""
                pages.append(page_text)
    except Exception as e:
        raise DocumentExtractionError(f"Cannot read PDF file (is it corrupted or encrypted?): {e}") from e

    logger.info(f"Read {len(pages)} PDF pages, {sum(1 for p in pages if p.strip())} with text")
    return pages


def read_pdf(source: PdfSource) -> str:
    """Return the whole document text, pages separated by newlines."""
    return "\n".join(read_pdf_pages(source))
