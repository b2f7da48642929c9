"""
Barcode and product-reference extraction from label text.

Labels print the EAN with irregular spacing ("3 605168 507131",
"3 6051 68 507131"), so each configured prefix gets several patterns of
increasing tolerance. When none of them hits, the whole text is flattened
and scanned for digit runs of the expected length.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Tuple

from config.settings import (
    DOCUMENT_BARCODE_LENGTH,
    DOCUMENT_BARCODE_PREFIXES,
    PRODUCT_REFERENCE_LENGTH,
)
from domain.models import DocumentBarcode, ProductReference
from input_readers.pdf import PdfSource, read_pdf

logger = logging.getLogger(__name__)

TEXT_SAMPLE_LENGTH = 500

REFERENCE_PATTERN = re.compile(rf"[A-Z0-9]{{{PRODUCT_REFERENCE_LENGTH}}}")


@dataclass(frozen=True)
class BarcodePatternSet:
    """Barcode prefixes and length accepted on labels. No prefix means any digit run of `length`."""
    prefixes: Tuple[str, ...] = DOCUMENT_BARCODE_PREFIXES
    length: int = DOCUMENT_BARCODE_LENGTH

    def patterns(self) -> List[Tuple[str, Pattern[str]]]:
        if not self.prefixes:
            return [("any", re.compile(rf"\d{{{self.length}}}"))]

        patterns: List[Tuple[str, Pattern[str]]] = []
        for prefix in self.prefixes:
            rest = rf"\d{{{self.length - len(prefix)}}}"
            patterns.append((f"{prefix}:compact", re.compile(re.escape(prefix) + rest)))

            if len(prefix) > 4:
                # printed EAN grouping: 1 + 3 + rest of the prefix
                grouped = r"\s*".join(re.escape(p) for p in (prefix[0], prefix[1:4], prefix[4:]))
                patterns.append((f"{prefix}:grouped", re.compile(grouped + r"\s*" + rest)))

            spaced = r"\s*".join(re.escape(digit) for digit in prefix)
            patterns.append((f"{prefix}:spaced", re.compile(spaced + r"\s*" + rest)))
        return patterns

    def accepts(self, candidate: str) -> bool:
        if len(candidate) != self.length or not candidate.isdigit():
            return False
        if not self.prefixes:
            return True
        return any(candidate.startswith(prefix) for prefix in self.prefixes)


@dataclass
class DocumentStats:
    total_references_found: int = 0
    valid_barcodes_extracted: int = 0
    product_references_only: int = 0
    invalid_formats: int = 0
    used_fallback: bool = False
    pattern_hits: Dict[str, int] = field(default_factory=dict)


@dataclass
class DocumentExtraction:
    barcodes: List[DocumentBarcode]
    references: List[ProductReference]
    full_text: str
    stats: DocumentStats

    @property
    def text_sample(self) -> str:
        return self.full_text[:TEXT_SAMPLE_LENGTH]

    @property
    def reference_codes(self) -> List[str]:
        return [ref.code for ref in self.references]


def _scan_patterns(text: str, patterns: BarcodePatternSet, stats: DocumentStats) -> List[str]:
    found: Dict[str, None] = {}
    for name, pattern in patterns.patterns():
        matches = pattern.findall(text)
        if matches:
            stats.pattern_hits[name] = len(matches)
        for match in matches:
            cleaned = re.sub(r"\s", "", match)
            if patterns.accepts(cleaned):
                found.setdefault(cleaned)
            else:
                stats.invalid_formats += 1
    return list(found)


def _scan_flattened(text: str, patterns: BarcodePatternSet) -> List[str]:
    flattened = re.sub(r"\s", "", text)
    found: Dict[str, None] = {}
    for run in re.findall(rf"\d{{{patterns.length}}}", flattened):
        if patterns.accepts(run):
            found.setdefault(run)
    return list(found)


def extract_document_data(text: str, patterns: Optional[BarcodePatternSet] = None) -> DocumentExtraction:
    """
    Pull barcodes and product references out of document text.

    Barcodes keep first-seen order and are unique. References are every
    9-character uppercase alphanumeric token, duplicates included, since
    supplier identification counts them.
    """
    patterns = patterns or BarcodePatternSet()
    stats = DocumentStats()

    codes = _scan_patterns(text, patterns, stats)
    if not codes:
        codes = _scan_flattened(text, patterns)
        stats.used_fallback = True
        if codes:
            logger.info(f"Barcode patterns found nothing, fallback scan found {len(codes)} codes")

    raw_references = REFERENCE_PATTERN.findall(text)

    stats.total_references_found = len(raw_references)
    stats.valid_barcodes_extracted = len(codes)
    stats.product_references_only = sum(
        1 for ref in raw_references if not any(ref in code for code in codes)
    )

    barcodes = [DocumentBarcode(barcode=code, normalized_barcode=code) for code in codes]
    references = [ProductReference(code=ref, full_reference=ref) for ref in raw_references]

    logger.info(
        f"Document extraction: {len(barcodes)} barcodes, {len(references)} product references"
    )
    if barcodes:
        logger.debug(f"First barcodes: {', '.join(codes[:5])}")

    return DocumentExtraction(barcodes, references, text.strip(), stats)


def extract_document_file(
    source: PdfSource,
    patterns: Optional[BarcodePatternSet] = None,
) -> DocumentExtraction:
    return extract_document_data(read_pdf(source), patterns)
