"""
Central configuration for detection thresholds, size limits and matching policy.

This module defines:
- Spreadsheet detection limits (header scan depth, sample size, minimum confidence).
- File size limits for the extractor and for the upload widgets.
- Barcode validity rules and the price sanity bound.
- Reconciliation policy (fuzzy threshold, caps on catalog-only results).
- The barcode prefix family searched for in label documents.
- Session cache budget and logging level.

Values can be overridden through environment variables (a `.env` file at the
repository root is loaded first). No other runtime logic lives here.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]

load_dotenv(PROJECT_ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


# Spreadsheet detection
MIN_CONFIDENCE_SCORE = _env_float("MIN_CONFIDENCE_SCORE", 0.6)
MAX_HEADER_ROWS_TO_SCAN = 10
SAMPLE_ROWS_FOR_DETECTION = 20
HEADER_ROW_MIN_SCORE = 3
CHUNK_SIZE = _env_int("CHUNK_SIZE", 1000)

# File limits
MAX_FILE_SIZE_MB = 50
UI_MAX_EXCEL_SIZE_MB = 20
MAX_PDF_SIZE_MB = 50
MIN_PDF_SIZE_BYTES = 1024
MIN_EXCEL_SIZE_BYTES = 100

# Barcodes and prices
VALID_BARCODE_LENGTHS = (8, 12, 13, 14)
MIN_CATALOG_BARCODE_LENGTH = 8
MAX_CATALOG_BARCODE_LENGTH = 14
MAX_PRICE = 10_000

# Reconciliation policy
FUZZY_MIN_LENGTH = 10
MAX_EXCEL_ONLY_LEGACY = 50
MAX_EXCEL_ONLY_RICH = 100

# Diagnostics
LOW_QUALITY_SCORE = 70
SLOW_PROCESSING_SECONDS = 5.0
FEW_ENTRIES_THRESHOLD = 10

# Label documents
DOCUMENT_BARCODE_PREFIXES = _env_list("DOCUMENT_BARCODE_PREFIXES", "3605168")
DOCUMENT_BARCODE_LENGTH = _env_int("DOCUMENT_BARCODE_LENGTH", 13)
PRODUCT_REFERENCE_LENGTH = 9

# Session services
CACHE_MAX_BYTES = 100 * 1024 * 1024
CACHE_TTL_SECONDS = 300
SLOW_OPERATION_SECONDS = 1.0

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
