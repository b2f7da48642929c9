"""
Value records shared across the reconciliation pipeline.

Every extraction layer (spreadsheet catalog, label PDF) maps its output into
these records before supplier identification, comparison and metrics. Records
are frozen: pipelines build new collections instead of mutating entries.

Descriptive catalog fields are optional because suppliers expose different
columns; an absent column or an empty cell is None, never "".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple


class Currency(str, Enum):
    EUR = "EUR"
    GBP = "GBP"


class MatchStatus(str, Enum):
    EXACT_MATCH = "exact_match"
    PDF_ONLY = "pdf_only"
    EXCEL_ONLY = "excel_only"
    PRICE_MISMATCH = "price_mismatch"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


class CatalogFormat(str, Enum):
    """RICH catalogs carry color, size and dual-currency prices; LEGACY ones do not."""
    RICH = "rich"
    LEGACY = "legacy"


@dataclass(frozen=True)
class CatalogEntry:
    barcode: str
    normalized_barcode: str
    source: str = "catalog"

    price: Optional[float] = None
    price_euro: Optional[float] = None
    price_pound: Optional[float] = None
    currency: Optional[Currency] = None

    description: Optional[str] = None
    supplier: Optional[str] = None
    product_reference: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    color_code: Optional[str] = None
    season: Optional[str] = None
    creation_season: Optional[str] = None
    brand_code: Optional[str] = None
    commercial_delay: Optional[str] = None


@dataclass(frozen=True)
class DocumentBarcode:
    barcode: str
    normalized_barcode: str
    source: str = "document"


@dataclass(frozen=True)
class ProductReference:
    code: str
    full_reference: str
    pattern: str = "DIRECT"


@dataclass(frozen=True)
class ComparisonResult:
    """
    One reconciliation outcome.

    The status constrains which sides are present:
    - exact_match / price_mismatch: both pdf_data and excel_data
    - pdf_only: pdf_data only, always high severity
    - excel_only: excel_data only
    """
    barcode: str
    normalized_barcode: str
    status: MatchStatus
    severity: Severity
    discrepancy: str = ""
    pdf_data: Optional[DocumentBarcode] = None
    excel_data: Optional[CatalogEntry] = None
    price_difference: Optional[float] = None

    def __post_init__(self) -> None:
        if self.status is MatchStatus.PDF_ONLY:
            if self.excel_data is not None or self.pdf_data is None:
                raise ValueError("pdf_only results carry document data only")
            if self.severity is not Severity.HIGH:
                raise ValueError("pdf_only results are always high severity")
        elif self.status is MatchStatus.EXCEL_ONLY:
            if self.pdf_data is not None or self.excel_data is None:
                raise ValueError("excel_only results carry catalog data only")
        elif self.pdf_data is None or self.excel_data is None:
            raise ValueError(f"{self.status.value} results need both document and catalog data")


@dataclass(frozen=True)
class CurrencyAnalysis:
    eur_count: int = 0
    gbp_count: int = 0
    average_price_eur: Optional[float] = None
    average_price_gbp: Optional[float] = None
    price_discrepancies: int = 0


@dataclass(frozen=True)
class ComplianceMetrics:
    total: int
    exact_matches: int
    price_mismatches: int
    pdf_only: int
    excel_only: int
    critical_errors: int
    compliance_rate: float
    error_rate: float
    average_price_difference: float = 0.0
    supplier_name: Optional[str] = None
    format_detected: CatalogFormat = CatalogFormat.LEGACY
    color_distribution: Mapping[str, int] = field(default_factory=dict)
    size_distribution: Mapping[str, int] = field(default_factory=dict)
    supplier_distribution: Mapping[str, int] = field(default_factory=dict)
    currency_analysis: CurrencyAnalysis = field(default_factory=CurrencyAnalysis)


@dataclass(frozen=True)
class SupplierInfo:
    id: str
    name: str
    product_count: int
    detected_references: Tuple[str, ...] = ()
    confidence: float = 0.0


@dataclass(frozen=True)
class SupplierValidation:
    is_valid: bool
    confidence: str  # "high" | "medium" | "low"
    message: str
