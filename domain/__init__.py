from .errors import (
    BarcodeColumnNotFoundError,
    DocumentExtractionError,
    EmptyExtractionError,
    FileValidationError,
    ReconciliationError,
    WorkbookStructureError,
)
from .models import (
    SEVERITY_ORDER,
    CatalogEntry,
    CatalogFormat,
    ComparisonResult,
    ComplianceMetrics,
    Currency,
    CurrencyAnalysis,
    DocumentBarcode,
    MatchStatus,
    ProductReference,
    Severity,
    SupplierInfo,
    SupplierValidation,
)
