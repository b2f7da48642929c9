from .column_detector import (
    ColumnCandidate,
    ColumnMapping,
    HeaderRow,
    SheetSelection,
    detect_columns,
    detect_header_row,
    score_column,
    select_best_sheet,
)
from .document import (
    BarcodePatternSet,
    DocumentExtraction,
    DocumentStats,
    extract_document_data,
    extract_document_file,
)
from .report import ColumnAlternative, ColumnDetection, DataQuality, ExtractionReport
from .spreadsheet import CatalogExtraction, extract_catalog, extract_catalog_file
