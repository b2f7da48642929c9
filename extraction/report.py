"""
Diagnostic report for a catalog extraction.

Filled in while the extractor runs and returned alongside the entries (or
attached to the structural error when extraction fails), so the UI can show
which sheet and columns were picked, how confident the detection was and how
many rows were rejected.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ColumnAlternative:
    name: str
    index: int
    confidence: float


@dataclass
class ColumnDetection:
    detected: bool = False
    column_index: int = -1
    column_name: str = ""
    confidence: float = 0.0
    alternatives: List[ColumnAlternative] = field(default_factory=list)


@dataclass
class FileAnalysis:
    file_name: str = ""
    file_size: int = 0
    sheets: List[str] = field(default_factory=list)
    selected_sheet: str = ""
    sheet_selection_method: str = ""
    header_row_index: int = -1
    processing_time: float = 0.0


@dataclass
class DataQuality:
    total_rows: int = 0
    valid_rows: int = 0
    empty_rows: int = 0
    error_rows: int = 0
    duplicates: int = 0
    quality_score: int = 0


@dataclass
class PerformanceStats:
    parse_time: float = 0.0
    process_time: float = 0.0
    chunks_processed: int = 0


@dataclass
class ExtractionReport:
    file_analysis: FileAnalysis = field(default_factory=FileAnalysis)
    column_detection: Dict[str, ColumnDetection] = field(default_factory=dict)
    data_quality: DataQuality = field(default_factory=DataQuality)
    performance: PerformanceStats = field(default_factory=PerformanceStats)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def detected_fields(self) -> List[str]:
        return [name for name, detection in self.column_detection.items() if detection.detected]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view for debug panels."""
        return asdict(self)
