"""
Heuristic column detection for supplier catalogs.

Suppliers send catalogs in two families of layouts:
- the rich format ("Main sheet", Gencod / X300 / X350 / lib._coloris / Taille ...)
- legacy layouts with free-form French or English headers (code-barres, prix, ...)

Detection works in three steps:
1. pick the worksheet (name priorities, then header-content scoring)
2. find the header row among the first rows (weighted header signature)
3. score every (field, column) pair from the header name and a data sample,
   and keep the best column per field above MIN_CONFIDENCE_SCORE

Column confidence is always in [0, 1]; ColumnCandidate enforces it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from config.settings import (
    HEADER_ROW_MIN_SCORE,
    MAX_HEADER_ROWS_TO_SCAN,
    MIN_CONFIDENCE_SCORE,
    SAMPLE_ROWS_FOR_DETECTION,
)
from fields.barcode import normalize_barcode
from fields.price import parse_price
from fields.text import cell_to_text, is_blank
from input_readers.excel import Grid, Workbook

from .report import ColumnAlternative, ColumnDetection

logger = logging.getLogger(__name__)

EXACT_NAME_SCORE = 0.8
PARTIAL_NAME_SCORE = 0.5
DATA_SAMPLE_WEIGHT = 0.5
MAX_ALTERNATIVES = 3


# ============================================================================
# FIELD DETECTORS
# ============================================================================

def _text(value: Any) -> str:
    return cell_to_text(value).strip()


def _length_between(low: int, high: int) -> Callable[[Any], bool]:
    def validator(value: Any) -> bool:
        text = _text(value)
        return bool(text) and low <= len(text) <= high
    return validator


def _is_barcode_like(value: Any) -> bool:
    digits = normalize_barcode(_text(value))
    return 8 <= len(digits) <= 14


def _is_price_like(value: Any) -> bool:
    return parse_price(value) is not None


def _is_description_like(value: Any) -> bool:
    text = _text(value)
    return 2 < len(text) < 200


def _is_reference_like(value: Any) -> bool:
    text = _text(value)
    return 3 <= len(text) <= 50 and re.search(r"[A-Z0-9]", text) is not None


_SIZE_LABEL = re.compile(r"^(XS|S|M|L|XL|XXL|XXXL|XXXXL|\d+)$", re.IGNORECASE)


def _is_size_like(value: Any) -> bool:
    text = _text(value)
    if not text:
        return False
    return bool(_SIZE_LABEL.match(text)) or len(text) <= 10


@dataclass(frozen=True)
class FieldDetector:
    """Header tokens and a cell validator for one catalog field."""
    name: str
    header_names: Tuple[str, ...]
    validator: Callable[[Any], bool]

    def header_score(self, header: str) -> float:
        """Exact header names score higher than substring containment."""
        if not header:
            return 0.0
        if header in self.header_names:
            return EXACT_NAME_SCORE
        if any(token in header for token in self.header_names):
            return PARTIAL_NAME_SCORE
        return 0.0

    def sample_confidence(self, values: Sequence[Any]) -> float:
        """Fraction of sampled non-empty values accepted by the validator."""
        if not values:
            return 0.0
        valid = sum(1 for value in values if self.validator(value))
        return min(1.0, valid / len(values))


FIELD_DETECTORS: Tuple[FieldDetector, ...] = (
    FieldDetector(
        "barcode",
        (
            "gencod",
            "code-barres", "code barre", "codebarre", "code_barre",
            "ean", "ean13", "ean-13", "upc", "gtin", "gtin13",
            "barcode", "bar_code", "bar-code", "product_code", "item_code",
            "code", "code article", "article_code", "article-code",
            "référence", "reference", "ref", "sku", "id", "identifiant",
        ),
        _is_barcode_like,
    ),
    FieldDetector("price_euro", ("x300", "prix eur", "price eur", "euro", "eur"), _is_price_like),
    FieldDetector("price_pound", ("x350", "prix gbp", "price gbp", "pound", "gbp"), _is_price_like),
    FieldDetector(
        "price",
        (
            "prix", "price", "retail price", "prix de vente", "prix_vente",
            "montant", "coût", "cout", "cost", "tarif", "tariff",
            "prix unitaire", "unit price", "prix_unitaire", "unit_price",
            "valeur", "value", "amount", "total", "pvp",
        ),
        _is_price_like,
    ),
    FieldDetector(
        "description",
        (
            "libellé_article", "libelle_article",
            "description", "libellé", "libelle", "nom", "name", "produit", "product",
            "designation", "titre", "title", "label", "style", "modèle", "modele",
            "article", "item", "product_name", "product-name", "item_name",
        ),
        _is_description_like,
    ),
    FieldDetector(
        "supplier",
        (
            "fournisseur",
            "supplier", "vendor", "marque", "brand", "fabricant",
            "manufacturer", "distributeur", "distributor", "société", "societe",
            "company", "entreprise", "partenaire", "partner",
        ),
        _length_between(2, 99),
    ),
    FieldDetector(
        "product_reference",
        (
            "code_article", "code article",
            "article code", "product code", "reference", "ref produit",
            "product reference", "item reference", "article reference", "ref article",
            "article_code", "product_code", "ref_produit",
        ),
        _is_reference_like,
    ),
    FieldDetector("color", ("lib._coloris", "coloris", "couleur", "color", "lib_coloris"), _length_between(2, 49)),
    FieldDetector("size", ("taille", "size"), _is_size_like),
    FieldDetector("color_code", ("code_coloris", "code coloris", "color code"), _length_between(1, 20)),
    FieldDetector("season", ("dernière_sais_comm", "derniere_sais_comm", "saison", "season"), _length_between(2, 20)),
    FieldDetector(
        "creation_season",
        ("sais_création_produit", "sais_creation_produit", "creation season"),
        _length_between(2, 20),
    ),
    FieldDetector("brand_code", ("code_marque", "code marque", "brand code"), _length_between(1, 20)),
    FieldDetector(
        "commercial_delay",
        ("délai_commercial", "delai_commercial", "commercial delay"),
        _length_between(1, 50),
    ),
)

DETECTORS_BY_FIELD: Dict[str, FieldDetector] = {d.name: d for d in FIELD_DETECTORS}


# ============================================================================
# HEADER SIGNATURES
# ============================================================================

# Exact header tokens of the rich format, weighted for header-row detection
HEADER_ROW_SIGNATURE = {
    "gencod": 5,
    "x300": 3,
    "x350": 3,
    "lib._coloris": 2,
    "taille": 2,
    "fournisseur": 2,
}
# Legacy tokens matched by containment: (tokens, weight)
HEADER_ROW_LEGACY_SIGNATURE = (
    (("code-barres", "barcode"), 3),
    (("prix", "price"), 2),
)

SHEET_SIGNATURE = {
    "gencod": 15,
    "x300": 10,
    "x350": 10,
    "lib._coloris": 8,
    "taille": 8,
    "fournisseur": 5,
}
SHEET_CONTAINMENT_SIGNATURE = (
    ("barcode", 10),
    ("price", 5),
    ("supplier", 5),
)

SHEET_NAME_PRIORITIES = (
    re.compile(r"^main\s*sheet$", re.IGNORECASE),
    re.compile(r"^ah\s*25$", re.IGNORECASE),
    re.compile(r"^(data|données|produits?|articles?)$", re.IGNORECASE),
    re.compile(r"^(sheet\s*1?|feuil\s*1?)$", re.IGNORECASE),
)
EXCLUDED_SHEET_WORDS = ("summary", "résumé", "total")


def normalize_header(value: Any) -> str:
    return cell_to_text(value).lower().strip()


# ============================================================================
# RESULT TYPES
# ============================================================================

@dataclass(frozen=True)
class ColumnCandidate:
    field: str
    index: int
    name: str
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Column confidence out of range for {self.field}/{self.name}: {self.confidence}"
            )


@dataclass(frozen=True)
class HeaderRow:
    index: int
    headers: List[str]
    detected: bool
    score: int = 0


@dataclass(frozen=True)
class SheetSelection:
    name: str
    method: str  # "name_priority" | "content_score" | "first_sheet"
    score: float = 0.0


@dataclass
class ColumnMapping:
    header_row: HeaderRow
    indices: Dict[str, int] = field(default_factory=dict)
    detections: Dict[str, ColumnDetection] = field(default_factory=dict)

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.indices

    def index_of(self, field_name: str) -> Optional[int]:
        return self.indices.get(field_name)

    @property
    def headers(self) -> List[str]:
        return self.header_row.headers


# ============================================================================
# SHEET SELECTION
# ============================================================================

def _score_sheet(grid: Grid) -> float:
    headers = [normalize_header(h) for h in (grid[0] if grid else [])]
    score = 0.0

    for token, weight in SHEET_SIGNATURE.items():
        if token in headers:
            score += weight

    for field_name, weight in SHEET_CONTAINMENT_SIGNATURE:
        tokens = DETECTORS_BY_FIELD[field_name].header_names
        if any(token in header for header in headers for token in tokens):
            score += weight

    score += min(len(grid) / 100, 5)
    return score


def select_best_sheet(workbook: Workbook) -> Optional[SheetSelection]:
    """
    Choose the worksheet holding the catalog.

    Name priorities first (rich, legacy, generic data names, default sheet
    names, then any sheet that isn't a summary); when nothing matches, score
    each sheet's first row against the header signatures.
    """
    names = list(workbook)
    if not names:
        return None

    for priority in SHEET_NAME_PRIORITIES:
        for name in names:
            if priority.match(name.strip()):
                return SheetSelection(name, "name_priority")

    for name in names:
        lowered = name.lower()
        if not any(word in lowered for word in EXCLUDED_SHEET_WORDS):
            return SheetSelection(name, "name_priority")

    best_name = ""
    best_score = 0.0
    for name in names:
        grid = workbook[name]
        if len(grid) < 2:
            continue
        score = _score_sheet(grid)
        if score > best_score:
            best_name, best_score = name, score

    if best_name:
        return SheetSelection(best_name, "content_score", best_score)
    return SheetSelection(names[0], "first_sheet")


# ============================================================================
# HEADER ROW
# ============================================================================

def score_header_row(headers: Sequence[str]) -> int:
    score = 0
    for token, weight in HEADER_ROW_SIGNATURE.items():
        if token in headers:
            score += weight
    for tokens, weight in HEADER_ROW_LEGACY_SIGNATURE:
        if any(token in header for header in headers for token in tokens):
            score += weight
    return score


def detect_header_row(grid: Grid) -> HeaderRow:
    """
    Return the first row (among the first MAX_HEADER_ROWS_TO_SCAN) whose
    header signature reaches HEADER_ROW_MIN_SCORE, else the first non-empty row.
    """
    for i, row in enumerate(grid[:MAX_HEADER_ROWS_TO_SCAN]):
        if not row:
            continue
        headers = [normalize_header(h) for h in row]
        score = score_header_row(headers)
        if score >= HEADER_ROW_MIN_SCORE:
            return HeaderRow(i, headers, True, score)

    for i, row in enumerate(grid):
        if row and not all(is_blank(v) for v in row):
            return HeaderRow(i, [normalize_header(h) for h in row], False)

    return HeaderRow(0, [], False)


# ============================================================================
# COLUMN ASSIGNMENT
# ============================================================================

def _column_sample(sample_rows: Grid, col_index: int) -> List[Any]:
    return [
        row[col_index]
        for row in sample_rows
        if col_index < len(row) and not is_blank(row[col_index])
    ]


def score_column(detector: FieldDetector, header: str, sample_values: Sequence[Any]) -> float:
    """headerNameScore + 0.5 * dataSampleConfidence, clamped to [0, 1]."""
    confidence = detector.header_score(header)
    if sample_values:
        confidence += DATA_SAMPLE_WEIGHT * detector.sample_confidence(sample_values)
    return max(0.0, min(1.0, confidence))


def detect_columns(grid: Grid, header_row: HeaderRow) -> ColumnMapping:
    """
    Map every known field to its best column.

    A column is selected when its confidence is strictly the best seen so far
    and at least MIN_CONFIDENCE_SCORE; the top alternatives are recorded for
    every field, selected or not.
    """
    mapping = ColumnMapping(header_row=header_row)
    start = header_row.index + 1
    sample_rows = grid[start:start + SAMPLE_ROWS_FOR_DETECTION]
    samples = [_column_sample(sample_rows, i) for i in range(len(header_row.headers))]

    for detector in FIELD_DETECTORS:
        best: Optional[ColumnCandidate] = None
        candidates: List[ColumnCandidate] = []

        for col_index, header in enumerate(header_row.headers):
            candidate = ColumnCandidate(
                field=detector.name,
                index=col_index,
                name=header,
                confidence=score_column(detector, header, samples[col_index]),
            )
            candidates.append(candidate)

            if candidate.confidence >= MIN_CONFIDENCE_SCORE and (
                best is None or candidate.confidence > best.confidence
            ):
                best = candidate

        ranked = sorted(candidates, key=lambda c: c.confidence, reverse=True)
        detection = ColumnDetection(
            detected=best is not None,
            column_index=best.index if best else -1,
            column_name=best.name if best else "",
            confidence=round(best.confidence, 2) if best else 0.0,
            alternatives=[
                ColumnAlternative(c.name, c.index, round(c.confidence, 2))
                for c in ranked[:MAX_ALTERNATIVES]
            ],
        )
        mapping.detections[detector.name] = detection

        if best is not None:
            mapping.indices[detector.name] = best.index
            logger.debug(
                f"{detector.name}: '{best.name}' (index {best.index}, confidence {best.confidence:.0%})"
            )

    return mapping
