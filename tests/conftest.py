from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Sequence

import pytest
from openpyxl import Workbook

from domain.models import CatalogEntry, Currency, DocumentBarcode
from fields.barcode import normalize_barcode

RICH_HEADERS = ["Gencod", "Libellé_article", "Fournisseur", "Code_article", "Lib._coloris", "Taille", "X300", "X350"]

RICH_ROWS = [
    ["3605168507131", "Tee shirt logo", "OXBOW SAS", "P1TEE0001", "NAVY", "M", 45.0, 39.0],
    ["3605168507148", "Tee shirt logo", "OXBOW SAS", "P1TEE0001", "NAVY", "L", 45.0, 39.0],
    ["3605168632215", "Board short", "OXBOW SAS", "P1BRD0002", "BLACK", "32", 69.9, 59.0],
    ["3605168654224", "Sweat capuche", "TEXTIL CO", "P2SWT0003", "GREY", "XL", 89.0, 75.0],
]

LEGACY_HEADERS = ["Code-barres", "Prix", "Description", "Fournisseur", "Code article"]

LEGACY_ROWS = [
    ["3605168507131", "45.00 €", "Tee shirt", "OXBOW SAS", "P1TEE0001"],
    ["3605168632215", "69.90", "Board short", "OXBOW SAS", "P1BRD0002"],
    ["3605168654224", "89", "Sweat", "TEXTIL CO", "P2SWT0003"],
]


def write_xlsx(path: Path, sheets: dict) -> Path:
    """Write {sheet name: rows} to an .xlsx file, sheets in dict order."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


def catalog_entry(
    barcode: str,
    price: Optional[float] = None,
    supplier: Optional[str] = "OXBOW SAS",
    **fields: Any,
) -> CatalogEntry:
    price_euro = fields.pop("price_euro", None)
    if price_euro is not None and price is None:
        price = price_euro
    currency = fields.pop("currency", Currency.EUR if price_euro is not None else None)
    return CatalogEntry(
        barcode=barcode,
        normalized_barcode=normalize_barcode(barcode),
        price=price,
        price_euro=price_euro,
        currency=currency,
        supplier=supplier,
        **fields,
    )


def document_barcodes(codes: Sequence[str]) -> List[DocumentBarcode]:
    return [DocumentBarcode(barcode=code, normalized_barcode=normalize_barcode(code)) for code in codes]


@pytest.fixture
def rich_workbook() -> dict:
    return {"Main sheet": [RICH_HEADERS] + [list(row) for row in RICH_ROWS]}


@pytest.fixture
def legacy_workbook() -> dict:
    return {"Feuil1": [LEGACY_HEADERS] + [list(row) for row in LEGACY_ROWS]}


@pytest.fixture
def rich_xlsx(tmp_path) -> Path:
    return write_xlsx(
        tmp_path / "catalog.xlsx",
        {
            "Summary": [["Total", 4]],
            "Main sheet": [RICH_HEADERS] + RICH_ROWS,
        },
    )
