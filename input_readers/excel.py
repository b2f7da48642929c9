"""
WORKBOOK READER
---------------
Reads spreadsheet files into raw grids with NO interpretation.
Returns every worksheet as a list of rows (lists of cell values); header
detection and column mapping happen later in the extraction layer.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Union

import pandas as pd
from openpyxl import load_workbook

Grid = List[List[Any]]
Workbook = Dict[str, Grid]

WorkbookSource = Union[Path, str, bytes, BinaryIO]

CSV_SUFFIXES = {".csv"}

LEGACY_SUFFIXES = {".xls"}


def _is_empty_row(row: List[Any]) -> bool:
    return all(value is None or (isinstance(value, str) and not value.strip()) for value in row)


def _as_stream(source: WorkbookSource) -> Union[Path, BinaryIO]:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    if isinstance(source, str):
        return Path(source)
    return source


def _read_csv(source: Union[Path, BinaryIO], sheet_name: str) -> Workbook:
    try:
        df = pd.read_csv(
            source,
            header=None,
            dtype=str,
            keep_default_na=False,
            sep=None,
            engine="python",
            encoding="utf-8-sig",
        )
    except UnicodeDecodeError:
        if hasattr(source, "seek"):
            source.seek(0)
        df = pd.read_csv(source, header=None, dtype=str, keep_default_na=False, sep=None,
                         engine="python", encoding="cp1252")
    except Exception as e:
        raise ValueError(f"Cannot read CSV file: {e}") from e

    rows: Grid = []
    for record in df.itertuples(index=False, name=None):
        row = [value if value != "" else None for value in record]
        if not _is_empty_row(row):
            rows.append(row)
    return {sheet_name: rows}


def read_workbook(source: WorkbookSource, file_name: str | None = None) -> Workbook:
    """
    Read every worksheet of a workbook into raw grids.

    Args:
        source: Path, bytes or binary stream of an .xlsx/.xlsm/.csv file
        file_name: Original file name (used to recognise CSV uploads)

    Returns:
        Ordered mapping of sheet name -> rows, fully empty rows dropped

    Raises:
        FileNotFoundError: If a path is given and doesn't exist
        ValueError: If the file is not a readable workbook
    """
    stream = _as_stream(source)

    if isinstance(stream, Path):
        stream = stream.expanduser().resolve()
        if not stream.exists():
            raise FileNotFoundError(f"Workbook not found: {stream}")
        file_name = file_name or stream.name

    suffix = Path(file_name).suffix.lower() if file_name else ""
    if suffix in LEGACY_SUFFIXES:
        raise ValueError("Legacy .xls workbooks are not supported, save the catalog as .xlsx")
    if suffix in CSV_SUFFIXES:
        return _read_csv(stream, Path(file_name).stem or "Sheet1")

    try:
        wb = load_workbook(stream, read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"Cannot read Excel file (is it corrupted or wrong format?): {e}") from e

    sheets: Workbook = {}
    try:
        for ws in wb.worksheets:
            rows: Grid = []
            for values in ws.iter_rows(values_only=True):
                row = list(values)
                if not _is_empty_row(row):
                    rows.append(row)
            sheets[ws.title] = rows
    finally:
        wb.close()

    return sheets
