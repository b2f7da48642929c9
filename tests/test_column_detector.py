import pytest

from extraction.column_detector import (
    DETECTORS_BY_FIELD,
    FIELD_DETECTORS,
    ColumnCandidate,
    detect_columns,
    detect_header_row,
    score_column,
    select_best_sheet,
)
from conftest import LEGACY_HEADERS, LEGACY_ROWS, RICH_HEADERS, RICH_ROWS


def test_header_row_found_below_title_rows():
    grid = [["Catalogue SS26"], ["Export du 01/02"]] + [RICH_HEADERS] + RICH_ROWS
    header = detect_header_row(grid)
    assert header.detected
    assert header.index == 2
    assert header.headers[0] == "gencod"


def test_header_row_falls_back_to_first_non_empty_row():
    grid = [["a", "b"], ["1", "2"]]
    header = detect_header_row(grid)
    assert not header.detected
    assert header.index == 0


def test_rich_columns_are_mapped():
    grid = [RICH_HEADERS] + RICH_ROWS
    mapping = detect_columns(grid, detect_header_row(grid))

    assert mapping.index_of("barcode") == 0
    assert mapping.index_of("description") == 1
    assert mapping.index_of("supplier") == 2
    assert mapping.index_of("product_reference") == 3
    assert mapping.index_of("color") == 4
    assert mapping.index_of("size") == 5
    assert mapping.index_of("price_euro") == 6
    assert mapping.index_of("price_pound") == 7
    assert "price" not in mapping


def test_legacy_columns_are_mapped():
    grid = [LEGACY_HEADERS] + LEGACY_ROWS
    mapping = detect_columns(grid, detect_header_row(grid))

    assert mapping.index_of("barcode") == 0
    assert mapping.index_of("price") == 1
    assert mapping.index_of("product_reference") == 4
    assert "price_euro" not in mapping
    assert "color" not in mapping


@pytest.mark.parametrize("detector", FIELD_DETECTORS, ids=lambda d: d.name)
def test_confidence_stays_within_unit_interval(detector):
    header = detector.header_names[0]
    samples = ["3605168507131", "45.00", "NAVY", "M"] * 5
    confidence = score_column(detector, header, samples)
    assert 0.0 <= confidence <= 1.0


def test_exact_header_and_full_sample_is_clamped_to_one():
    barcode = DETECTORS_BY_FIELD["barcode"]
    assert score_column(barcode, "gencod", ["3605168507131"] * 20) == 1.0
    assert score_column(barcode, "gencod", []) == pytest.approx(0.8)
    assert score_column(barcode, "code barre client", ["x"]) == pytest.approx(0.5)


def test_column_candidate_rejects_out_of_range_confidence():
    with pytest.raises(ValueError):
        ColumnCandidate(field="barcode", index=0, name="gencod", confidence=1.3)


def test_alternatives_recorded_when_nothing_qualifies():
    grid = [["Nom", "Prix", "Couleur", "Commentaire"], ["Tee", "12.5", "Navy", "ok"]]
    mapping = detect_columns(grid, detect_header_row(grid))
    detection = mapping.detections["barcode"]

    assert not detection.detected
    assert len(detection.alternatives) == 3


def test_sheet_name_priorities():
    workbook = {"Résumé": [["x"], ["y"]], "Data": [["a"], ["b"]], "Main sheet": [["a"], ["b"]]}
    selection = select_best_sheet(workbook)
    assert selection.name == "Main sheet"
    assert selection.method == "name_priority"


def test_sheet_skips_summaries():
    workbook = {"Summary": [["x"], ["y"]], "Catalogue": [["a"], ["b"]]}
    assert select_best_sheet(workbook).name == "Catalogue"


def test_sheet_content_scoring_when_every_name_is_excluded():
    workbook = {
        "Total 1": [["a", "b"], ["1", "2"]],
        "Total 2": [RICH_HEADERS] + RICH_ROWS,
    }
    selection = select_best_sheet(workbook)
    assert selection.name == "Total 2"
    assert selection.method == "content_score"


def test_empty_workbook_has_no_sheet():
    assert select_best_sheet({}) is None
