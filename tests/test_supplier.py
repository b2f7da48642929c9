from domain.models import ProductReference, SupplierInfo
from matching.supplier import (
    available_suppliers,
    filter_catalog_by_supplier,
    identify_supplier,
    validate_detection,
)
from conftest import catalog_entry

CATALOG = [
    catalog_entry("3605168507131", supplier="OXBOW SAS", product_reference="P1TEE0001"),
    catalog_entry("3605168507148", supplier="OXBOW SAS", product_reference="P1TEE0001"),
    catalog_entry("3605168632215", supplier="OXBOW SAS", product_reference="P1BRD0002"),
    catalog_entry("3605168654224", supplier="Textil & Co", product_reference="REF-P2SWT0003-X"),
    catalog_entry("3605168654231", supplier=None),
]


def refs(*codes):
    return [ProductReference(code=c, full_reference=c) for c in codes]


def test_available_suppliers_sorted_by_count():
    suppliers = available_suppliers(CATALOG)

    assert [(s.name, s.product_count) for s in suppliers] == [("OXBOW SAS", 3), ("Textil & Co", 1)]
    assert suppliers[1].id == "Textil___Co"
    assert all(s.confidence == 0 for s in suppliers)


def test_identify_supplier_by_reference_containment():
    supplier = identify_supplier(refs("P2SWT0003", "UNKNOWN01"), CATALOG)

    assert supplier.name == "Textil & Co"
    assert supplier.detected_references == ("P2SWT0003",)
    assert supplier.confidence == 0.5


def test_largest_supplier_wins_when_several_match():
    supplier = identify_supplier(refs("P1TEE0001", "P2SWT0003", "P1BRD0002", "ZZZZZZZZZ"), CATALOG)

    assert supplier.name == "OXBOW SAS"
    assert supplier.detected_references == ("P1TEE0001", "P1BRD0002")
    assert supplier.confidence == 0.5


def test_no_supplier_without_references_or_matches():
    assert identify_supplier([], CATALOG) is None
    assert identify_supplier(refs("ZZZZZZZZZ"), CATALOG) is None


def test_validate_detection_tiers():
    def supplier(n):
        return SupplierInfo(id="x", name="x", product_count=10, detected_references=tuple(f"R{i}" for i in range(n)))

    assert validate_detection(supplier(5), 100).confidence == "high"
    assert validate_detection(supplier(3), 6).confidence == "high"
    medium = validate_detection(supplier(1), 10)
    assert medium.confidence == "medium" and medium.is_valid
    low = validate_detection(supplier(0), 10)
    assert low.confidence == "low" and not low.is_valid
    assert validate_detection(supplier(0), 0).confidence == "low"


def test_filter_catalog_by_supplier():
    oxbow = available_suppliers(CATALOG)[0]
    assert len(filter_catalog_by_supplier(CATALOG, oxbow)) == 3
    assert len(filter_catalog_by_supplier(CATALOG, None)) == len(CATALOG)
