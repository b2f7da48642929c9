from .comparison import (
    MatchDetail,
    MatchDiagnostics,
    MissingCodeAnalysis,
    compare_data,
    compare_data_with_diagnostics,
    find_fuzzy_match,
)
from .filters import ResultFilters, distinct_values, filter_results
from .metrics import calculate_compliance_metrics
from .supplier import (
    available_suppliers,
    filter_catalog_by_supplier,
    identify_supplier,
    validate_detection,
)
