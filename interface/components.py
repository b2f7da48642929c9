# interface/components.py
"""
Reusable Streamlit widgets for the compliance checker.
"""

from typing import List, Optional, Tuple

import pandas as pd
import streamlit as st

from config.settings import MAX_PDF_SIZE_MB, UI_MAX_EXCEL_SIZE_MB
from domain.models import ComplianceMetrics, MatchStatus, Severity, SupplierInfo, SupplierValidation
from extraction.report import ExtractionReport
from matching.filters import ResultFilters

STATUS_LABELS = {
    MatchStatus.EXACT_MATCH: "✅ Match",
    MatchStatus.PDF_ONLY: "🚨 Missing from catalog",
    MatchStatus.EXCEL_ONLY: "📊 Catalog only",
    MatchStatus.PRICE_MISMATCH: "💰 Price mismatch",
}


def render_header() -> None:
    st.markdown(
        """
        <div class="main-header">
            <h1>🏷️ Barcode Compliance Checker</h1>
            <p>Check label PDFs against the supplier catalog</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_file_uploaders() -> Tuple[Optional[object], Optional[object]]:
    col1, col2 = st.columns(2)
    with col1:
        pdf_file = st.file_uploader(
            f"📄 Label PDF (max {MAX_PDF_SIZE_MB}MB)",
            type=["pdf"],
            key="pdf_upload",
        )
    with col2:
        excel_file = st.file_uploader(
            f"📊 Supplier catalog (max {UI_MAX_EXCEL_SIZE_MB}MB)",
            type=["xlsx", "xlsm", "csv"],
            key="excel_upload",
        )
    return pdf_file, excel_file


def render_load_button() -> bool:
    return st.button("🔍 Analyse files", type="primary", width="stretch")


def render_supplier_selector(
    suppliers: List[SupplierInfo],
    detected: Optional[SupplierInfo],
    validation: Optional[SupplierValidation],
) -> Optional[str]:
    """Supplier dropdown, defaulting to the detected supplier. Returns None for "all suppliers"."""
    st.markdown("### 🏢 Supplier")

    if detected and validation:
        message = f"Detected supplier: **{detected.name}** ({detected.confidence:.0%} of references). {validation.message}"
        if validation.confidence == "high":
            st.success(message)
        elif validation.confidence == "medium":
            st.warning(message)
        else:
            st.info(message)
    elif suppliers:
        st.info("No supplier detected from the PDF references, pick one below.")

    options = ["All suppliers"] + [s.name for s in suppliers]
    default = options.index(detected.name) if detected and detected.name in options else 0
    choice = st.selectbox(
        "Compare against",
        options,
        index=default,
        format_func=lambda name: name if name == "All suppliers" else
        f"{name} ({next(s.product_count for s in suppliers if s.name == name)} products)",
    )
    return None if choice == "All suppliers" else choice


def render_run_button() -> bool:
    return st.button("▶️ Run comparison", type="primary", width="stretch")


def render_metrics(metrics: ComplianceMetrics, pdf_count: int) -> None:
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("PDF barcodes", pdf_count)
    col2.metric("Compliance", f"{metrics.compliance_rate:.1f}%")
    col3.metric("Missing from catalog", metrics.pdf_only, delta=f"{metrics.error_rate:.1f}%", delta_color="inverse")
    col4.metric("Catalog only (shown)", metrics.excel_only)

    if metrics.compliance_rate == 100 and pdf_count:
        st.success(f"🎉 Every PDF barcode is in the {metrics.supplier_name or 'catalog'} catalog")
    elif metrics.pdf_only:
        st.error(f"⚠️ {metrics.pdf_only} PDF barcodes are not in the {metrics.supplier_name or 'catalog'} catalog")


def render_filters(colors: List[str], sizes: List[str], suppliers: List[str]) -> ResultFilters:
    with st.expander("🔎 Filters", expanded=False):
        col1, col2 = st.columns(2)
        with col1:
            statuses = st.multiselect(
                "Status",
                list(MatchStatus),
                format_func=lambda s: STATUS_LABELS[s],
            )
            severities = st.multiselect("Severity", list(Severity), format_func=lambda s: s.value)
            search = st.text_input("Search", placeholder="Barcode, description, reference...")
        with col2:
            selected_colors = st.multiselect("Colors", colors) if colors else []
            selected_sizes = st.multiselect("Sizes", sizes) if sizes else []
            selected_suppliers = st.multiselect("Suppliers", suppliers) if len(suppliers) > 1 else []
            currency = st.radio("Currency", ["ALL", "EUR", "GBP"], horizontal=True)

    return ResultFilters(
        statuses=frozenset(statuses),
        severities=frozenset(severities),
        search=search,
        colors=frozenset(selected_colors),
        sizes=frozenset(selected_sizes),
        suppliers=frozenset(selected_suppliers),
        currency=currency,
    )


def render_results_table(df: pd.DataFrame) -> None:
    if df is None or df.empty:
        st.info("No result matches the current filters.")
        return
    st.dataframe(df, width="stretch", hide_index=True)


def render_debug_panel(report: ExtractionReport, document_stats: dict, performance: dict) -> None:
    with st.expander("🛠️ Extraction details", expanded=False):
        quality = report.data_quality
        st.markdown(
            f"**Worksheet:** {report.file_analysis.selected_sheet} "
            f"({report.file_analysis.sheet_selection_method}), header row {report.file_analysis.header_row_index + 1}"
        )
        st.markdown(
            f"**Rows:** {quality.total_rows} total, {quality.valid_rows} valid, {quality.error_rows} errors, "
            f"{quality.empty_rows} empty, {quality.duplicates} duplicates. **Quality:** {quality.quality_score}%"
        )
        for suggestion in report.suggestions:
            st.markdown(f"- 💡 {suggestion}")
        for warning in report.warnings[:20]:
            st.markdown(f"- ⚠️ {warning}")
        st.json({"columns": report.to_dict()["column_detection"], "document": document_stats, "performance": performance})


def render_reset_button() -> bool:
    return st.button("🔄 Start over", width="stretch")
