# interface/app.py
"""
Barcode Compliance Checker - Main Application

Streamlit interface: upload a label PDF and a supplier catalog, pick the
supplier, compare, filter the results and download the Excel report.
"""

import tempfile
from datetime import datetime
from pathlib import Path

import streamlit as st

from components import (
    render_debug_panel,
    render_file_uploaders,
    render_filters,
    render_header,
    render_load_button,
    render_metrics,
    render_reset_button,
    render_results_table,
    render_run_button,
    render_supplier_selector,
)
from processor import find_supplier, process_uploaded_files, results_to_dataframe, run_reconciliation
from styles import get_custom_css

from config import setup_logging
from domain.errors import ReconciliationError
from matching.filters import distinct_values, filter_results
from services.cache import ResultCache
from services.performance import PerformanceMonitor
from writers.excel_writer import generate_file_name, write_report_xlsx

logger = setup_logging()

# ============================================================================
# PAGE CONFIG
# ============================================================================
st.set_page_config(
    page_title="Barcode Compliance",
    page_icon="🏷️",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ============================================================================
# APPLY STYLES
# ============================================================================
st.markdown(get_custom_css(), unsafe_allow_html=True)

# ============================================================================
# SESSION STATE INITIALIZATION
# ============================================================================
if "cache" not in st.session_state:
    st.session_state.cache = ResultCache()
if "monitor" not in st.session_state:
    st.session_state.monitor = PerformanceMonitor()
if "inputs" not in st.session_state:
    st.session_state.inputs = None
if "report" not in st.session_state:
    st.session_state.report = None

# ============================================================================
# MAIN APP FLOW
# ============================================================================
render_header()

pdf_file, excel_file = render_file_uploaders()

if pdf_file and excel_file:
    if render_load_button():
        with st.spinner("🔄 Reading PDF and catalog..."):
            success, inputs, error = process_uploaded_files(
                pdf_file,
                excel_file,
                cache=st.session_state.cache,
                monitor=st.session_state.monitor,
            )
            if success:
                st.session_state.inputs = inputs
                st.session_state.report = None
            else:
                st.session_state.inputs = None
                st.error(f"❌ Error: {error}")

# ============================================================================
# SUPPLIER SELECTION
# ============================================================================
inputs = st.session_state.inputs
if inputs is not None:
    st.caption(
        f"📄 {inputs.pdf_count} barcodes and {len(inputs.document.references)} references in the PDF, "
        f"📊 {len(inputs.catalog.entries)} catalog entries ({inputs.catalog.catalog_format.value} format)"
    )

    supplier_name = render_supplier_selector(inputs.suppliers, inputs.detected_supplier, inputs.validation)

    if render_run_button():
        try:
            supplier = find_supplier(inputs, supplier_name)
            with st.spinner("⚙️ Comparing..."):
                st.session_state.report = run_reconciliation(inputs, supplier, monitor=st.session_state.monitor)
        except ReconciliationError as e:
            st.error(f"❌ Error: {e}")

# ============================================================================
# RESULTS SECTION
# ============================================================================
report = st.session_state.report
if inputs is not None and report is not None:
    render_metrics(report.metrics, report.pdf_count)

    filters = render_filters(
        colors=distinct_values(report.results, "color"),
        sizes=distinct_values(report.results, "size"),
        suppliers=distinct_values(report.results, "supplier"),
    )
    visible = filter_results(report.results, filters)
    st.markdown(f"**{len(visible)} / {len(report.results)} results**")
    render_results_table(results_to_dataframe(visible))

    perf = st.session_state.monitor.report()
    render_debug_panel(
        inputs.catalog.report,
        document_stats={
            "barcodes": inputs.document.stats.valid_barcodes_extracted,
            "references": inputs.document.stats.total_references_found,
            "fallback_scan": inputs.document.stats.used_fallback,
            "pattern_hits": inputs.document.stats.pattern_hits,
            "text_sample": inputs.document.text_sample,
        },
        performance={
            "total_seconds": round(perf.total_time, 3),
            "operations": {op.name: round(op.duration, 3) for op in perf.operations},
            "recommendations": perf.recommendations,
        },
    )

    # ------------------------------------------------------------------------
    # DOWNLOAD
    # ------------------------------------------------------------------------
    now = datetime.now()
    output_path = Path(tempfile.gettempdir()) / generate_file_name(report.metrics.supplier_name, now)
    write_report_xlsx(output_path, report, generated_at=now)

    with open(output_path, "rb") as f:
        st.download_button(
            label="📥 Download Excel report",
            data=f,
            file_name=output_path.name,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            type="primary",
            width="stretch",
            key="download_report",
        )

if render_reset_button():
    st.session_state.cache.close()
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    st.rerun()
