"""
Streamlit Frontend for Master of Coin

A thin shell over LedgerSession:
1. Upload the monthly workbook (or pull it from Google Sheets)
2. Pick a month, or the cumulative view
3. See the CalculationResult as computed - no extra math here

A failed upload shows one generic notice and keeps the data already
loaded.
"""

import streamlit as st

from master_of_coin.aggregator import ALL_MONTHS
from master_of_coin.config import get_settings, validate_all_settings
from master_of_coin.models import PILLAR_PROTOCOL, CalculationResult, Pillar
from master_of_coin.normalizer import format_month
from master_of_coin.orchestrator import LedgerSession, create_app_components
from master_of_coin.services.workbook import ExcelWorkbookSource


st.set_page_config(
    page_title="Master of Coin",
    page_icon="👑",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def money(value: float) -> str:
    return f"{get_settings().app.currency_symbol}{abs(value):,.0f}"


def main():
    """Main application entry point."""
    session, sheets_source = get_components()

    st.sidebar.title("👑 Master of Coin")
    st.sidebar.caption("DOBI Governance v2.0")
    st.sidebar.markdown("---")

    uploaded_file = st.sidebar.file_uploader(
        "Monthly workbook",
        type=get_settings().workbook.supported_formats_list,
    )
    if uploaded_file is not None and st.sidebar.button("📥 Load workbook", type="primary"):
        source = ExcelWorkbookSource(uploaded_file.getvalue(), filename=uploaded_file.name)
        ok, message = session.ingest(source)
        (st.sidebar.success if ok else st.sidebar.error)(message)

    if sheets_source is not None and st.sidebar.button("🔄 Load from Google Sheets"):
        ok, message = session.ingest(sheets_source)
        (st.sidebar.success if ok else st.sidebar.error)(message)

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "📜 Chronicle", "🛡️ Protocol", "⚙️ Settings"],
        index=0,
    )

    if page == "🛡️ Protocol":
        render_protocol_page()
    elif page == "⚙️ Settings":
        render_settings_page()
    elif not session.is_loaded:
        st.info("Upload your monthly workbook to begin.")
    else:
        month = st.selectbox(
            "Month",
            options=[ALL_MONTHS] + session.months(),
            format_func=lambda m: "Cumulative Chronicle" if m == ALL_MONTHS else format_month(m),
        )
        if page == "📊 Dashboard":
            render_dashboard_page(session, month)
        else:
            render_chronicle_page(session, month)


def render_dashboard_page(session: LedgerSession, month: str):
    """Render totals, lender ledger and pillar rollups."""
    result = session.calculate(month)
    if result is None:
        st.warning("No records for this selection.")
        return

    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Income", money(result.income))
    col2.metric("Operating Expenses", money(result.expenses))
    col3.metric("Savings", money(result.savings))
    col4.metric("Outstanding Liability", money(result.liability))
    col5.metric("Net Position", money(result.net_position))

    col1, col2, col3 = st.columns(3)
    col1.metric("Overall", f"{result.performance.overall}%")
    col2.metric("Discipline", f"{result.performance.discipline}%")
    col3.metric("Savings Execution", f"{result.performance.savings_execution}%")

    render_lender_ledger(result)
    render_pillars(result)


def render_lender_ledger(result: CalculationResult):
    st.markdown("### Giver-Bridge Ledger")
    for entry in result.active_lenders:
        st.markdown(f"**{entry.name}**: {money(entry.residual_amount)} remaining")
    if result.cleared_lenders:
        st.success(", ".join(f"{e.name}: Cleared" for e in result.cleared_lenders))
    if result.liability_breakdown:
        st.dataframe([entry.model_dump(mode="json") for entry in result.liability_breakdown])


def render_pillars(result: CalculationResult):
    st.markdown("### Pillars")
    for pillar, meta in sorted(PILLAR_PROTOCOL.items(), key=lambda kv: kv[1].order):
        if pillar == Pillar.NONE:
            continue
        rollup = result.pillars[pillar]
        with st.expander(f"{meta.tag.value} - {meta.header} ({money(rollup.total)})"):
            st.dataframe([item.model_dump(mode="json") for item in rollup.items])


def render_chronicle_page(session: LedgerSession, month: str):
    """Render the normalized transactions of the selection."""
    st.title("📜 The Chronicle")
    rows = session.selection(month)
    st.dataframe([
        record.model_dump(mode="json", include={
            "month", "kind", "pillar", "item", "amount", "lender", "is_mirror_entry", "notes",
        })
        for record in rows
    ])


def render_protocol_page():
    """Render the pillar rulebook."""
    from master_of_coin.normalizer import PROTOCOL_MAP

    st.title("🛡️ Protocol Rulebook")
    st.dataframe([
        {"item": item, **entry.model_dump(mode="json")}
        for item, entry in PROTOCOL_MAP.items()
    ])


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    status = validate_all_settings()

    sources = [
        ("Workbook upload", "workbook"),
        ("Google Sheets (optional source)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in sources:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")


if __name__ == "__main__":
    main()
