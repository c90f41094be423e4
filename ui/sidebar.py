import streamlit as st

from core.overrides import default_proc_fee_pct
from core.state import dump_state, restore_state, save_state


def _reset_proc_fee(is_retention: bool):
    st.session_state["proc_fee_pct"] = default_proc_fee_pct(is_retention)


def _load_case():
    uploaded = st.session_state.get("case_upload")
    if uploaded is None:
        return
    try:
        n = restore_state(uploaded.getvalue().decode("utf-8"), st.session_state, overwrite=True)
    except ValueError as exc:
        st.session_state["case_message"] = f"Could not read case file: {exc}"
    else:
        st.session_state["case_message"] = f"Loaded {n} fields"


def render_fee_sidebar():
    """Sidebar with processing and broker fees plus case save / load."""
    ss = st.session_state
    is_retention = ss.get("is_retention", "No") == "Yes"
    ss.setdefault("proc_fee_pct", default_proc_fee_pct(is_retention))
    ss.setdefault("broker_fee_kind", "Percentage")
    ss.setdefault("broker_fee_value", 0.0)

    st.sidebar.header("Fees")
    st.sidebar.number_input(
        "Processing Fee %",
        min_value=0.0,
        max_value=10.0,
        step=0.1,
        key="proc_fee_pct",
        help="Defaults to 1% (0.5% on retention).",
    )
    st.sidebar.button("Default Processing Fee", on_click=_reset_proc_fee, args=(is_retention,))
    kind = st.sidebar.radio("Broker Fee", ["Percentage", "Flat"], horizontal=True, key="broker_fee_kind")
    st.sidebar.number_input(
        "Broker Fee %" if kind == "Percentage" else "Broker Fee £",
        min_value=0.0,
        step=0.1 if kind == "Percentage" else 100.0,
        key="broker_fee_value",
    )

    st.sidebar.header("Case")
    st.sidebar.download_button(
        "Download Case",
        data=dump_state(ss),
        file_name="btl_case.json",
        mime="application/json",
    )
    st.sidebar.file_uploader("Load Case", type=["json"], key="case_upload", on_change=_load_case)
    if ss.get("case_message"):
        st.sidebar.caption(ss["case_message"])
    save_state()
