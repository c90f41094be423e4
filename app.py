import io
import logging
import os

import streamlit as st

from btlcalc.calculators import can_calculate, quote, results_frame
from btlcalc.presets import DISCLAIMER
from core.config import load_config
from core.criteria import is_within_core_criteria
from core.rules import evaluate_rules, has_blocking
from core.state import load_state
from core.utils import format_currency, format_percentage
from export.pdf_export import build_email_body, build_quote_pdf, matrix_rows
from ui.bridge import render_bridge_tab
from ui.criteria import render_criteria
from ui.dashboard import render_dashboard_view
from ui.matrix import render_matrix
from ui.property import inputs_from_state, render_property_column
from ui.rates_admin import render_rates_admin
from ui.sidebar import render_fee_sidebar
from ui.topbar import render_topbar

logging.basicConfig(
    level=os.environ.get("BTLCALC_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="BTL / BRIDGE QUOTE CALCULATOR", layout="wide")


def init_state():
    ss = st.session_state
    load_state()
    ss.setdefault("fee_overrides", {})
    ss.setdefault("rate_overrides", {})
    ss.setdefault("manual_settings", {})
    ss.setdefault("override_reason", "")
    ss.setdefault("broker_name", "")
    ss.setdefault("broker_contact", "")


def current_config():
    config = load_config(os.environ.get("BTLCALC_CONFIG"))
    tables = st.session_state.get("rate_tables")
    if tables:
        config = config.model_copy(update={"rate_tables": tables})
    return config


def compute_results():
    ss = st.session_state
    config = current_config()
    inputs = inputs_from_state(ss)
    q = quote(inputs, config)
    logger.debug("Quote sized %d of %d fee columns", len(q.results), len(q.columns))
    rule_state = {
        "property_value": ss.get("property_value") or None,
        "monthly_rent": ss.get("monthly_rent") or None,
        "loan_type": inputs.loan_type,
        "specific_net_loan": inputs.specific_net_loan,
        "specific_gross_loan": inputs.specific_gross_loan,
        "broker_fee_pct": ss.get("broker_fee_value") if ss.get("broker_fee_kind") == "Percentage" else None,
        "broker_fee_flat": ss.get("broker_fee_value") if ss.get("broker_fee_kind") == "Flat" else None,
        "min_loan": q.limits.min_loan,
        "max_loan": q.limits.max_loan,
        "core_requested": ss.get("product_group") == "Core",
        "core_eligible": is_within_core_criteria(inputs.property_type, inputs.criteria),
        "can_calculate": can_calculate(inputs),
        "results": q.results,
    }
    rule_results = evaluate_rules(rule_state)
    return {
        "inputs": inputs,
        "quote": q,
        "rule_results": rule_results,
        "blocking": has_blocking(rule_results),
        "core_mode": inputs.is_core_residential,
    }


def render_quote_page():
    render_topbar(current_config().product_types)
    left, right = st.columns([1, 1])
    with left:
        render_property_column()
    with right:
        render_criteria(st.session_state["property_type"])
    data = compute_results()
    render_dashboard_view(data["quote"], data["rule_results"])
    render_matrix(data["quote"], data["core_mode"])


def _export_payload(data):
    ss = st.session_state
    inputs = data["inputs"]
    q = data["quote"]
    snapshot = {
        "Property Type": inputs.property_type.value,
        "Product": f"{inputs.product_type} ({inputs.product_group.value})",
        "Tier": inputs.tier,
        "Loan Type": inputs.loan_type.value,
        "Property Value": format_currency(inputs.property_value),
        "Monthly Rent": format_currency(inputs.monthly_rent),
        "Max LTV": format_percentage(q.max_ltv, 0),
    }
    best = {}
    if q.best is not None:
        best = {
            "Fee column": f"{q.best.col_key:g}%",
            "Gross loan": f"{q.best.gross_str} ({q.best.gross_ltv_pct}% LTV)",
            "Net loan": f"{q.best.net_str} ({q.best.net_ltv_pct}% LTV)",
        }
    return {
        "branding": {
            "title": "Buy-to-Let Quote",
            "broker": ss.get("broker_name"),
            "contact": ss.get("broker_contact"),
        },
        "deal_snapshot": snapshot,
        "matrix": matrix_rows(results_frame(q.results)),
        "best": best,
        "warnings": [r.model_dump() for r in data["rule_results"]],
        "override_reason": ss.get("override_reason", "").strip(),
    }


def render_exports():
    data = compute_results()
    blocking = data["blocking"]
    st.write("**Disclaimer**")
    st.caption(DISCLAIMER)
    st.divider()
    c1, c2, c3 = st.columns([2, 1, 1])
    c1.text_input("Broker name", key="broker_name")
    c1.text_input("Broker contact", key="broker_contact")
    if blocking:
        st.error("Critical warnings present. Provide an override reason to enable export.")
        c1.text_input("Override reason (will be embedded in the quote)", key="override_reason")

    def make_csv_bytes():
        buf = io.StringIO()
        frame = results_frame(data["quote"].results)
        frame.to_csv(buf)
        return buf.getvalue().encode("utf-8")

    st.download_button(
        "Download CSV Matrix",
        data=make_csv_bytes(),
        file_name="btl_quote.csv",
        mime="text/csv",
    )
    if (not blocking) or st.session_state.get("override_reason", "").strip():
        payload = _export_payload(data)
        c2.download_button(
            "Export Quote PDF",
            data=build_quote_pdf(payload),
            file_name="btl_quote.pdf",
            mime="application/pdf",
        )
        with c3.expander("Email text"):
            st.code(build_email_body(payload), language=None)


init_state()

st.markdown(
    """
    <style>
    @media (max-width: 600px) {
        div[class^='stColumn'] {flex: 1 1 100% !important;}
    }
    input, select {width: 100% !important;}
    </style>
    """,
    unsafe_allow_html=True,
)

steps = ["BTL Quote", "Bridge & Fusion", "Rates Admin", "Exports"]
nav = st.sidebar.radio("Navigate", steps)
render_fee_sidebar()

st.title("BTL / BRIDGE QUOTE CALCULATOR")
st.caption("Buy-to-Let sizing • Rolled & deferred interest optimisation • Bridge & Fusion • Exports")

if nav == "BTL Quote":
    render_quote_page()
elif nav == "Bridge & Fusion":
    render_bridge_tab()
elif nav == "Rates Admin":
    render_rates_admin(load_config(os.environ.get("BTLCALC_CONFIG")).rate_tables)
elif nav == "Exports":
    render_exports()
