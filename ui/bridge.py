import pandas as pd
import streamlit as st

from btlcalc import bridge
from core.utils import format_currency, parse_percentage


def render_bridge_tab():
    """Bridge & Fusion calculator: one product, all LTV bands."""
    ss = st.session_state
    ss.setdefault("bridge_product", bridge.BridgeProduct.FUSION.value)
    ss.setdefault("bridge_property_value", 0.0)
    ss.setdefault("bridge_gross", 0.0)
    ss.setdefault("bridge_ltv", 75)
    ss.setdefault("bridge_rate_text", "")

    st.header("Bridge & Fusion")
    c1, c2, c3 = st.columns(3)
    product = c1.selectbox("Bridge Product", [p.value for p in bridge.BridgeProduct], key="bridge_product")
    if product == bridge.BridgeProduct.FUSION.value:
        ptypes = bridge.FUSION_PROPERTY_TYPES
    else:
        ptypes = bridge.BRIDGE_PROPERTY_TYPES
    if ss.get("bridge_property_type") not in ptypes:
        ss["bridge_property_type"] = ptypes[0]
    property_type = c2.selectbox("Bridge Property Type", ptypes, key="bridge_property_type")
    pv = c3.number_input("Bridge Property Value", min_value=0.0, step=5000.0, key="bridge_property_value")

    d1, d2, d3 = st.columns(3)
    ltv = d1.radio("LTV %", bridge.LTV_OPTIONS, horizontal=True, key="bridge_ltv")
    gross = d2.number_input("Specific Gross Loan (optional)", min_value=0.0, step=5000.0, key="bridge_gross")
    d3.text_input("Rate Override %", key="bridge_rate_text")

    gross = gross or None
    errors = bridge.validate_inputs(pv, ltv, property_type, gross)
    if errors:
        for e in errors:
            st.warning(e)
        return None

    rate_override = parse_percentage(ss["bridge_rate_text"]) if ss["bridge_rate_text"].strip() else None
    result = bridge.calculate(product, pv, ltv, property_type, gross, rate_override)
    if result is None:
        st.error("Rate not available for selected criteria")
        return None

    m = st.columns(4)
    m[0].metric("Gross Loan", format_currency(result.gross))
    m[1].metric("Net Loan", format_currency(result.net))
    m[2].metric("Rate", result.rate_display)
    m[3].metric("Monthly Payment", format_currency(result.monthly_payment))
    if result.tier:
        st.caption(f"{result.tier} • Actual LTV {result.actual_ltv:.2f}%")
    else:
        st.caption(f"Actual LTV {result.actual_ltv:.2f}%")

    options = bridge.calculate_all_ltv(product, pv, property_type)
    if options:
        st.subheader("LTV Matrix")
        st.dataframe(pd.DataFrame(bridge.bridge_frame_rows(options)), use_container_width=True)
        best = bridge.best_option(options)
        st.caption(f"Best option: {best.requested_ltv}% LTV, net {format_currency(best.net)}")
    ss["bridge_inputs"] = {
        "product": product,
        "property_type": property_type,
        "property_value": pv,
        "ltv": ltv,
        "specific_gross_loan": gross,
    }
    return result
