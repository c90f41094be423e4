import streamlit as st

from btlcalc.models import FlatBrokerFee, LoanInputs, LoanType, PercentageBrokerFee
from core.criteria import default_answers, effective_product_group
from core.utils import format_currency, parse_number

LOAN_TYPES = [t.value for t in LoanType]


def render_property_column():
    """Property value, rent and loan-type inputs."""
    ss = st.session_state
    ss.setdefault("property_value", 0.0)
    ss.setdefault("monthly_rent", 0.0)
    ss.setdefault("loan_type", LoanType.MAX_OPTIMUM_GROSS.value)
    ss.setdefault("specific_net_loan", 0.0)
    ss.setdefault("specific_gross_loan", 0.0)
    ss.setdefault("specific_ltv", 75)

    with st.expander("Property & Loan", expanded=True):
        c1, c2 = st.columns(2)
        c1.number_input("Property Value", min_value=0.0, step=5000.0, key="property_value")
        c2.number_input("Monthly Rent", min_value=0.0, step=50.0, key="monthly_rent")
        loan_type = st.selectbox("Loan Type", LOAN_TYPES, key="loan_type")
        if loan_type == LoanType.SPECIFIC_NET.value:
            st.number_input("Specific Net Loan", min_value=0.0, step=5000.0, key="specific_net_loan")
        elif loan_type == LoanType.SPECIFIC_GROSS.value:
            st.number_input("Specific Gross Loan", min_value=0.0, step=5000.0, key="specific_gross_loan")
        elif loan_type == LoanType.MAX_LTV.value:
            st.slider("Target LTV %", min_value=5, max_value=75, step=1, key="specific_ltv")

    pv = parse_number(ss["property_value"])
    if pv:
        st.caption(f"Property Value: {format_currency(pv)}")


def inputs_from_state(ss) -> LoanInputs:
    """Build validated engine inputs from the session values."""
    loan_type = LoanType(ss.get("loan_type", LoanType.MAX_OPTIMUM_GROSS.value))
    property_type = ss.get("property_type", "Residential")
    criteria = ss.get("criteria") or default_answers(property_type)

    broker_fee = None
    broker_value = parse_number(ss.get("broker_fee_value"))
    if broker_value:
        if ss.get("broker_fee_kind", "Percentage") == "Flat":
            broker_fee = FlatBrokerFee(amount=broker_value)
        else:
            broker_fee = PercentageBrokerFee(pct=broker_value)

    return LoanInputs(
        property_value=parse_number(ss.get("property_value")) or None,
        monthly_rent=parse_number(ss.get("monthly_rent")) or None,
        loan_type=loan_type,
        specific_net_loan=(parse_number(ss.get("specific_net_loan")) or None)
        if loan_type == LoanType.SPECIFIC_NET
        else None,
        specific_gross_loan=(parse_number(ss.get("specific_gross_loan")) or None)
        if loan_type == LoanType.SPECIFIC_GROSS
        else None,
        specific_ltv=parse_number(ss.get("specific_ltv")) / 100
        if loan_type == LoanType.MAX_LTV and parse_number(ss.get("specific_ltv")) is not None
        else None,
        product_type=ss.get("product_type", "2yr Fix"),
        tier=ss.get("tier", "Tier 1"),
        property_type=property_type,
        product_group=effective_product_group(ss.get("product_group", "Specialist"), property_type, criteria),
        is_retention=ss.get("is_retention", "No") == "Yes",
        retention_ltv=str(ss.get("retention_ltv", "75")),
        criteria=criteria,
        fee_overrides=ss.get("fee_overrides") or {},
        rate_overrides=ss.get("rate_overrides") or {},
        manual_settings=ss.get("manual_settings") or {},
        proc_fee_pct=parse_number(ss.get("proc_fee_pct")) or 0.0,
        broker_fee=broker_fee,
    )
