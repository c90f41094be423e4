import streamlit as st

from btlcalc.models import ProductGroup, PropertyType
from btlcalc.rates import product_types_for
from core.criteria import is_within_core_criteria
from core.version import __version__


def render_topbar(product_types=None):
    """Product setup bar; returns (property_type, product_group, product_type)."""
    ss = st.session_state
    ss.setdefault("property_type", PropertyType.RESIDENTIAL.value)
    ss.setdefault("product_group", ProductGroup.SPECIALIST.value)
    ss.setdefault("is_retention", "No")
    ss.setdefault("retention_ltv", "75")

    st.markdown(
        """
        <style>
        .btl-topbar {position:sticky; top:0; background-color:white; z-index:100; padding:4px 8px; border-bottom:1px solid #ddd;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    with st.container():
        st.markdown('<div class="btl-topbar">', unsafe_allow_html=True)
        left, center, right = st.columns([1, 3, 2])
        with left:
            st.markdown(f"**BTL CALC v{__version__}**")
        with center:
            c1, c2, c3 = st.columns(3)
            property_type = c1.selectbox(
                "Property Type", [p.value for p in PropertyType], key="property_type"
            )
            options = product_types_for(property_type, product_types)
            if ss.get("product_type") not in options:
                ss["product_type"] = options[0]
            product_type = c2.selectbox("Product", options, key="product_type")
            c3.radio("Retention?", ["No", "Yes"], horizontal=True, key="is_retention")
            if ss["is_retention"] == "Yes":
                c3.radio("Retention LTV", ["65", "75"], horizontal=True, key="retention_ltv")
        with right:
            core_ok = is_within_core_criteria(property_type, ss.get("criteria"))
            if not core_ok and ss["product_group"] == ProductGroup.CORE.value:
                ss["product_group"] = ProductGroup.SPECIALIST.value
            product_group = st.radio(
                "Product Range",
                [g.value for g in ProductGroup],
                horizontal=True,
                key="product_group",
            )
            if not core_ok:
                st.caption("Core is available for Residential cases within Core criteria only.")
        st.markdown("</div>", unsafe_allow_html=True)
    return property_type, product_group, product_type
