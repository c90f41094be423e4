import streamlit as st

from btlcalc.rates import rates_from_frame, rates_to_frame


def _reset_rates():
    st.session_state.pop("rate_tables", None)
    st.session_state.pop("rates_editor", None)


def render_rates_admin(default_tables):
    """Editable rate sheets; applied sheets are kept in ``rate_tables``."""
    st.header("Rates Admin")
    st.caption("Rates are decimals (0.0589 = 5.89%). Tracker rows hold the margin over BBR.")
    current = st.session_state.get("rate_tables") or default_tables
    edited = st.data_editor(
        rates_to_frame(current),
        num_rows="dynamic",
        use_container_width=True,
        key="rates_editor",
    )
    c1, c2 = st.columns(2)
    if c1.button("Apply Rates"):
        try:
            st.session_state["rate_tables"] = rates_from_frame(edited)
        except (KeyError, ValueError) as exc:
            st.error(f"Could not apply rates: {exc}")
        else:
            st.success("Rates updated")
    c2.button("Restore Default Rates", on_click=_reset_rates)
    return st.session_state.get("rate_tables") or default_tables
