import streamlit as st

from btlcalc.calculators import column_label, results_frame
from core.overrides import apply_fee_override, apply_rate_override, reset_override, set_manual


def _col_id(col_key: float) -> str:
    return f"{float(col_key):g}"


def _on_rate_change(col_key: float, original_rate):
    text = st.session_state[f"rate_text_{_col_id(col_key)}"]
    try:
        st.session_state["rate_overrides"] = apply_rate_override(
            st.session_state.get("rate_overrides"), col_key, text, original_rate
        )
        st.session_state.pop("override_error", None)
    except ValueError as exc:
        st.session_state["override_error"] = str(exc)


def _on_fee_change(col_key: float):
    text = st.session_state[f"fee_text_{_col_id(col_key)}"]
    try:
        st.session_state["fee_overrides"] = apply_fee_override(
            st.session_state.get("fee_overrides"), col_key, text
        )
        st.session_state.pop("override_error", None)
    except ValueError as exc:
        st.session_state["override_error"] = str(exc)


def _on_manual_change(col_key: float):
    cid = _col_id(col_key)
    st.session_state["manual_settings"] = set_manual(
        st.session_state.get("manual_settings"),
        col_key,
        rolled_months=int(st.session_state[f"rolled_{cid}"]),
        deferred_rate=float(st.session_state[f"deferred_{cid}"]) / 100,
    )


def _on_reset(col_key: float, original_rate, fee_pct: float):
    cid = _col_id(col_key)
    ss = st.session_state
    for name in ("rate_overrides", "fee_overrides", "manual_settings"):
        ss[name] = reset_override(ss.get(name), col_key)
    if original_rate is not None:
        ss[f"rate_text_{cid}"] = f"{original_rate * 100:.2f}"
    ss[f"fee_text_{cid}"] = f"{fee_pct:g}"
    for key in (f"rolled_{cid}", f"deferred_{cid}"):
        ss.pop(key, None)


def render_column_controls(result, base_rate, limits, is_tracker: bool, core_mode: bool):
    """Rate, fee and manual rolled / deferred controls for one fee column."""
    ss = st.session_state
    cid = _col_id(result.col_key)
    max_deferred = limits.max_deferred_for(is_tracker)
    ss.setdefault(f"rate_text_{cid}", f"{result.actual_rate_used * 100:.2f}")
    ss.setdefault(f"fee_text_{cid}", f"{result.col_key:g}")
    ss.setdefault(f"rolled_{cid}", min(result.rolled_months, limits.max_rolled_months))
    ss.setdefault(f"deferred_{cid}", round(min(result.deferred_rate, max_deferred) * 100, 2))

    with st.expander(f"Adjust {column_label(result.col_key)} fee column"):
        c1, c2 = st.columns(2)
        c1.text_input(
            "Rate %" + (" (margin)" if is_tracker else ""),
            key=f"rate_text_{cid}",
            on_change=_on_rate_change,
            args=(result.col_key, base_rate),
        )
        c2.text_input(
            "Product Fee %",
            key=f"fee_text_{cid}",
            on_change=_on_fee_change,
            args=(result.col_key,),
        )
        if core_mode:
            st.caption("Core products do not roll or defer interest.")
        else:
            st.slider(
                "Rolled Months",
                min_value=0,
                max_value=limits.max_rolled_months,
                step=1,
                key=f"rolled_{cid}",
                on_change=_on_manual_change,
                args=(result.col_key,),
            )
            st.slider(
                "Deferred Rate %",
                min_value=0.0,
                max_value=round(max_deferred * 100, 2),
                step=0.01,
                key=f"deferred_{cid}",
                on_change=_on_manual_change,
                args=(result.col_key,),
            )
        st.button(
            "Reset Column",
            key=f"reset_{cid}",
            on_click=_on_reset,
            args=(result.col_key, base_rate, result.col_key),
        )


def render_matrix(quote, core_mode: bool = False):
    """Quote matrix with per-column adjustments."""
    st.subheader("Quote Matrix")
    if not quote.results:
        st.info("Enter property value, rent and loan details to see the quote matrix.")
        return None
    df = results_frame(quote.results)
    st.dataframe(df, use_container_width=True)
    if st.session_state.get("override_error"):
        st.error(st.session_state["override_error"])
    is_tracker = bool(quote.rate_table.is_margin) if quote.rate_table is not None else False
    for r in quote.results:
        base_rate = quote.rate_table.rate_for(r.col_key) if quote.rate_table is not None else None
        render_column_controls(r, base_rate, quote.limits, is_tracker, core_mode)
    return df
