import streamlit as st

from core.utils import format_percentage


def render_rule_results(rule_results):
    for r in rule_results:
        if r.severity == "critical":
            st.error(f"[{r.code}] {r.message}")
        elif r.severity == "warn":
            st.warning(f"[{r.code}] {r.message}")
        else:
            st.info(f"[{r.code}] {r.message}")


def render_dashboard_view(quote, rule_results):
    """Best-option metrics followed by rule evaluations."""
    st.header("Summary")
    cols = st.columns(4)
    best = quote.best
    cols[0].metric("Max LTV", format_percentage(quote.max_ltv, 0))
    if best is not None:
        cols[1].metric("Best Fee Column", f"{best.col_key:g}%")
        cols[2].metric("Gross Loan", best.gross_str, delta=f"{best.gross_ltv_pct}% LTV", delta_color="off")
        cols[3].metric("Net Loan", best.net_str, delta=f"{best.net_ltv_pct}% LTV", delta_color="off")
    else:
        cols[1].metric("Best Fee Column", "—")
        cols[2].metric("Gross Loan", "—")
        cols[3].metric("Net Loan", "—")
    render_rule_results(rule_results)
