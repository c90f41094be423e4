import streamlit as st

from core.criteria import compute_tier, criteria_for, default_answers


def _question_box(q, answers):
    labels = [opt for opt, _ in q["options"]]
    key = f"crit_{q['key']}"
    if st.session_state.get(key) not in labels:
        current = answers.get(q["key"])
        st.session_state[key] = current if current in labels else labels[0]
    return st.selectbox(q["label"], labels, key=key, help=q.get("helper"))


def render_criteria(property_type: str) -> str:
    """Criteria questions; stores answers and the derived tier in session."""
    ss = st.session_state
    answers = ss.get("criteria") or {}
    defaults = default_answers(property_type)
    if set(answers) != set(defaults):
        answers = defaults
    cfg = criteria_for(property_type)
    with st.expander("Criteria"):
        left, right = st.columns(2)
        with left:
            st.markdown("**Property**")
            for q in cfg["propertyQuestions"]:
                answers[q["key"]] = _question_box(q, answers)
        with right:
            st.markdown("**Applicant**")
            for q in cfg["applicantQuestions"]:
                answers[q["key"]] = _question_box(q, answers)
    tier = compute_tier(property_type, answers)
    ss["criteria"] = dict(answers)
    ss["tier"] = tier
    st.caption(f"Tier: {tier}")
    return tier
