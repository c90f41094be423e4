import json
import logging
import os
from typing import Any

import streamlit as st
from pydantic import BaseModel

from btlcalc.models import ManualSettings

logger = logging.getLogger(__name__)

SESSION_FILE = "session_data.json"

# Only persist calculator inputs. Widgets such as buttons inject their own
# keys into ``session_state``; restoring those raises
# ``StreamlitAPIException`` because widget-backed keys cannot be assigned.
PERSISTED_KEYS = {
    "property_type",
    "product_group",
    "is_retention",
    "retention_ltv",
    "product_type",
    "loan_type",
    "property_value",
    "monthly_rent",
    "specific_net_loan",
    "specific_gross_loan",
    "specific_ltv",
    "criteria",
    "fee_overrides",
    "rate_overrides",
    "manual_settings",
    "proc_fee_pct",
    "broker_fee_kind",
    "broker_fee_value",
    "bridge_inputs",
}

# Maps keyed by fee column. JSON object keys are strings, so these come back
# as floats on restore.
COLUMN_KEYED = {"fee_overrides", "rate_overrides", "manual_settings"}


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


def _serializable(value: Any) -> bool:
    return value is None or isinstance(value, (int, float, str, bool, list, dict, BaseModel))


def _column_map(key: str, value: Any) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping of fee column to value")
    out = {}
    for col, item in value.items():
        if key == "manual_settings" and not isinstance(item, ManualSettings):
            item = ManualSettings.model_validate(item)
        out[float(col)] = item
    return out


def dump_state(session) -> str:
    """Serialize the persisted subset of ``session`` to a JSON string."""
    data = {
        k: _to_json(v)
        for k, v in session.items()
        if k in PERSISTED_KEYS and _serializable(v)
    }
    return json.dumps(data, indent=2, sort_keys=True)


def restore_state(text: str, session, overwrite: bool = False) -> int:
    """Apply persisted keys from ``text`` to ``session``; returns the count."""
    data = json.loads(text)
    n = 0
    for key, val in data.items():
        if key not in PERSISTED_KEYS:
            continue
        if key in COLUMN_KEYED:
            val = _column_map(key, val)
        if overwrite:
            session[key] = val
        else:
            session.setdefault(key, val)
        n += 1
    return n


def load_state() -> None:
    """Restore Streamlit session state from ``SESSION_FILE`` if it exists."""
    if not os.path.exists(SESSION_FILE):
        return
    try:
        with open(SESSION_FILE, "r", encoding="utf-8") as f:
            restore_state(f.read(), st.session_state)
    except (OSError, ValueError):
        logger.warning("Could not restore session from %s", SESSION_FILE, exc_info=True)


def save_state() -> None:
    """Persist the calculator inputs to ``SESSION_FILE``."""
    try:
        with open(SESSION_FILE, "w", encoding="utf-8") as f:
            f.write(dump_state(st.session_state))
    except (OSError, TypeError):
        logger.warning("Could not save session to %s", SESSION_FILE, exc_info=True)
