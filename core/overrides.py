"""Per-column rate, fee and manual-setting overrides.

All helpers return new dicts; the caller stores them back (usually in
``st.session_state``).
"""
from __future__ import annotations

from typing import Dict, Optional

from btlcalc.models import ManualSettings
from core.utils import parse_percentage

RATE_TOLERANCE = 1e-5
FEE_TOLERANCE = 1e-8


def default_proc_fee_pct(is_retention: bool) -> float:
    return 0.5 if is_retention else 1.0


def _parse_or_raise(text) -> float:
    value = parse_percentage(text)
    if value is None:
        raise ValueError(f"Could not read a percentage from {text!r}")
    return value


def apply_rate_override(overrides: Dict[float, float], col_key: float, text, original_rate: Optional[float]) -> Dict[float, float]:
    """Store a rate override as a decimal.

    An override matching the sheet rate is dropped rather than stored.
    """
    value = _parse_or_raise(text)
    out = dict(overrides or {})
    key = float(col_key)
    if original_rate is not None and abs(value - original_rate) < RATE_TOLERANCE:
        out.pop(key, None)
    else:
        out[key] = value
    return out


def apply_fee_override(overrides: Dict[float, float], col_key: float, text) -> Dict[float, float]:
    """Store a product fee override as a percentage (``4.5`` for 4.5%)."""
    value = _parse_or_raise(text)
    out = dict(overrides or {})
    key = float(col_key)
    if abs(value - key / 100) < FEE_TOLERANCE:
        out.pop(key, None)
    else:
        out[key] = value * 100
    return out


def reset_override(overrides: Dict, col_key: float) -> Dict:
    out = dict(overrides or {})
    out.pop(float(col_key), None)
    return out


def set_manual(
    settings: Dict[float, ManualSettings],
    col_key: float,
    rolled_months: Optional[int] = None,
    deferred_rate: Optional[float] = None,
) -> Dict[float, ManualSettings]:
    """Pin rolled months and/or deferred rate for a column.

    Values left as ``None`` keep what was already pinned.
    """
    out = dict(settings or {})
    key = float(col_key)
    current = out.get(key) or ManualSettings()
    out[key] = ManualSettings(
        rolled_months=rolled_months if rolled_months is not None else current.rolled_months,
        deferred_rate=deferred_rate if deferred_rate is not None else current.deferred_rate,
    )
    return out
