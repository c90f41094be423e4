import json

import pytest
import streamlit as st

from btlcalc import presets
from btlcalc.calculators import optimize_column
from btlcalc.models import Limits, LoanInputs, ManualSettings, RateTable
from core import state
from core.overrides import apply_fee_override, reset_override

LIMITS = Limits(**presets.LOAN_LIMITS["Residential"])


def test_save_state_ignores_widget_keys(tmp_path, monkeypatch):
    file = tmp_path / "session.json"
    monkeypatch.setattr(state, "SESSION_FILE", str(file))
    st.session_state.clear()
    st.session_state["property_value"] = 350000.0
    st.session_state["reset_6"] = True
    state.save_state()
    data = json.loads(file.read_text())
    assert "reset_6" not in data
    assert data["property_value"] == 350000.0


def test_load_state_ignores_widget_keys(tmp_path, monkeypatch):
    file = tmp_path / "session.json"
    file.write_text(json.dumps({"monthly_rent": 1750, "reset_6": True}))
    monkeypatch.setattr(state, "SESSION_FILE", str(file))
    st.session_state.clear()
    state.load_state()
    assert "monthly_rent" in st.session_state
    assert "reset_6" not in st.session_state


def test_overrides_roundtrip_through_json():
    session = {
        "fee_overrides": {6.0: 4.5},
        "rate_overrides": {4.0: 0.065},
        "manual_settings": {4.0: ManualSettings(rolled_months=3)},
    }
    restored = {}
    assert state.restore_state(state.dump_state(session), restored) == 3
    assert restored["fee_overrides"] == {6.0: 4.5}
    assert restored["rate_overrides"] == {4.0: 0.065}
    assert restored["manual_settings"] == {4.0: ManualSettings(rolled_months=3)}


def test_restored_overrides_can_be_reset():
    session = {
        "fee_overrides": {6.0: 4.5},
        "manual_settings": {6.0: ManualSettings(rolled_months=3)},
    }
    restored = {}
    state.restore_state(state.dump_state(session), restored)
    restored["fee_overrides"] = reset_override(restored["fee_overrides"], 6)
    restored["manual_settings"] = reset_override(restored["manual_settings"], 6)
    assert restored["fee_overrides"] == {}
    assert restored["manual_settings"] == {}

    inputs = LoanInputs(
        property_value=350000,
        monthly_rent=1750,
        product_type="2yr Fix",
        fee_overrides=restored["fee_overrides"],
        manual_settings=restored["manual_settings"],
    )
    res = optimize_column(6, inputs, RateTable(rates={6: 0.0589}), LIMITS, 0.75)
    assert res.fee_amount == pytest.approx(262500 * 0.06)
    assert not res.is_manual


def test_restored_fee_override_equal_to_default_clears():
    restored = {}
    state.restore_state(json.dumps({"fee_overrides": {"6.0": 4.5}}), restored)
    assert apply_fee_override(restored["fee_overrides"], 6, "6") == {}


def test_bad_column_map_is_rejected():
    with pytest.raises(ValueError):
        state.restore_state(json.dumps({"fee_overrides": [4.5]}), {})
    with pytest.raises(ValueError):
        state.restore_state(json.dumps({"rate_overrides": {"six": 0.06}}), {})


def test_restore_respects_existing_values():
    restored = {"monthly_rent": 900}
    state.restore_state(json.dumps({"monthly_rent": 1750}), restored)
    assert restored["monthly_rent"] == 900
    state.restore_state(json.dumps({"monthly_rent": 1750}), restored, overwrite=True)
    assert restored["monthly_rent"] == 1750
