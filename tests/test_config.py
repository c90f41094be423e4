import json

import pytest
from pydantic import ValidationError

from btlcalc.models import Limits
from core.config import default_config, load_config


def test_defaults_cover_property_types():
    cfg = default_config()
    assert cfg.limits_for("Commercial").max_loan == 2000000
    assert cfg.limits_for("Unknown").min_loan == cfg.limits["Residential"].min_loan
    assert cfg.deferred_step == pytest.approx(0.0001)


def test_missing_file_uses_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "nope.json"))
    assert cfg == default_config()


def test_file_replaces_sections(tmp_path):
    path = tmp_path / "cfg.json"
    limits = default_config().model_dump()["limits"]
    limits["Residential"]["max_loan"] = 1000000
    path.write_text(json.dumps({"limits": limits, "core_floor_rate": 0.06}))
    cfg = load_config(str(path))
    assert cfg.limits_for("Residential").max_loan == 1000000
    assert cfg.core_floor_rate == pytest.approx(0.06)
    assert cfg.fee_columns == default_config().fee_columns


def test_limits_reject_inverted_loan_bounds():
    data = default_config().limits["Residential"].model_dump()
    data.update(min_loan=500000, max_loan=100000)
    with pytest.raises(ValidationError):
        Limits(**data)


def test_limits_helpers():
    lim = default_config().limits["Residential"]
    assert lim.term_for("3yr Fix") == 36
    assert lim.term_for("5yr Fix") == 24
    assert lim.min_icr_for("2yr Fix") == pytest.approx(1.25)
    assert lim.min_icr_for("2yr Tracker") == pytest.approx(1.30)
    assert lim.max_deferred_for(True) == pytest.approx(0.02)
