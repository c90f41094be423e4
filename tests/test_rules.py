from btlcalc import presets
from btlcalc.calculators import optimize_column
from btlcalc.models import Limits, LoanInputs, RateTable
from core.rules import evaluate_rules, has_blocking

LIMITS = Limits(**presets.LOAN_LIMITS["Residential"])
FIX = RateTable(rates={6: 0.0589})


def _codes(state):
    return {r.code for r in evaluate_rules(state)}


def _result(**kw):
    inputs = LoanInputs(**{"property_value": 350000, "monthly_rent": 1750, **kw})
    return optimize_column(6, inputs, FIX, LIMITS, 0.75)


def test_input_ranges():
    codes = _codes({"property_value": 20000, "monthly_rent": 60000})
    assert "PROPERTY_VALUE_RANGE" in codes
    assert "RENT_RANGE" in codes
    assert not _codes({"property_value": 350000, "monthly_rent": 1750})


def test_blank_inputs_are_not_range_errors():
    assert not _codes({"property_value": None, "monthly_rent": ""})


def test_loan_amount_range_uses_limits():
    codes = _codes({"specific_net_loan": 100000, "min_loan": 150000, "max_loan": 3000000})
    assert "LOAN_AMOUNT_RANGE" in codes


def test_broker_fee_ranges_block():
    res = evaluate_rules({"broker_fee_pct": 12})
    assert "BROKER_FEE_PCT_RANGE" in {r.code for r in res}
    assert has_blocking(res)
    assert "BROKER_FEE_FLAT_RANGE" in _codes({"broker_fee_flat": 60000})


def test_no_applicable_product():
    zero = _result(property_value=100000, monthly_rent=500)
    res = evaluate_rules({"can_calculate": True, "results": [zero]})
    assert "NO_APPLICABLE_PRODUCT" in {r.code for r in res}
    assert has_blocking(res)
    assert "NO_APPLICABLE_PRODUCT" in _codes({"can_calculate": True, "results": []})
    assert "NO_APPLICABLE_PRODUCT" not in _codes({"can_calculate": False, "results": []})


def test_column_flags():
    capped = _result(property_value=10000000, monthly_rent=50000)
    overridden = _result(rate_overrides={6: 0.06})
    codes = _codes({"can_calculate": True, "results": [capped, overridden]})
    assert "MAX_LOAN_CAP" in codes
    assert "RATE_OVERRIDDEN" in codes
    assert "NO_APPLICABLE_PRODUCT" not in codes


def test_specific_net_unreachable():
    res = _result()
    state = {"loan_type": "Specific Net Loan", "specific_net_loan": 400000, "results": [res]}
    assert "SPECIFIC_NET_UNREACHABLE" in _codes(state)


def test_core_not_eligible_warning():
    assert "CORE_NOT_ELIGIBLE" in _codes({"core_requested": True, "core_eligible": False})
    assert "CORE_NOT_ELIGIBLE" not in _codes({"core_requested": True, "core_eligible": True})
