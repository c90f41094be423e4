import math
import os
import sys
from typing import get_args, get_type_hints

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from btlcalc import presets
from btlcalc.calculators import (
    ColumnContext,
    can_calculate,
    compute_all_columns,
    compute_best_summary,
    evaluate_combination,
    mode_for,
    optimize_column,
    quote,
    results_frame,
    search_grid,
)
from btlcalc.models import (
    FlatBrokerFee,
    Limits,
    LoanInputs,
    LoanType,
    ManualSettings,
    PercentageBrokerFee,
    RateTable,
)

LIMITS = Limits(**presets.LOAN_LIMITS["Residential"])
FIX = RateTable(rates={6: 0.0589, 4: 0.0639, 3: 0.0679, 2: 0.0719})
TRACKER = RateTable(rates={6: 0.0159, 4: 0.0209}, is_margin=True)


def _inputs(**kw):
    base = dict(property_value=350000, monthly_rent=1750, product_type="2yr Fix")
    base.update(kw)
    return LoanInputs(**base)


def _ctx(**kw):
    base = dict(
        term_months=24,
        fee_pct=0.06,
        min_icr=1.25,
        ltv_cap=262500,
        loan_type=LoanType.MAX_OPTIMUM_GROSS,
        display_rate=0.0589,
        stress_rate=0.0589,
        min_loan=150000,
        max_loan=3000000,
        property_value=350000,
        monthly_rent=1750,
    )
    base.update(kw)
    return ColumnContext(**base)


def test_ltv_bound_column():
    res = optimize_column(6, _inputs(), FIX, LIMITS, 0.75)
    assert res.gross == pytest.approx(262500)
    assert res.net == pytest.approx(246750)
    assert res.fee_amount == pytest.approx(15750)
    assert res.rolled_months == 0
    assert res.deferred_rate == 0
    assert res.ltv == pytest.approx(0.75)
    assert res.icr == pytest.approx(21000 / (262500 * 0.0589), rel=1e-9)
    assert res.full_rate_text == "5.89%"
    assert res.pay_rate_text == "5.89%"
    assert res.product_name == "2yr Fix, Tier 1"
    assert res.dd_start_month == 1
    assert res.direct_debit == pytest.approx(262500 * 0.0589 / 12)
    assert not res.is_manual
    assert not res.is_rate_overridden


def test_net_identity_holds():
    c = evaluate_combination(5, 0.01, _ctx(property_value=1000000, ltv_cap=750000, monthly_rent=1500))
    assert c.net == pytest.approx(c.gross - c.fee_amount - c.rolled - c.deferred)
    assert c.rolled == pytest.approx(c.gross * (0.0489 / 12) * 5)
    assert c.deferred == pytest.approx(c.gross * (0.01 / 12) * 24)


def test_rent_bound_optimiser_beats_zero_zero():
    inputs = _inputs(property_value=1000000, monthly_rent=1500)
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    ctx = _ctx(property_value=1000000, ltv_cap=750000, monthly_rent=1500)
    baseline = evaluate_combination(0, 0.0, ctx)
    assert baseline.gross == pytest.approx(36000 / (1.25 * (0.0589 / 12) * 24))
    assert res.net >= baseline.net
    assert 0 <= res.rolled_months <= LIMITS.max_rolled_months
    assert 0 <= res.deferred_rate <= LIMITS.max_deferred_fix + 1e-12
    steps = res.deferred_rate / presets.DEFERRED_STEP
    assert abs(steps - round(steps)) < 1e-6


def test_optimum_is_grid_maximum():
    inputs = _inputs(property_value=1000000, monthly_rent=1500)
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    ctx = _ctx(property_value=1000000, ltv_cap=750000, monthly_rent=1500)
    for rolled in (0, 3, 9):
        for deferred in (0.0, 0.005, 0.0125):
            assert evaluate_combination(rolled, deferred, ctx).net <= res.net + 1e-6


def test_specific_net_loan_is_met():
    inputs = _inputs(
        property_value=500000,
        monthly_rent=2500,
        loan_type=LoanType.SPECIFIC_NET,
        specific_net_loan=250000,
    )
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    assert abs(res.net - 250000) < 1
    assert res.gross >= 250000 / 0.94 - 1


def test_specific_net_infeasible_denominator_falls_back_to_caps():
    ctx = _ctx(loan_type=LoanType.SPECIFIC_NET, specific_net_loan=100000, fee_pct=0.99)
    c = evaluate_combination(9, 0.0, ctx)
    assert c.gross == pytest.approx(262500)


def test_specific_gross_caps_loan():
    inputs = _inputs(
        property_value=500000,
        monthly_rent=2500,
        loan_type=LoanType.SPECIFIC_GROSS,
        specific_gross_loan=200000,
    )
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    assert res.gross == pytest.approx(200000)
    assert res.net == pytest.approx(188000)


def test_specific_ltv_caps_loan():
    inputs = _inputs(property_value=500000, monthly_rent=5000, loan_type=LoanType.MAX_LTV, specific_ltv=0.5)
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    assert res.gross == pytest.approx(250000)


def test_below_minimum_snaps_to_zero():
    res = optimize_column(6, _inputs(property_value=100000, monthly_rent=500), FIX, LIMITS, 0.75)
    assert res.gross == 0
    assert res.net == 0
    assert not res.below_min
    assert res.icr is None


def test_max_loan_cap_flag():
    res = optimize_column(6, _inputs(property_value=10000000, monthly_rent=50000), FIX, LIMITS, 0.75)
    assert res.gross == pytest.approx(3000000)
    assert res.hit_max_cap


def test_no_rent_means_ltv_governs():
    c = evaluate_combination(0, 0.0, _ctx(monthly_rent=None))
    assert c.gross == pytest.approx(262500)
    assert c.icr is None


def test_tracker_rates_and_text():
    res = optimize_column(6, _inputs(product_type="2yr Tracker"), TRACKER, LIMITS, 0.75)
    assert res.full_rate_text == "5.59%"
    assert res.pay_rate_text.endswith("% + BBR")
    assert res.actual_rate_used == pytest.approx(0.0159)
    assert res.deferred_rate <= LIMITS.max_deferred_tracker + 1e-12


def test_core_residential_floor_and_zero_zero():
    low = RateTable(rates={6: 0.045})
    inputs = _inputs(
        product_group="Core",
        manual_settings={6: ManualSettings(rolled_months=5, deferred_rate=0.01)},
    )
    assert mode_for(inputs, 6) == "core"
    res = optimize_column(6, inputs, low, LIMITS, 0.75)
    assert res.rolled_months == 0
    assert res.deferred_rate == 0
    assert res.full_rate_text == "4.50%"
    assert res.pay_rate_text == "5.50%"
    assert not res.is_manual


def test_manual_settings_are_clamped():
    inputs = _inputs(
        property_value=1000000,
        monthly_rent=1500,
        manual_settings={6: ManualSettings(rolled_months=20, deferred_rate=0.5)},
    )
    assert mode_for(inputs, 6) == "manual"
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    assert res.rolled_months == LIMITS.max_rolled_months
    assert res.deferred_rate == pytest.approx(LIMITS.max_deferred_fix)
    assert res.is_manual


def test_manual_rolled_only_defaults_deferred_to_zero():
    inputs = _inputs(manual_settings={6: ManualSettings(rolled_months=2)})
    res = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    assert res.rolled_months == 2
    assert res.deferred_rate == 0


def test_missing_rate_skips_column():
    assert optimize_column(5, _inputs(), FIX, LIMITS, 0.75) is None
    assert optimize_column(6, _inputs(), None, LIMITS, 0.75) is None


def test_rate_override_used_when_sheet_has_no_rate():
    res = optimize_column(5, _inputs(rate_overrides={5: 0.06}), FIX, LIMITS, 0.75)
    assert res is not None
    assert res.is_rate_overridden
    assert res.full_rate_text == "6.00%"


def test_fee_override_changes_fee():
    res = optimize_column(6, _inputs(fee_overrides={6: 4.5}), FIX, LIMITS, 0.75)
    assert res.fee_amount == pytest.approx(262500 * 0.045)


def test_broker_and_processing_fees():
    res = optimize_column(6, _inputs(proc_fee_pct=1.0, broker_fee=PercentageBrokerFee(pct=0.5)), FIX, LIMITS, 0.75)
    assert res.proc_fee_value == pytest.approx(2625)
    assert res.broker_fee_value == pytest.approx(1312.5)
    flat = optimize_column(6, _inputs(broker_fee=FlatBrokerFee(amount=995)), FIX, LIMITS, 0.75)
    assert flat.broker_fee_value == 995


def test_compute_all_columns_drops_missing_rates():
    results = compute_all_columns([6, 5, 4], _inputs(), FIX, LIMITS, 0.75)
    assert [r.col_key for r in results] == [6, 4]


def test_best_summary_first_wins_ties():
    res = optimize_column(6, _inputs(), FIX, LIMITS, 0.75)
    twin = res.model_copy(update={"col_key": 4.0})
    best = compute_best_summary([res, twin], 350000)
    assert best.col_key == 6
    assert best.gross_str == "£262,500"
    assert best.gross_ltv_pct == 75
    assert best.net_str == "£246,750"
    assert best.net_ltv_pct in (70, 71)
    assert compute_best_summary([], 350000) is None


def test_best_summary_without_property_value():
    res = optimize_column(6, _inputs(), FIX, LIMITS, 0.75)
    best = compute_best_summary([res], None)
    assert best.gross_ltv_pct == 0
    assert best.net_ltv_pct == 0


def test_can_calculate_gating():
    assert not can_calculate(_inputs(monthly_rent=None))
    assert can_calculate(_inputs())
    assert not can_calculate(_inputs(loan_type=LoanType.SPECIFIC_NET))
    assert can_calculate(_inputs(loan_type=LoanType.SPECIFIC_NET, specific_net_loan=200000))
    assert not can_calculate(_inputs(loan_type=LoanType.SPECIFIC_GROSS))
    assert not can_calculate(_inputs(property_value=None))


def test_quote_end_to_end():
    q = quote(_inputs())
    assert q.columns == [6, 4, 3, 2]
    assert q.max_ltv == pytest.approx(0.75)
    assert len(q.results) == 4
    assert q.best.net == max(r.net for r in q.results)
    assert all(math.isfinite(r.gross) for r in q.results)


def test_quote_without_rent_has_no_results():
    q = quote(_inputs(monthly_rent=None))
    assert q.results == []
    assert q.best is None


def test_quote_rejects_core_for_commercial():
    with pytest.raises(ValueError):
        quote(_inputs(product_group="Core", property_type="Commercial"))


def test_results_frame_layout():
    df = results_frame(compute_all_columns([6, 4], _inputs(), FIX, LIMITS, 0.75))
    assert list(df.columns) == ["6%", "4%"]
    assert df.loc["Gross loan", "6%"] == "£262,500"
    assert results_frame([]).empty


RENTS = [600, 900, 1200, 1500, 1750, 2000, 2500, 3500, 6000, 20000]


@pytest.mark.parametrize("rolled, deferred", [(0, 0.0), (3, 0.005), (9, 0.0125)])
def test_gross_rises_with_rent_for_fixed_combination(rolled, deferred):
    grosses = [
        evaluate_combination(rolled, deferred, _ctx(property_value=1000000, ltv_cap=750000, monthly_rent=rent)).gross
        for rent in RENTS
    ]
    assert grosses == sorted(grosses)
    assert grosses[-1] == pytest.approx(750000)


@pytest.mark.parametrize("product_group", ["Specialist", "Core"])
def test_optimised_loan_rises_with_rent(product_group):
    results = [
        optimize_column(6, _inputs(property_value=1000000, monthly_rent=rent, product_group=product_group), FIX, LIMITS, 0.75)
        for rent in RENTS
    ]
    nets = [r.net for r in results]
    assert nets == sorted(nets)
    assert results[-1].gross == pytest.approx(750000)
    assert all(r.gross <= results[-1].gross + 1e-6 for r in results)
    if product_group == "Core":
        grosses = [r.gross for r in results]
        assert grosses == sorted(grosses)


@pytest.mark.parametrize(
    "kw",
    [
        {},
        {"property_value": 1000000, "monthly_rent": 1500},
        {"manual_settings": {6: ManualSettings(rolled_months=4, deferred_rate=0.004)}},
        {"loan_type": LoanType.SPECIFIC_NET, "property_value": 500000, "monthly_rent": 2500, "specific_net_loan": 250000},
    ],
)
def test_optimize_column_is_repeatable(kw):
    inputs = _inputs(**kw)
    first = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    second = optimize_column(6, inputs, FIX, LIMITS, 0.75)
    assert first.model_dump() == second.model_dump()


def test_evaluate_combination_is_repeatable():
    ctx = _ctx(property_value=1000000, ltv_cap=750000, monthly_rent=1500)
    assert evaluate_combination(5, 0.0075, ctx) == evaluate_combination(5, 0.0075, ctx)


def test_grid_ties_keep_lowest_rolled_and_deferred():
    # zero pay rate: every rolled-months choice nets the same LTV-bound loan
    ctx = _ctx(display_rate=0.0)
    assert evaluate_combination(0, 0.0, ctx).net == evaluate_combination(9, 0.0, ctx).net
    best = search_grid(ctx, LIMITS.max_rolled_months, LIMITS.max_deferred_fix, presets.DEFERRED_STEP)
    assert best.rolled_months == 0
    assert best.deferred_rate == 0
    assert best.gross == pytest.approx(262500)


def test_grid_ties_with_zero_deferred_cap():
    ctx = _ctx(display_rate=0.0)
    best = search_grid(ctx, LIMITS.max_rolled_months, 0.0, presets.DEFERRED_STEP)
    assert (best.rolled_months, best.deferred_rate) == (0, 0)


def test_context_carries_either_broker_fee():
    hints = get_type_hints(ColumnContext)
    assert set(get_args(hints["broker_fee"])) == {PercentageBrokerFee, FlatBrokerFee, type(None)}
    pct = evaluate_combination(0, 0.0, _ctx(broker_fee=PercentageBrokerFee(pct=1.0)))
    flat = evaluate_combination(0, 0.0, _ctx(broker_fee=FlatBrokerFee(amount=1500)))
    assert pct.broker_fee_value == pytest.approx(2625)
    assert flat.broker_fee_value == 1500
