from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

from btlcalc.models import (
    BestSummary,
    BrokerFee,
    ColumnResult,
    Limits,
    LoanInputs,
    LoanType,
    ProductGroup,
    PropertyType,
    RateTable,
)
from btlcalc.rates import apply_floor_rate, get_fee_columns, get_max_ltv, resolve_rates
from core.config import CalculatorConfig, default_config
from core.utils import format_currency, nz

logger = logging.getLogger(__name__)

EPSILON = 1e-6
STRESS_RATE_FLOOR = 1e-6
DENOMINATOR_FLOOR = 1e-7

MODE_CORE = "core"
MODE_MANUAL = "manual"
MODE_OPTIMISE = "optimise"


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves going up (spreadsheet style)."""
    return int(math.floor(x + 0.5))


@dataclass(frozen=True)
class ColumnContext:
    """Everything the evaluator needs for one fee column, resolved up front."""

    term_months: int
    fee_pct: float
    min_icr: float
    ltv_cap: float
    loan_type: LoanType
    display_rate: float
    stress_rate: float
    min_loan: float
    max_loan: float
    property_value: Optional[float] = None
    monthly_rent: Optional[float] = None
    specific_net_loan: Optional[float] = None
    proc_fee_pct: float = 0.0
    broker_fee: Optional[BrokerFee] = None


@dataclass(frozen=True)
class Combination:
    rolled_months: int
    deferred_rate: float
    gross: float
    net: float
    fee_amount: float
    rolled: float
    deferred: float
    ltv: Optional[float]
    pay_rate: float
    proc_fee_value: float
    broker_fee_value: float
    icr: Optional[float]


def fee_pct_for(col_key: float, fee_overrides=None) -> float:
    """Product fee for a column as a decimal, honouring a percentage override."""
    overrides = fee_overrides or {}
    return nz(overrides.get(float(col_key), col_key)) / 100


def evaluate_combination(rolled_months: int, deferred_rate: float, ctx: ColumnContext) -> Combination:
    """Size the loan for one rolled-months / deferred-rate pair.

    The gross loan is the smallest of the LTV cap, the rent-derived ICR cap,
    the product maximum and, for specific net loans, the gross needed to
    advance that net amount.  Anything under the minimum loan snaps to zero.
    """

    remaining_months = max(ctx.term_months - rolled_months, 1)
    stress_adjusted = max(ctx.stress_rate - deferred_rate, STRESS_RATE_FLOOR)
    pay_rate = max(ctx.display_rate - deferred_rate, 0.0)

    max_from_rent = math.inf
    if ctx.monthly_rent and ctx.min_icr > 0:
        rent_over_term = ctx.monthly_rent * ctx.term_months
        max_from_rent = rent_over_term / (ctx.min_icr * (stress_adjusted / 12) * remaining_months)

    gross_from_net = math.inf
    if ctx.loan_type == LoanType.SPECIFIC_NET and ctx.specific_net_loan is not None and ctx.fee_pct < 1:
        # linear in the rates, not an amortisation
        denominator = (
            1
            - ctx.fee_pct
            - (pay_rate / 12) * rolled_months
            - (deferred_rate / 12) * ctx.term_months
        )
        if denominator > DENOMINATOR_FLOOR:
            gross_from_net = ctx.specific_net_loan / denominator

    gross = min(ctx.ltv_cap, max_from_rent, ctx.max_loan)
    if ctx.loan_type == LoanType.SPECIFIC_NET:
        gross = min(gross, gross_from_net)
    if gross < ctx.min_loan - EPSILON:
        gross = 0.0

    fee_amount = gross * ctx.fee_pct
    rolled = gross * (pay_rate / 12) * rolled_months
    deferred = gross * (deferred_rate / 12) * ctx.term_months
    net = gross - fee_amount - rolled - deferred
    ltv = gross / ctx.property_value if ctx.property_value else None

    proc_fee_value = gross * ctx.proc_fee_pct / 100
    broker_fee_value = ctx.broker_fee.value_for(gross) if ctx.broker_fee is not None else 0.0

    icr = None
    if ctx.monthly_rent and gross > 0 and pay_rate > 0:
        interest_paid = gross * (pay_rate / 12) * remaining_months
        icr = (ctx.monthly_rent * 12) / (interest_paid / ctx.term_months * 12)

    return Combination(
        rolled_months=rolled_months,
        deferred_rate=deferred_rate,
        gross=gross,
        net=net,
        fee_amount=fee_amount,
        rolled=rolled,
        deferred=deferred,
        ltv=ltv,
        pay_rate=pay_rate,
        proc_fee_value=proc_fee_value,
        broker_fee_value=broker_fee_value,
        icr=icr,
    )


def mode_for(inputs: LoanInputs, col_key: float) -> str:
    """Which sizing mode a column runs in: Core, manual or optimise."""
    if inputs.is_core_residential:
        return MODE_CORE
    manual = inputs.manual_settings.get(float(col_key))
    if manual is not None and manual.is_set:
        return MODE_MANUAL
    return MODE_OPTIMISE


def _ltv_cap(inputs: LoanInputs, max_ltv: float) -> float:
    pv = inputs.property_value or None
    cap = round_half_up(max_ltv * pv) if pv else math.inf
    if inputs.loan_type == LoanType.MAX_LTV and inputs.specific_ltv is not None and pv:
        cap = min(cap, pv * inputs.specific_ltv)
    if inputs.loan_type == LoanType.SPECIFIC_GROSS and inputs.specific_gross_loan:
        if inputs.specific_gross_loan > 0:
            cap = min(cap, inputs.specific_gross_loan)
    return cap


def search_grid(ctx: ColumnContext, max_rolled_months: int, max_deferred: float, step: float) -> Combination:
    """Exhaustive search for the highest net loan.

    Rolled months ascend in the outer loop and deferred rate in the inner loop;
    only a strictly greater net replaces the incumbent, so ties keep the lowest
    rolled months and then the lowest deferred rate.
    """

    max_rolled = min(max_rolled_months, ctx.term_months)
    steps = int(round(max_deferred / step))
    best = None
    for rolled_months in range(max_rolled + 1):
        for i in range(steps + 1):
            candidate = evaluate_combination(rolled_months, i * step, ctx)
            if best is None or candidate.net > best.net:
                best = candidate
    return best


def optimize_column(
    col_key: float,
    inputs: LoanInputs,
    rate_table: Optional[RateTable],
    limits: Limits,
    max_ltv: float,
    config: Optional[CalculatorConfig] = None,
) -> Optional[ColumnResult]:
    """Size one fee column.  ``None`` when the column has no rate at all."""

    config = config or default_config()
    base_rate = rate_table.rate_for(col_key) if rate_table is not None else None
    overridden_rate = inputs.rate_overrides.get(float(col_key))
    if base_rate is None and overridden_rate is None:
        logger.debug("No rate for fee column %s, skipping", col_key)
        return None

    is_tracker = bool(rate_table.is_margin) if rate_table is not None else False
    term_months = limits.term_for(inputs.product_type)
    max_deferred = limits.max_deferred_for(is_tracker)

    actual_rate = overridden_rate if overridden_rate is not None else base_rate
    display_rate = actual_rate + limits.standard_bbr if is_tracker else actual_rate
    stress_rate = actual_rate + limits.stress_bbr if is_tracker else display_rate

    # Core floor only feeds the sizing, never the displayed full rate
    display_for_gross = apply_floor_rate(
        display_rate, inputs.product_group, inputs.property_type, config.core_floor_rate
    )
    stress_for_gross = apply_floor_rate(
        stress_rate, inputs.product_group, inputs.property_type, config.core_floor_rate
    )

    pv = inputs.property_value or None
    ctx = ColumnContext(
        term_months=term_months,
        fee_pct=fee_pct_for(col_key, inputs.fee_overrides),
        min_icr=limits.min_icr_for(inputs.product_type),
        ltv_cap=_ltv_cap(inputs, max_ltv),
        loan_type=inputs.loan_type,
        display_rate=display_for_gross,
        stress_rate=stress_for_gross,
        min_loan=limits.min_loan,
        max_loan=limits.max_loan,
        property_value=pv,
        monthly_rent=inputs.monthly_rent or None,
        specific_net_loan=inputs.specific_net_loan,
        proc_fee_pct=nz(inputs.proc_fee_pct),
        broker_fee=inputs.broker_fee,
    )

    mode = mode_for(inputs, col_key)
    if mode == MODE_CORE:
        best = evaluate_combination(0, 0.0, ctx)
    elif mode == MODE_MANUAL:
        manual = inputs.manual_settings[float(col_key)]
        rolled = manual.rolled_months if manual.rolled_months is not None else 0
        deferred = nz(manual.deferred_rate)
        safe_rolled = max(0, min(int(rolled), limits.max_rolled_months))
        safe_deferred = max(0.0, min(deferred, max_deferred))
        best = evaluate_combination(safe_rolled, safe_deferred, ctx)
        if not math.isfinite(best.gross):
            logger.debug("Manual settings for column %s gave no valid loan, using 0/0", col_key)
            best = evaluate_combination(0, 0.0, ctx)
    else:
        best = search_grid(ctx, limits.max_rolled_months, max_deferred, config.deferred_step)

    logger.debug(
        "Column %s (%s): rolled=%s deferred=%.4f gross=%.2f net=%.2f",
        col_key,
        mode,
        best.rolled_months,
        best.deferred_rate,
        best.gross,
        best.net,
    )

    if is_tracker:
        full_rate_text = f"{(actual_rate + limits.standard_bbr) * 100:.2f}%"
        pay_rate_text = f"{best.pay_rate * 100:.2f}% + BBR"
    else:
        full_rate_text = f"{display_rate * 100:.2f}%"
        pay_rate_text = f"{best.pay_rate * 100:.2f}%"

    return ColumnResult(
        col_key=float(col_key),
        product_name=f"{inputs.product_type}, {inputs.tier}",
        product_type=inputs.product_type,
        full_rate_text=full_rate_text,
        actual_rate_used=actual_rate if is_tracker else display_rate,
        is_rate_overridden=overridden_rate is not None,
        pay_rate_text=pay_rate_text,
        net=best.net,
        gross=best.gross,
        fee_amount=best.fee_amount,
        rolled=best.rolled,
        deferred=best.deferred,
        ltv=best.ltv,
        net_ltv=best.net / pv if pv else None,
        deferred_rate=best.deferred_rate,
        rolled_months=best.rolled_months,
        term_months=term_months,
        direct_debit=best.gross * (best.pay_rate / 12),
        dd_start_month=best.rolled_months + 1,
        proc_fee_value=best.proc_fee_value,
        broker_fee_value=best.broker_fee_value,
        max_ltv_rule=max_ltv,
        below_min=0 < best.gross < limits.min_loan - EPSILON,
        hit_max_cap=abs(best.gross - limits.max_loan) < EPSILON,
        is_manual=mode == MODE_MANUAL,
        icr=best.icr,
    )


def compute_all_columns(
    columns: Iterable[float],
    inputs: LoanInputs,
    rate_table: Optional[RateTable],
    limits: Limits,
    max_ltv: float,
    config: Optional[CalculatorConfig] = None,
) -> List[ColumnResult]:
    """Size every fee column, dropping those without a rate."""

    config = config or default_config()
    results = []
    for col_key in columns:
        res = optimize_column(col_key, inputs, rate_table, limits, max_ltv, config)
        if res is not None:
            results.append(res)
    return results


def compute_best_summary(results: List[ColumnResult], property_value=None) -> Optional[BestSummary]:
    """The column advancing the highest net loan; the first one wins ties."""

    if not results:
        return None
    best = None
    for r in results:
        if best is None or r.net > best.net:
            best = r
    pv = nz(property_value)
    return BestSummary(
        col_key=best.col_key,
        gross=best.gross,
        gross_str=format_currency(best.gross),
        gross_ltv_pct=round_half_up(best.gross / pv * 100) if pv else 0,
        net=best.net,
        net_str=format_currency(best.net),
        net_ltv_pct=round_half_up(best.net / pv * 100) if pv else 0,
    )


def can_calculate(inputs: LoanInputs) -> bool:
    """Whether enough has been entered to show a quote matrix."""

    if not inputs.monthly_rent:
        return False
    if inputs.loan_type == LoanType.SPECIFIC_NET:
        return bool(inputs.specific_net_loan) and bool(inputs.property_value)
    if inputs.loan_type == LoanType.SPECIFIC_GROSS:
        return bool(inputs.property_value) and bool(inputs.specific_gross_loan)
    return bool(inputs.property_value)


@dataclass(frozen=True)
class Quote:
    columns: List[float]
    results: List[ColumnResult]
    best: Optional[BestSummary]
    max_ltv: float
    limits: Limits
    rate_table: Optional[RateTable] = None


def quote(inputs: LoanInputs, config: Optional[CalculatorConfig] = None) -> Quote:
    """Resolve rates, LTV and fee columns for ``inputs`` and size every column.

    Columns are only sized once ``can_calculate`` passes; before that the
    quote carries the setup (columns, max LTV, limits) with no results.
    """

    config = config or default_config()
    if inputs.product_group == ProductGroup.CORE and inputs.property_type != PropertyType.RESIDENTIAL:
        raise ValueError("Core products are only available for Residential property")

    limits = config.limits_for(inputs.property_type)
    rate_table = resolve_rates(
        inputs.property_type,
        inputs.product_group,
        inputs.is_retention,
        inputs.retention_ltv,
        inputs.tier,
        inputs.product_type,
        tables=config.rate_tables,
    )
    max_ltv = get_max_ltv(
        inputs.property_type,
        inputs.is_retention,
        inputs.retention_ltv,
        inputs.criteria,
        inputs.tier,
        rules=config.max_ltv_rules,
    )
    columns = get_fee_columns(
        inputs.product_group,
        inputs.is_retention,
        inputs.retention_ltv,
        inputs.property_type,
        fee_columns=config.fee_columns,
    )
    results = []
    if can_calculate(inputs):
        results = compute_all_columns(columns, inputs, rate_table, limits, max_ltv, config)
    return Quote(
        columns=columns,
        results=results,
        best=compute_best_summary(results, inputs.property_value),
        max_ltv=max_ltv,
        limits=limits,
        rate_table=rate_table,
    )


def column_label(col_key: float) -> str:
    return f"{float(col_key):g}%"


def results_frame(results: List[ColumnResult]) -> pd.DataFrame:
    """Quote matrix: one column per fee column, one row per metric."""

    if not results:
        return pd.DataFrame()
    data = {}
    for r in results:
        data[column_label(r.col_key)] = {
            "Product": r.product_name,
            "Full rate": r.full_rate_text,
            "Pay rate": r.pay_rate_text,
            "Gross loan": format_currency(r.gross),
            "Net loan": format_currency(r.net),
            "LTV": f"{r.ltv * 100:.2f}%" if r.ltv is not None else "—",
            "Net LTV": f"{r.net_ltv * 100:.2f}%" if r.net_ltv is not None else "—",
            "Product fee": format_currency(r.fee_amount),
            "Rolled months": r.rolled_months,
            "Rolled interest": format_currency(r.rolled),
            "Deferred rate": f"{r.deferred_rate * 100:.2f}%",
            "Deferred interest": format_currency(r.deferred),
            "Direct debit": format_currency(r.direct_debit),
            "DD start month": r.dd_start_month,
            "Proc fee": format_currency(r.proc_fee_value),
            "Broker fee": format_currency(r.broker_fee_value),
            "ICR": f"{r.icr:.2f}" if r.icr is not None else "—",
        }
    return pd.DataFrame(data)
