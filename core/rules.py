from __future__ import annotations
from typing import Literal, List, Dict, Any
from pydantic import BaseModel, Field

from core.utils import format_currency, parse_number

PROPERTY_VALUE_RANGE = (50000, 10000000)
RENT_RANGE = (100, 50000)
BROKER_FEE_PCT_RANGE = (0, 10)
BROKER_FEE_FLAT_RANGE = (0, 50000)


class RuleResult(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def _out_of_range(value, bounds) -> bool:
    v = parse_number(value)
    return v is not None and not (bounds[0] <= v <= bounds[1])


def evaluate_rules(state: dict) -> List[RuleResult]:
    """Input range checks plus warnings about the sized columns.

    ``state`` is a flat dict: raw inputs (``property_value``, ``monthly_rent``,
    ``loan_type``, ``specific_net_loan``, ``specific_gross_loan``,
    ``broker_fee_pct``, ``broker_fee_flat``), limits (``min_loan``,
    ``max_loan``), ``core_requested`` / ``core_eligible`` flags, whether a
    quote ``can_calculate`` and the list of ``results``.
    """
    res: List[RuleResult] = []

    if _out_of_range(state.get("property_value"), PROPERTY_VALUE_RANGE):
        res.append(
            RuleResult(
                code="PROPERTY_VALUE_RANGE",
                severity="warn",
                message="Property value should be between £50,000 and £10,000,000.",
                context={"value": parse_number(state.get("property_value"))},
            )
        )

    if _out_of_range(state.get("monthly_rent"), RENT_RANGE):
        res.append(
            RuleResult(
                code="RENT_RANGE",
                severity="warn",
                message="Monthly rent should be between £100 and £50,000.",
                context={"value": parse_number(state.get("monthly_rent"))},
            )
        )

    loan_bounds = (float(state.get("min_loan", 150000)), float(state.get("max_loan", 3000000)))
    for key, label in (("specific_net_loan", "Specific net loan"), ("specific_gross_loan", "Specific gross loan")):
        if _out_of_range(state.get(key), loan_bounds):
            res.append(
                RuleResult(
                    code="LOAN_AMOUNT_RANGE",
                    severity="warn",
                    message=(
                        f"{label} should be between {format_currency(loan_bounds[0])}"
                        f" and {format_currency(loan_bounds[1])}."
                    ),
                    context={"field": key, "value": parse_number(state.get(key))},
                )
            )

    if _out_of_range(state.get("broker_fee_pct"), BROKER_FEE_PCT_RANGE):
        res.append(
            RuleResult(
                code="BROKER_FEE_PCT_RANGE",
                severity="critical",
                message="Broker fee percentage must be between 0% and 10%.",
            )
        )
    if _out_of_range(state.get("broker_fee_flat"), BROKER_FEE_FLAT_RANGE):
        res.append(
            RuleResult(
                code="BROKER_FEE_FLAT_RANGE",
                severity="critical",
                message="Broker flat fee must be between £0 and £50,000.",
            )
        )

    if state.get("core_requested", False) and not state.get("core_eligible", True):
        res.append(
            RuleResult(
                code="CORE_NOT_ELIGIBLE",
                severity="warn",
                message="Criteria answers fall outside the Core range; Specialist rates apply.",
            )
        )

    results = state.get("results") or []
    if state.get("can_calculate", False) and not any(r.gross > 0 for r in results):
        res.append(
            RuleResult(
                code="NO_APPLICABLE_PRODUCT",
                severity="critical",
                message="No product can lend at least the minimum loan for these inputs.",
            )
        )

    for r in results:
        if r.below_min:
            res.append(
                RuleResult(
                    code="BELOW_MIN_LOAN",
                    severity="warn",
                    message=f"{r.col_key:g}% fee column is below the minimum loan.",
                    context={"col_key": r.col_key, "gross": r.gross},
                )
            )
        if r.hit_max_cap:
            res.append(
                RuleResult(
                    code="MAX_LOAN_CAP",
                    severity="info",
                    message=f"{r.col_key:g}% fee column is capped at the maximum loan.",
                    context={"col_key": r.col_key},
                )
            )
        if r.is_rate_overridden:
            res.append(
                RuleResult(
                    code="RATE_OVERRIDDEN",
                    severity="info",
                    message=f"{r.col_key:g}% fee column uses a manually entered rate.",
                    context={"col_key": r.col_key, "rate": r.actual_rate_used},
                )
            )

    target_net = parse_number(state.get("specific_net_loan"))
    if state.get("loan_type") == "Specific Net Loan" and target_net and results:
        best_net = max(r.net for r in results)
        if best_net < target_net - 1:
            res.append(
                RuleResult(
                    code="SPECIFIC_NET_UNREACHABLE",
                    severity="warn",
                    message="The requested net loan cannot be reached; showing the largest available.",
                    context={"requested": target_net, "best": best_net},
                )
            )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)
