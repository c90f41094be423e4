"""Bridge and Fusion calculator.

Unlike the BTL engine there is no search here: the gross loan comes straight
from the property value and LTV band (or a requested amount), is clamped to
the product's loan limits and priced from a flat rate sheet.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from core.utils import format_currency

logger = logging.getLogger(__name__)


class BridgeProduct(str, Enum):
    FUSION = "Fusion"
    FIXED_BRIDGE = "Fixed Bridge"
    VARIABLE_BRIDGE = "Variable Bridge"


LTV_OPTIONS = [60, 70, 75]

ARRANGEMENT_FEE_PCT = 2.0

BRIDGE_PROPERTY_TYPES = [
    "Resi BTL single unit",
    "Resi Large Loan",
    "Resi Portfolio",
    "Dev Exit",
    "Permitted/Light Dev",
    "Semi & Full Commercial",
    "Semi & Full Commercial Large Loan",
    "2nd charge",
]

FUSION_PROPERTY_TYPES = ["Residential", "Commercial/Semi-Commercial"]

FUSION_TIER_LIMITS = {
    "S": (100000, 3000000),
    "M": (3000001, 10000000),
    "L": (10000001, 1000000000),
}

# monthly rates
FUSION_RATES = {
    "Residential": {
        "S": {60: 0.0084, 70: 0.0094, 75: 0.0099},
        "M": {60: 0.0079, 70: 0.0089, 75: 0.0094},
        "L": {60: 0.0074, 70: 0.0084, 75: 0.0089},
    },
    "Commercial": {
        "S": {60: 0.0099, 70: 0.0109, 75: 0.0114},
        "M": {60: 0.0094, 70: 0.0104, 75: 0.0109},
        "L": {60: 0.0089, 70: 0.0099, 75: 0.0104},
    },
}

_RESI = {60: 0.0074, 70: 0.0084, 75: 0.0089}
_RESI_LARGE = {60: 0.0069, 70: 0.0079, 75: 0.0084}
_LIGHT_DEV = {60: 0.0089, 70: 0.0099, 75: 0.0104}

# monthly rates
VARIABLE_BRIDGE_RATES = {
    "Resi BTL single unit": _RESI,
    "Resi Large Loan": _RESI_LARGE,
    "Resi Portfolio": _RESI_LARGE,
    "Dev Exit": _RESI,
    "Permitted/Light Dev": _LIGHT_DEV,
    "Semi & Full Commercial": _LIGHT_DEV,
    "Semi & Full Commercial Large Loan": {60: 0.0084, 70: 0.0094, 75: 0.0099},
    "2nd charge": {60: 0.0125, 70: 0.0135, 75: 0.0140},
}

_RESI_FIXED = {60: 0.0889, 70: 0.1008, 75: 0.1068}
_RESI_LARGE_FIXED = {60: 0.0828, 70: 0.0948, 75: 0.1008}
_LIGHT_DEV_FIXED = {60: 0.1068, 70: 0.1188, 75: 0.1248}

# annual rates
FIXED_BRIDGE_RATES = {
    "Resi BTL single unit": _RESI_FIXED,
    "Resi Large Loan": _RESI_LARGE_FIXED,
    "Resi Portfolio": _RESI_LARGE_FIXED,
    "Dev Exit": _RESI_FIXED,
    "Permitted/Light Dev": _LIGHT_DEV_FIXED,
    "Semi & Full Commercial": _LIGHT_DEV_FIXED,
    "Semi & Full Commercial Large Loan": {60: 0.1008, 70: 0.1128, 75: 0.1188},
    "2nd charge": {60: 0.1500, 70: 0.1620, 75: 0.1680},
}

BRIDGE_LOAN_LIMITS = {
    "Resi BTL single unit": (100000, 4000000),
    "Resi Large Loan": (4000001, 20000000),
    "Resi Portfolio": (100000, 50000000),
    "Dev Exit": (100000, 30000000),
    "Permitted/Light Dev": (100000, 20000000),
    "Semi & Full Commercial": (100000, 3000000),
    "Semi & Full Commercial Large Loan": (3000001, 15000000),
    "2nd charge": (100000, 4000000),
}
DEFAULT_BRIDGE_LIMITS = (100000, 4000000)


class BridgeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: BridgeProduct
    property_type: str
    property_value: float
    requested_ltv: int
    actual_ltv: float
    gross: float
    net: float
    arrangement_fee: float
    rate: float
    rate_display: str
    is_rate_overridden: bool
    monthly_payment: float
    annual_payment: float
    loan_limits: Tuple[float, float]
    tier: Optional[str] = None


def fusion_tier(loan_amount: float) -> str:
    if loan_amount <= FUSION_TIER_LIMITS["S"][1]:
        return "S"
    if loan_amount <= FUSION_TIER_LIMITS["M"][1]:
        return "M"
    return "L"


def fusion_category(property_type: str) -> str:
    return "Residential" if property_type == "Residential" else "Commercial"


def loan_limits(product, property_type: str) -> Tuple[float, float]:
    if BridgeProduct(product) == BridgeProduct.FUSION:
        return FUSION_TIER_LIMITS["S"][0], FUSION_TIER_LIMITS["L"][1]
    return BRIDGE_LOAN_LIMITS.get(property_type, DEFAULT_BRIDGE_LIMITS)


def lookup_rate(product, property_type: str, ltv: int, tier: Optional[str] = None) -> Optional[float]:
    product = BridgeProduct(product)
    if product == BridgeProduct.FUSION:
        return FUSION_RATES[fusion_category(property_type)].get(tier or "S", {}).get(ltv)
    sheet = FIXED_BRIDGE_RATES if product == BridgeProduct.FIXED_BRIDGE else VARIABLE_BRIDGE_RATES
    return sheet.get(property_type, {}).get(ltv)


def _clamp(value: float, limits: Tuple[float, float]) -> float:
    low, high = limits
    return max(min(value, high), low)


def calculate(
    product,
    property_value: float,
    ltv: int,
    property_type: str,
    specific_gross_loan: Optional[float] = None,
    rate_override: Optional[float] = None,
) -> Optional[BridgeResult]:
    """Price one bridge or Fusion loan.

    Returns ``None`` when no rate exists for the property type and LTV band
    and no override was given.  Fixed bridge rates are annual; variable bridge
    and Fusion rates are monthly.
    """

    product = BridgeProduct(product)
    if specific_gross_loan is not None and specific_gross_loan > 0:
        gross = float(specific_gross_loan)
    else:
        gross = property_value * ltv / 100

    tier = None
    if product == BridgeProduct.FUSION:
        tier = fusion_tier(gross)
        limits = FUSION_TIER_LIMITS[tier]
    else:
        limits = loan_limits(product, property_type)
    gross = _clamp(gross, limits)

    rate = rate_override if rate_override is not None else lookup_rate(product, property_type, ltv, tier)
    if rate is None:
        logger.debug("No %s rate for %s at %s%% LTV", product.value, property_type, ltv)
        return None

    arrangement_fee = gross * ARRANGEMENT_FEE_PCT / 100
    if product == BridgeProduct.FIXED_BRIDGE:
        annual_payment = gross * rate
        monthly_payment = annual_payment / 12
        rate_display = f"{rate * 100:.2f}% annual"
    else:
        monthly_payment = gross * rate
        annual_payment = monthly_payment * 12
        rate_display = f"{rate * 100:.2f}% monthly"

    return BridgeResult(
        product=product,
        property_type=property_type,
        property_value=property_value,
        requested_ltv=ltv,
        actual_ltv=gross / property_value * 100 if property_value else 0.0,
        gross=gross,
        net=gross - arrangement_fee,
        arrangement_fee=arrangement_fee,
        rate=rate,
        rate_display=rate_display,
        is_rate_overridden=rate_override is not None,
        monthly_payment=monthly_payment,
        annual_payment=annual_payment,
        loan_limits=limits,
        tier=f"Fusion {tier}" if tier else None,
    )


def calculate_all_ltv(product, property_value: float, property_type: str, ltv_options=None) -> List[BridgeResult]:
    """One result per LTV band, skipping bands without a rate."""
    results = []
    for ltv in ltv_options or LTV_OPTIONS:
        res = calculate(product, property_value, ltv, property_type)
        if res is not None:
            results.append(res)
    return results


def best_option(results: List[BridgeResult]) -> Optional[BridgeResult]:
    best = None
    for r in results:
        if best is None or r.net > best.net:
            best = r
    return best


def validate_inputs(
    property_value: Optional[float],
    ltv: Optional[int],
    property_type: Optional[str],
    specific_gross_loan: Optional[float] = None,
) -> List[str]:
    """Return validation messages; an empty list means the inputs are usable."""

    errors = []
    if not property_value or property_value <= 0:
        errors.append("Property value must be greater than zero")
    if ltv not in LTV_OPTIONS:
        errors.append("LTV must be 60%, 70%, or 75%")
    if not property_type:
        errors.append("Property type is required")
    if specific_gross_loan is not None:
        if specific_gross_loan <= 0:
            errors.append("Specific gross loan must be greater than zero")
        if property_value and specific_gross_loan > property_value:
            errors.append("Gross loan cannot exceed property value")
    return errors


def bridge_frame_rows(results: List[BridgeResult]) -> Dict[str, Dict[str, str]]:
    """Matrix rows keyed by LTV label, ready for ``pandas.DataFrame``."""
    data = {}
    for r in results:
        data[f"{r.requested_ltv}% LTV"] = {
            "Rate": r.rate_display,
            "Gross loan": format_currency(r.gross),
            "Arrangement fee": format_currency(r.arrangement_fee),
            "Net loan": format_currency(r.net),
            "Monthly payment": format_currency(r.monthly_payment),
            "Annual payment": format_currency(r.annual_payment),
            "Actual LTV": f"{r.actual_ltv:.2f}%",
        }
    return data
