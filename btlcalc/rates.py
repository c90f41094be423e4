"""Rate selection, maximum LTV policy and fee-column rules."""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

import pandas as pd

from btlcalc import presets
from btlcalc.models import RateTable
from core.config import enum_value

logger = logging.getLogger(__name__)

RATE_FRAME_COLUMNS = [
    "Table",
    "Band",
    "PropertyType",
    "Tier",
    "Product",
    "FeeKey",
    "Rate",
    "IsMargin",
]


def retention_band(retention_ltv) -> Optional[str]:
    """Extract the numeric retention LTV band (``"65"``, ``"75"``) from input
    such as ``"65"`` or ``"65%"``."""
    m = re.search(r"\d+", str(retention_ltv or ""))
    return m.group(0) if m else None


def _is_core_residential(product_group, property_type) -> bool:
    return enum_value(product_group) == "Core" and enum_value(property_type) == "Residential"


def resolve_rates(
    property_type,
    product_group,
    is_retention: bool,
    retention_ltv,
    tier: str,
    product_type: str,
    tables: Optional[Dict] = None,
) -> Optional[RateTable]:
    """Pick the rate table for a product.

    Core products exist only for Residential property and have their own
    standard and retention sheets.  Everything else uses the retention sheet
    for the band when the loan is a retention, otherwise the standard sheet for
    the property category.  ``None`` means no rate is available.
    """

    tables = presets.RATE_TABLES if tables is None else tables
    ptype = enum_value(property_type)
    band = "65" if retention_band(retention_ltv) == "65" else "75"
    if _is_core_residential(product_group, property_type):
        if is_retention:
            source = tables.get("core_retention", {}).get(band, {})
        else:
            source = tables.get("core", {})
    elif is_retention:
        source = tables.get("retention", {}).get(band, {}).get(ptype, {})
    else:
        source = tables.get("standard", {}).get(ptype, {})

    entry = source.get(tier, {}).get(product_type)
    if not entry:
        logger.debug("No rate table for %s / %s / %s", ptype, tier, product_type)
        return None
    return RateTable(
        rates={k: v for k, v in entry.items() if k != "is_margin"},
        is_margin=bool(entry.get("is_margin", False)),
    )


def get_max_ltv(
    property_type,
    is_retention: bool,
    retention_ltv,
    criteria: Optional[Dict[str, str]] = None,
    tier: str = "Tier 1",
    rules=None,
) -> float:
    """Maximum LTV as a decimal; the most restrictive applicable cap wins."""

    if rules is None:
        rules = presets.MAX_LTV_RULES
    elif hasattr(rules, "model_dump"):
        rules = rules.model_dump()
    ptype = enum_value(property_type)
    criteria = criteria or {}

    applicable = [rules["default"].get(ptype, 75)]
    band = retention_band(retention_ltv)
    if is_retention and band:
        ret_ov = rules.get("retention", {}).get(ptype, {}).get(band)
        if ret_ov is not None:
            applicable.append(ret_ov)
    flat_ov = rules.get("flat_above_comm_overrides", {}).get(tier)
    if ptype == "Residential" and criteria.get("flatAboveComm") == "Yes" and flat_ov is not None:
        applicable.append(flat_ov)
    return min(applicable) / 100


def get_fee_columns(
    product_group,
    is_retention: bool,
    retention_ltv,
    property_type,
    fee_columns: Optional[Dict[str, List[float]]] = None,
) -> List[float]:
    """Ordered fee columns shown for a product setup."""

    cols = presets.FEE_COLUMNS if fee_columns is None else fee_columns
    ptype = enum_value(property_type)
    if _is_core_residential(product_group, property_type):
        if is_retention:
            key = "Core_Retention_65" if retention_band(retention_ltv) == "65" else "Core_Retention_75"
            return list(cols[key])
        return list(cols["Core"])
    if is_retention:
        key = "RetentionResidential" if ptype == "Residential" else "RetentionCommercial"
        return list(cols[key])
    return list(cols.get(ptype, [6, 4, 3, 2]))


def product_types_for(property_type, product_types: Optional[Dict[str, List[str]]] = None) -> List[str]:
    lists = presets.PRODUCT_TYPES_LIST if product_types is None else product_types
    return list(lists.get(enum_value(property_type)) or lists["Residential"])


def apply_floor_rate(rate: float, product_group, property_type, floor: float = presets.CORE_FLOOR_RATE) -> float:
    """Raise Core Residential rates to the floor; other products pass through."""
    if _is_core_residential(product_group, property_type):
        return max(rate, floor)
    return rate


# ---------------------------------------------------------------------------
# Rate administration: flatten the nested sheets into an editable table and
# rebuild them afterwards.
# ---------------------------------------------------------------------------


def _iter_sheets(tables: Dict):
    for ptype, tiers in tables.get("standard", {}).items():
        yield "standard", "", ptype, tiers
    for band, by_type in tables.get("retention", {}).items():
        for ptype, tiers in by_type.items():
            yield "retention", str(band), ptype, tiers
    yield "core", "", "Residential", tables.get("core", {})
    for band, tiers in tables.get("core_retention", {}).items():
        yield "core_retention", str(band), "Residential", tiers


def rates_to_frame(tables: Optional[Dict] = None) -> pd.DataFrame:
    tables = presets.RATE_TABLES if tables is None else tables
    rows = []
    for table, band, ptype, tiers in _iter_sheets(tables):
        for tier, products in tiers.items():
            for product, entry in products.items():
                margin = bool(entry.get("is_margin", False))
                for fee_key, rate in entry.items():
                    if fee_key == "is_margin":
                        continue
                    rows.append(
                        {
                            "Table": table,
                            "Band": band,
                            "PropertyType": ptype,
                            "Tier": tier,
                            "Product": product,
                            "FeeKey": float(fee_key),
                            "Rate": float(rate),
                            "IsMargin": margin,
                        }
                    )
    return pd.DataFrame(rows, columns=RATE_FRAME_COLUMNS)


def rates_from_frame(df: pd.DataFrame) -> Dict:
    """Rebuild nested rate sheets from a frame produced by ``rates_to_frame``.

    Rows with a blank rate are dropped so a cleared cell removes that column
    from the product.
    """

    tables: Dict = {"standard": {}, "retention": {}, "core": {}, "core_retention": {}}
    if df is None or df.empty:
        return tables
    for r in df.to_dict("records"):
        if pd.isna(r.get("Rate")):
            continue
        table = r["Table"]
        if table == "standard":
            tiers = tables["standard"].setdefault(r["PropertyType"], {})
        elif table == "retention":
            tiers = tables["retention"].setdefault(str(r["Band"]), {}).setdefault(r["PropertyType"], {})
        elif table == "core":
            tiers = tables["core"]
        elif table == "core_retention":
            tiers = tables["core_retention"].setdefault(str(r["Band"]), {})
        else:
            raise ValueError(f"Unknown rate table {table!r}")
        entry = tiers.setdefault(r["Tier"], {}).setdefault(r["Product"], {})
        entry[float(r["FeeKey"])] = float(r["Rate"])
        if bool(r.get("IsMargin")):
            entry["is_margin"] = True
    return tables
