"""Calculator configuration bundle.

Limits, LTV rules, fee columns and rate tables are passed into the engine
explicitly so tests and alternate rate sheets can swap them without touching
module globals.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from btlcalc import presets
from btlcalc.models import Limits

logger = logging.getLogger(__name__)


def enum_value(v):
    """Return the plain value of an enum member, or ``v`` unchanged."""
    return getattr(v, "value", v)


class MaxLtvRules(BaseModel):
    default: Dict[str, float]
    retention: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    flat_above_comm_overrides: Dict[str, float] = Field(default_factory=dict)


class CalculatorConfig(BaseModel):
    limits: Dict[str, Limits]
    fee_columns: Dict[str, List[float]]
    max_ltv_rules: MaxLtvRules
    rate_tables: Dict[str, Any]
    product_types: Dict[str, List[str]] = Field(
        default_factory=lambda: dict(presets.PRODUCT_TYPES_LIST)
    )
    core_floor_rate: float = Field(default=presets.CORE_FLOOR_RATE, ge=0)
    deferred_step: float = Field(default=presets.DEFERRED_STEP, gt=0)

    def limits_for(self, property_type) -> Limits:
        """Limits for a property type, Residential when it is not configured."""
        key = enum_value(property_type)
        return self.limits.get(key) or self.limits["Residential"]


def default_config() -> CalculatorConfig:
    return CalculatorConfig(
        limits=presets.LOAN_LIMITS,
        fee_columns=presets.FEE_COLUMNS,
        max_ltv_rules=presets.MAX_LTV_RULES,
        rate_tables=presets.RATE_TABLES,
    )


@lru_cache()
def load_config(path: Optional[str] = None) -> CalculatorConfig:
    """Load configuration from a JSON file layered over the defaults.

    Top-level keys present in the file replace the default section wholesale.
    A missing file yields the defaults.
    """
    config = default_config()
    if not path:
        return config
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            overrides = json.load(f)
    except FileNotFoundError:
        logger.info("Config file %s not found, using defaults", p)
        return config
    data = config.model_dump()
    data.update(overrides)
    logger.info("Loaded calculator config from %s (%s)", p, ", ".join(sorted(overrides)))
    return CalculatorConfig.model_validate(data)
