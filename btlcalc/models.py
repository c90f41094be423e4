from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PropertyType(str, Enum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"
    SEMI_COMMERCIAL = "Semi-Commercial"


class ProductGroup(str, Enum):
    SPECIALIST = "Specialist"
    CORE = "Core"


class LoanType(str, Enum):
    MAX_OPTIMUM_GROSS = "Max Optimum Gross Loan"
    SPECIFIC_NET = "Specific Net Loan"
    MAX_LTV = "Maximum LTV Loan"
    SPECIFIC_GROSS = "Specific Gross Loan"


class RateTable(BaseModel):
    """Fee column -> annual rate for one product.

    When ``is_margin`` is set the stored values are margins over the base bank
    rate (tracker products) rather than all-in fixed rates.
    """

    model_config = ConfigDict(frozen=True)

    rates: Dict[float, float] = Field(default_factory=dict)
    is_margin: bool = False

    def rate_for(self, col_key: float) -> Optional[float]:
        return self.rates.get(float(col_key))


class Limits(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_rolled_months: int = Field(ge=0)
    max_deferred_fix: float = Field(ge=0)
    max_deferred_tracker: float = Field(ge=0)
    min_icr_fix: float = Field(ge=0)
    min_icr_trk: float = Field(ge=0)
    total_term: int = Field(ge=0)
    min_loan: float = Field(ge=0)
    max_loan: float = Field(ge=0)
    standard_bbr: float = Field(ge=0)
    stress_bbr: float = Field(ge=0)
    current_mvr: float = Field(ge=0)
    term_months: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _loan_bounds(self):
        if self.min_loan > self.max_loan:
            raise ValueError("min_loan must not exceed max_loan")
        return self

    def term_for(self, product_type: str) -> int:
        return self.term_months.get(product_type, 24)

    def max_deferred_for(self, is_margin: bool) -> float:
        return self.max_deferred_tracker if is_margin else self.max_deferred_fix

    def min_icr_for(self, product_type: str) -> float:
        return self.min_icr_fix if "Fix" in product_type else self.min_icr_trk


class PercentageBrokerFee(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["percentage"] = "percentage"
    pct: float = Field(ge=0)

    def value_for(self, gross: float) -> float:
        return gross * self.pct / 100


class FlatBrokerFee(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["flat"] = "flat"
    amount: float = Field(ge=0)

    def value_for(self, gross: float) -> float:
        return self.amount


BrokerFee = Annotated[
    Union[PercentageBrokerFee, FlatBrokerFee], Field(discriminator="kind")
]


class ManualSettings(BaseModel):
    """User-pinned rolled months / deferred rate for one fee column."""

    rolled_months: Optional[int] = None
    deferred_rate: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.rolled_months is not None or self.deferred_rate is not None


class LoanInputs(BaseModel):
    property_value: Optional[float] = None
    monthly_rent: Optional[float] = None
    loan_type: LoanType = LoanType.MAX_OPTIMUM_GROSS
    specific_net_loan: Optional[float] = None
    specific_gross_loan: Optional[float] = None
    specific_ltv: Optional[float] = None
    product_type: str = "2yr Fix"
    tier: str = "Tier 1"
    property_type: PropertyType = PropertyType.RESIDENTIAL
    product_group: ProductGroup = ProductGroup.SPECIALIST
    is_retention: bool = False
    retention_ltv: str = "75"
    criteria: Dict[str, str] = Field(default_factory=dict)
    # fee overrides are percentages (e.g. 4.5), rate overrides decimals
    fee_overrides: Dict[float, float] = Field(default_factory=dict)
    rate_overrides: Dict[float, float] = Field(default_factory=dict)
    manual_settings: Dict[float, ManualSettings] = Field(default_factory=dict)
    proc_fee_pct: float = 1.0
    broker_fee: Optional[BrokerFee] = None

    @property
    def is_core_residential(self) -> bool:
        return (
            self.product_group == ProductGroup.CORE
            and self.property_type == PropertyType.RESIDENTIAL
        )


class ColumnResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    col_key: float
    product_name: str
    product_type: str
    full_rate_text: str
    actual_rate_used: float
    is_rate_overridden: bool
    pay_rate_text: str
    net: float
    gross: float
    fee_amount: float
    rolled: float
    deferred: float
    ltv: Optional[float] = None
    net_ltv: Optional[float] = None
    deferred_rate: float
    rolled_months: int
    term_months: int
    direct_debit: float
    dd_start_month: int
    proc_fee_value: float
    broker_fee_value: float
    max_ltv_rule: float
    below_min: bool
    hit_max_cap: bool
    is_manual: bool
    icr: Optional[float] = None


class BestSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    col_key: float
    gross: float
    gross_str: str
    gross_ltv_pct: int
    net: float
    net_str: str
    net_ltv_pct: int
