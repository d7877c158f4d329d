"""
types.py — Shared Data Layer for Modeling Modules

Purpose:
- Define the financial model inputs (pydantic models: they arrive as JSON
  through the API and are deep-copied when a scenario perturbs them)
- Define the output dataclasses produced by the projection, WACC and
  scenario modules

Units:
- RiskProfile fields are decimal fractions (0.05 = 5%)
- Every other rate in a FinancialModel is in percentage points (10 = 10%)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


InputMethod = Literal[
    "direct",
    "growth",
    "percentOfRevenue",
    "percentOfEBIT",
    "grossMargin",
    "revenueMargin",
]
RateMethod = Literal["uniform", "individual"]


# ============================================================================
# Input Models
# ============================================================================


class RiskProfile(BaseModel):
    """
    Inputs for the cost of capital.

    Example:
        RiskProfile(
            risk_free_rate=0.04, levered_beta=1.2,
            equity_risk_premium=0.05, country_risk_premium=0.02,
            adjusted_default_spread=0.015, company_spread=0.01,
            de_ratio=0.5, corporate_tax_rate=0.3,
        )
    """
    risk_free_rate: float
    levered_beta: float
    equity_risk_premium: float
    country_risk_premium: float = 0.0
    adjusted_default_spread: float = 0.0
    company_spread: float = 0.0
    de_ratio: float = Field(0.0, ge=0)
    corporate_tax_rate: float = 0.0
    # Added directly to the final WACC
    wacc_premium: Optional[float] = None

    # Informational, not used by the formulas
    selected_industry: Optional[str] = None
    selected_country: Optional[str] = None
    unlevered_beta: Optional[float] = None


class ModelPeriods(BaseModel):
    start_year: int = 2025
    number_of_years: int = Field(5, ge=0)
    period_labels: List[str] = Field(default_factory=list)


class LineItemAssumptions(BaseModel):
    """
    How one projected line (revenue, cogs, opex, D&A, ...) is derived.

    Only the fields relevant to `input_method` are read; the rest are kept
    so a model round-trips unchanged when the method is switched back.
    """
    input_method: InputMethod = "direct"

    # growth
    base_value: Optional[float] = None
    growth_method: RateMethod = "uniform"
    growth_rate: Optional[float] = None
    individual_growth_rates: Dict[int, float] = Field(default_factory=dict)

    # percentOfRevenue / percentOfEBIT / revenueMargin
    percent_method: RateMethod = "uniform"
    percent_of_revenue: Optional[float] = None
    percent_of_ebit: Optional[float] = None
    individual_percents: Dict[int, float] = Field(default_factory=dict)

    # cogs only
    gross_margin_percent: Optional[float] = None
    revenue_margin_percent: Optional[float] = None

    # direct
    yearly_values: List[float] = Field(default_factory=list)

    # period index -> value that replaces the computed one
    manual_overrides: Dict[int, float] = Field(default_factory=dict)


class TerminalValueAssumptions(BaseModel):
    method: Literal["growth", "multiples"] = "growth"
    growth_rate: Optional[float] = None
    multiple_metric: Literal["ebitda", "revenue", "ebit", "netIncome"] = "ebitda"
    multiple_value: Optional[float] = None


class EquityValueAssumptions(BaseModel):
    cash: float = 0.0
    total_debt: float = 0.0
    minority_interest: float = 0.0
    investments_in_subsidiaries: float = 0.0
    other_adjustments: float = 0.0


def _line(method: str = "direct", **kwargs: Any) -> Any:
    return Field(default_factory=lambda: LineItemAssumptions(input_method=method, **kwargs))


class FinancialModel(BaseModel):
    """Complete set of projection assumptions for one valuation."""
    periods: ModelPeriods = Field(default_factory=ModelPeriods)
    risk_profile: Optional[RiskProfile] = None
    # Percentage points; used only when there is no risk profile
    discount_rate: Optional[float] = None
    revenue: LineItemAssumptions = _line("growth")
    cogs: LineItemAssumptions = _line("revenueMargin")
    opex: LineItemAssumptions = _line("percentOfRevenue")
    other_income: LineItemAssumptions = _line("percentOfRevenue")
    other_expenses: LineItemAssumptions = _line("percentOfRevenue")
    da: LineItemAssumptions = _line("percentOfRevenue")
    taxes: LineItemAssumptions = _line("percentOfEBIT")
    capex: LineItemAssumptions = _line("percentOfRevenue")
    net_working_capital: LineItemAssumptions = _line("percentOfRevenue")
    terminal_value: TerminalValueAssumptions = Field(default_factory=TerminalValueAssumptions)
    equity_value: EquityValueAssumptions = Field(default_factory=EquityValueAssumptions)


# ============================================================================
# Output Dataclasses for Modeling Modules
# ============================================================================


@dataclass
class WaccComponents:
    """WACC breakdown for reports. All values are decimal fractions."""
    cost_of_equity: float
    cost_of_debt: float
    equity_weight: float
    debt_weight: float
    wacc: float


@dataclass
class CalculatedFinancials:
    """Projection + DCF output. Margins are percentages."""
    revenue: List[float] = field(default_factory=list)
    cogs: List[float] = field(default_factory=list)
    gross_profit: List[float] = field(default_factory=list)
    gross_margin: List[float] = field(default_factory=list)
    opex: List[float] = field(default_factory=list)
    ebitda: List[float] = field(default_factory=list)
    ebitda_margin: List[float] = field(default_factory=list)
    other_income: List[float] = field(default_factory=list)
    other_expenses: List[float] = field(default_factory=list)
    da: List[float] = field(default_factory=list)
    ebit: List[float] = field(default_factory=list)
    ebit_margin: List[float] = field(default_factory=list)
    taxes: List[float] = field(default_factory=list)
    net_income: List[float] = field(default_factory=list)
    net_income_margin: List[float] = field(default_factory=list)
    capex: List[float] = field(default_factory=list)
    net_working_capital: List[float] = field(default_factory=list)
    change_in_nwc: List[float] = field(default_factory=list)
    free_cash_flow: List[float] = field(default_factory=list)
    discounted_cash_flows: List[float] = field(default_factory=list)
    terminal_value: float = 0.0
    present_value_terminal_value: float = 0.0
    discount_rate: float = 0.0
    enterprise_value: float = 0.0
    equity_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class VariableAdjustment:
    """Min/max bounds for one scenario variable (see scenario_variables)."""
    variable_id: str
    min_value: float
    max_value: float
    base_value: Optional[float] = None


@dataclass
class ScenarioResult:
    """Enterprise values and full projections at both bounds (min <= max)."""
    min_value: float
    max_value: float
    min_model: FinancialModel
    max_model: FinancialModel
    min_results: CalculatedFinancials
    max_results: CalculatedFinancials


@dataclass
class GeneratedScenario:
    """One standard sensitivity scenario, ready to be upserted by name."""
    name: str
    min_value: float
    max_value: float
    min_model: FinancialModel
    max_model: FinancialModel
    min_results: CalculatedFinancials
    max_results: CalculatedFinancials
    description: Optional[str] = None
