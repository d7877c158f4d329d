"""
scenario_variables.py — Variables available for sensitivity scenarios

Purpose:
- Registry of model variables a scenario can perturb
- Resolve a variable's current base value from a model + its results
- Display formatting for variable values

Values are percentage points except `terminal_multiple` (a multiplier).
"""

from dataclasses import dataclass
import math
from typing import Dict, List, Optional

from valuador.services.modeling.types import CalculatedFinancials, FinancialModel
from valuador.services.modeling.wacc import calculate_wacc_percent


WACC = "wacc"
REVENUE_GROWTH = "revenue_growth"
EBITDA_MARGIN = "ebitda_margin"
TERMINAL_GROWTH = "terminal_growth"
TERMINAL_MULTIPLE = "terminal_multiple"
CAPEX_PERCENT = "capex_percent"
NWC_PERCENT = "nwc_percent"
TAX_RATE = "tax_rate"


@dataclass(frozen=True)
class ScenarioVariable:
    id: str
    label: str
    description: str
    unit: str  # "percentage" | "multiplier" | "rate"
    step: float


SCENARIO_VARIABLES: List[ScenarioVariable] = [
    ScenarioVariable(WACC, "WACC (Discount Rate)", "Weighted Average Cost of Capital", "percentage", 0.1),
    ScenarioVariable(REVENUE_GROWTH, "Revenue Growth Rate", "Annual revenue growth percentage", "percentage", 0.5),
    ScenarioVariable(EBITDA_MARGIN, "EBITDA Margin", "EBITDA as percentage of revenue", "percentage", 0.5),
    ScenarioVariable(TERMINAL_GROWTH, "Terminal Growth Rate", "Perpetual growth rate for terminal value", "percentage", 0.1),
    ScenarioVariable(TERMINAL_MULTIPLE, "Terminal EBITDA Multiple", "Exit multiple for terminal value calculation", "multiplier", 0.5),
    ScenarioVariable(CAPEX_PERCENT, "CAPEX (% of Revenue)", "Capital expenditure as percentage of revenue", "percentage", 0.5),
    ScenarioVariable(NWC_PERCENT, "Net Working Capital (% of Revenue)", "NWC change as percentage of revenue", "percentage", 0.5),
    ScenarioVariable(TAX_RATE, "Tax Rate", "Corporate tax rate", "percentage", 0.5),
]

_BY_ID: Dict[str, ScenarioVariable] = {v.id: v for v in SCENARIO_VARIABLES}


def get_variable_by_id(variable_id: str) -> Optional[ScenarioVariable]:
    return _BY_ID.get(variable_id)


def format_variable_value(variable: ScenarioVariable, value: float) -> str:
    if variable.unit == "percentage":
        return f"{value:.1f}%"
    if variable.unit == "multiplier":
        return f"{value:.1f}x"
    if variable.unit == "rate":
        return f"{value:.3f}"
    return str(value)


def get_variable_base_value(
    variable_id: str,
    model: FinancialModel,
    results: Optional[CalculatedFinancials],
) -> Optional[float]:
    """
    Current value of a scenario variable, or None when the model does not
    use it in a form the variable can describe.
    """
    if variable_id == WACC:
        if model.risk_profile is None:
            return model.discount_rate
        return calculate_wacc_percent(model.risk_profile)

    if variable_id == REVENUE_GROWTH:
        return model.revenue.growth_rate or None

    if variable_id == EBITDA_MARGIN:
        if results is None:
            return None
        margins = [m for m in results.ebitda_margin if math.isfinite(m)]
        if not margins:
            return None
        return sum(margins) / len(margins)

    if variable_id == TERMINAL_GROWTH:
        if model.terminal_value.method == "growth":
            return model.terminal_value.growth_rate or 0.0
        return None

    if variable_id == TERMINAL_MULTIPLE:
        if model.terminal_value.method == "multiples":
            return model.terminal_value.multiple_value or 0.0
        return None

    if variable_id == CAPEX_PERCENT:
        if model.capex.input_method == "percentOfRevenue":
            return model.capex.percent_of_revenue or 0.0
        return None

    if variable_id == NWC_PERCENT:
        if model.net_working_capital.input_method == "percentOfRevenue":
            return model.net_working_capital.percent_of_revenue or 0.0
        return None

    if variable_id == TAX_RATE:
        if model.risk_profile is not None and model.risk_profile.corporate_tax_rate:
            return model.risk_profile.corporate_tax_rate * 100
        return None

    return None
