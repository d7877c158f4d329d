"""
quick_valuation.py — Low / Base / High valuation from a short form

Purpose:
- Turn a handful of per-year form inputs (strings as typed by the user)
  into a FinancialModel
- Price three cases by shifting growth and EBITDA margin together

Revenue in year 0 is last year's revenue; growth_rates[i] applies to
year i, so growth_rates[0] is ignored. COGS is zero, so the EBITDA margin
is carried entirely by opex (opex % = 100 − margin).
"""

from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, Field

from valuador.services.modeling.array_helpers import (
    build_individual_percents_map,
    resize_string_array,
)
from valuador.services.modeling.errors import InvalidQuickValuationInput
from valuador.services.modeling.projection import calculate_financials
from valuador.services.modeling.types import (
    FinancialModel,
    LineItemAssumptions,
    ModelPeriods,
    RiskProfile,
    TerminalValueAssumptions,
)


CASE_DELTA = 5.0


class QuickValuationForm(BaseModel):
    years: int = 5
    last_year_revenue: float
    growth_rates: List[str] = Field(default_factory=list)
    ebitda_margins: List[str] = Field(default_factory=list)
    capex_percent: float = 0.0
    nwc_percent: float = 0.0
    da_percent: float = 0.0
    tax_percent: float = 0.0
    risk_profile: RiskProfile
    terminal_multiple: float = 10.0


@dataclass
class QuickValuationCase:
    name: str
    growth_delta: float
    margin_delta: float
    enterprise_value: float


def _percent_of_revenue(value: float) -> LineItemAssumptions:
    return LineItemAssumptions(
        input_method="percentOfRevenue", percent_method="uniform", percent_of_revenue=value
    )


def build_quick_model(
    form: QuickValuationForm,
    growth_delta: float = 0.0,
    margin_delta: float = 0.0,
) -> FinancialModel:
    years = form.years
    growth = build_individual_percents_map(years, resize_string_array(form.growth_rates, years))
    margins = build_individual_percents_map(years, resize_string_array(form.ebitda_margins, years))

    growth_rates = {i: rate + growth_delta for i, rate in growth.items() if i > 0}
    opex_percents = {
        i: max(0.0, 100 - min(100.0, max(0.0, margin + margin_delta)))
        for i, margin in margins.items()
    }

    return FinancialModel(
        periods=ModelPeriods(number_of_years=years),
        risk_profile=form.risk_profile,
        revenue=LineItemAssumptions(
            input_method="growth",
            growth_method="individual",
            base_value=form.last_year_revenue,
            individual_growth_rates=growth_rates,
        ),
        cogs=LineItemAssumptions(input_method="revenueMargin", revenue_margin_percent=0.0),
        opex=LineItemAssumptions(
            input_method="percentOfRevenue",
            percent_method="individual",
            individual_percents=opex_percents,
        ),
        da=_percent_of_revenue(form.da_percent),
        capex=_percent_of_revenue(form.capex_percent),
        net_working_capital=_percent_of_revenue(form.nwc_percent),
        taxes=LineItemAssumptions(
            input_method="percentOfEBIT", percent_method="uniform", percent_of_ebit=form.tax_percent
        ),
        terminal_value=TerminalValueAssumptions(
            method="multiples", multiple_metric="ebitda", multiple_value=form.terminal_multiple
        ),
    )


def run_quick_valuation(form: QuickValuationForm) -> List[QuickValuationCase]:
    """
    Price the Low (−5/−5), Base and High (+5/+5) cases.

    Raises:
        InvalidQuickValuationInput: revenue is not positive or fewer than
            two forecast years were requested
    """
    if not form.last_year_revenue > 0:
        raise InvalidQuickValuationInput("last_year_revenue must be positive")
    if form.years < 2:
        raise InvalidQuickValuationInput("at least 2 forecast years are required")

    cases = []
    for name, delta in (("Low", -CASE_DELTA), ("Base", 0.0), ("High", CASE_DELTA)):
        model = build_quick_model(form, growth_delta=delta, margin_delta=delta)
        results = calculate_financials(model)
        cases.append(
            QuickValuationCase(
                name=name,
                growth_delta=delta,
                margin_delta=delta,
                enterprise_value=results.enterprise_value,
            )
        )
    return cases
