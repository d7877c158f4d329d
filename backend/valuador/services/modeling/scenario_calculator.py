"""
scenario_calculator.py — Min/Max Scenario Evaluation

Purpose:
- Apply variable adjustments to a copy of a base model
- Re-run the full projection at the min and at the max bound
- Return enterprise values plus the perturbed models and their results

The base model is never mutated. The projection is a pure function, so
no shared calculation state is swapped in and out.
"""

from typing import List, Sequence, Tuple

from valuador.core.logging import get_logger
from valuador.services.modeling import scenario_variables as sv
from valuador.services.modeling.projection import calculate_financials
from valuador.services.modeling.types import (
    CalculatedFinancials,
    FinancialModel,
    ScenarioResult,
    VariableAdjustment,
)
from valuador.services.modeling.wacc import calculate_wacc

logger = get_logger(__name__)


def _set_wacc(model: FinancialModel, target_percent: float) -> None:
    """
    Move the WACC premium so the profile's WACC hits the target exactly.
    Without a risk profile the target becomes the model's discount rate.
    """
    rp = model.risk_profile
    if rp is None:
        model.discount_rate = target_percent
        return
    current = calculate_wacc(rp)
    rp.wacc_premium = (rp.wacc_premium or 0.0) + (target_percent / 100 - current)


def _set_revenue_growth(model: FinancialModel, value: float) -> None:
    revenue = model.revenue
    if revenue.input_method != "growth" and revenue.base_value is None and revenue.yearly_values:
        revenue.base_value = revenue.yearly_values[0]
    revenue.input_method = "growth"
    revenue.growth_method = "uniform"
    revenue.growth_rate = value


def _set_ebitda_margin(model: FinancialModel, base_results: CalculatedFinancials, value: float) -> None:
    """
    Shift every year's opex percent by the gap between the target and the
    average base margin, keeping year-over-year variation.
    """
    margins = base_results.ebitda_margin
    if not margins:
        return
    shift = value - sum(margins) / len(margins)

    individual = {}
    for i, (opex, revenue) in enumerate(zip(base_results.opex, base_results.revenue)):
        if revenue > 0:
            individual[i] = max(0.0, opex / revenue * 100 - shift)
        else:
            individual[i] = 0.0

    opex = model.opex
    opex.input_method = "percentOfRevenue"
    opex.percent_method = "individual"
    opex.individual_percents = individual
    # Computed opex replaces any hand-entered cells
    opex.manual_overrides = {}


def apply_variable_adjustments(
    base_model: FinancialModel,
    adjustments: Sequence[VariableAdjustment],
    use_min_values: bool,
) -> FinancialModel:
    """
    Return a deep copy of `base_model` with each adjustment applied at its
    min (use_min_values=True) or max bound. Unknown variables are ignored.
    """
    model = base_model.model_copy(deep=True)
    base_results = None

    for adjustment in adjustments:
        value = adjustment.min_value if use_min_values else adjustment.max_value
        variable_id = adjustment.variable_id

        if variable_id == sv.WACC:
            _set_wacc(model, value)

        elif variable_id == sv.REVENUE_GROWTH:
            _set_revenue_growth(model, value)

        elif variable_id == sv.EBITDA_MARGIN:
            if base_results is None:
                base_results = calculate_financials(base_model)
            _set_ebitda_margin(model, base_results, value)

        elif variable_id == sv.TERMINAL_GROWTH:
            model.terminal_value.method = "growth"
            model.terminal_value.growth_rate = value

        elif variable_id == sv.TERMINAL_MULTIPLE:
            model.terminal_value.method = "multiples"
            model.terminal_value.multiple_metric = "ebitda"
            model.terminal_value.multiple_value = value

        elif variable_id in (sv.CAPEX_PERCENT, sv.NWC_PERCENT):
            item = model.capex if variable_id == sv.CAPEX_PERCENT else model.net_working_capital
            item.input_method = "percentOfRevenue"
            item.percent_method = "uniform"
            item.percent_of_revenue = value

        elif variable_id == sv.TAX_RATE:
            if model.risk_profile is not None:
                model.risk_profile.corporate_tax_rate = value / 100
            model.taxes.input_method = "percentOfEBIT"
            model.taxes.percent_method = "uniform"
            model.taxes.percent_of_ebit = value

        else:
            logger.warning("Ignoring unknown scenario variable %s", variable_id)

    return model


def calculate_enterprise_value(model: FinancialModel) -> Tuple[float, CalculatedFinancials]:
    results = calculate_financials(model)
    return results.enterprise_value or 0.0, results


def calculate_scenario_values(
    base_model: FinancialModel,
    adjustments: Sequence[VariableAdjustment],
) -> ScenarioResult:
    """
    Evaluate the min and max cases of a set of adjustments.

    The sides are swapped when the min bound yields the higher enterprise
    value (e.g. a higher WACC), so `min_value <= max_value` always holds.
    """
    min_model = apply_variable_adjustments(base_model, adjustments, use_min_values=True)
    min_ev, min_results = calculate_enterprise_value(min_model)

    max_model = apply_variable_adjustments(base_model, adjustments, use_min_values=False)
    max_ev, max_results = calculate_enterprise_value(max_model)

    if min_ev > max_ev:
        return ScenarioResult(
            min_value=max_ev,
            max_value=min_ev,
            min_model=max_model,
            max_model=min_model,
            min_results=max_results,
            max_results=min_results,
        )

    return ScenarioResult(
        min_value=min_ev,
        max_value=max_ev,
        min_model=min_model,
        max_model=max_model,
        min_results=min_results,
        max_results=max_results,
    )


def generate_scenario_description(adjustments: Sequence[VariableAdjustment]) -> str:
    """e.g. "Revenue Growth: 5 - 15, Wacc: 8 - 12" """
    parts: List[str] = []
    for adj in adjustments:
        name = adj.variable_id.replace("_", " ").title()
        parts.append(f"{name}: {_fmt(adj.min_value)} - {_fmt(adj.max_value)}")
    return ", ".join(parts)


def _fmt(value: float) -> str:
    # 5.0 -> "5", 2.5 -> "2.5"
    return f"{value:g}"
