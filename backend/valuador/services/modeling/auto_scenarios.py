"""
auto_scenarios.py — Standard sensitivity scenarios for a new valuation

Purpose:
- Build the three default min/max scenarios around a base model:
    1. Revenue growth ± 5 points
    2. EBITDA margin ± 5 points
    3. WACC ± 2 points
- Clamp bounds to meaningful ranges before evaluation

This module does NOT:
- Persist anything (see services/scenarios.upsert_scenario)
- Catch calculator errors (callers decide how to surface them)
"""

from typing import List

from valuador.core.config import settings
from valuador.core.logging import get_logger
from valuador.services.modeling import scenario_variables as sv
from valuador.services.modeling.scenario_calculator import calculate_scenario_values
from valuador.services.modeling.types import (
    CalculatedFinancials,
    FinancialModel,
    GeneratedScenario,
    VariableAdjustment,
)

logger = get_logger(__name__)


REVENUE_GROWTH_DELTA = 5.0
EBITDA_MARGIN_DELTA = 5.0
WACC_DELTA = 2.0

# (name, description) in generation order
SCENARIO_LABELS = [
    ("Crecimiento de ingresos (±5%)", "Análisis de sensibilidad: crecimiento de ingresos (±5%)"),
    ("Margen EBITDA (±5%)", "Análisis de sensibilidad: margen EBITDA (±5%)"),
    ("WACC (±2%)", "Análisis de sensibilidad: costo de capital (±2%)"),
]


def _base_or(value, fallback: float) -> float:
    return value if value is not None else fallback


def auto_scenario_bounds(
    base_model: FinancialModel,
    base_results: CalculatedFinancials,
) -> List[VariableAdjustment]:
    """Clamped adjustments for growth, margin and WACC, in that order."""
    growth = _base_or(sv.get_variable_base_value(sv.REVENUE_GROWTH, base_model, base_results), 0.0)
    margin = _base_or(sv.get_variable_base_value(sv.EBITDA_MARGIN, base_model, base_results), 0.0)
    wacc = _base_or(
        sv.get_variable_base_value(sv.WACC, base_model, base_results),
        settings.DEFAULT_WACC_PERCENT,
    )

    return [
        VariableAdjustment(
            variable_id=sv.REVENUE_GROWTH,
            min_value=max(0.0, growth - REVENUE_GROWTH_DELTA),
            max_value=growth + REVENUE_GROWTH_DELTA,
            base_value=growth,
        ),
        VariableAdjustment(
            variable_id=sv.EBITDA_MARGIN,
            min_value=max(0.0, margin - EBITDA_MARGIN_DELTA),
            max_value=min(100.0, margin + EBITDA_MARGIN_DELTA),
            base_value=margin,
        ),
        VariableAdjustment(
            variable_id=sv.WACC,
            min_value=max(0.0, wacc - WACC_DELTA),
            max_value=wacc + WACC_DELTA,
            base_value=wacc,
        ),
    ]


def generate_auto_scenarios(
    base_model: FinancialModel,
    base_results: CalculatedFinancials,
) -> List[GeneratedScenario]:
    """
    Evaluate the three standard scenarios.

    Args:
        base_model: the saved valuation's model (not mutated)
        base_results: projection of `base_model`, used for the margin base

    Returns:
        Exactly three GeneratedScenario in the order growth, margin, WACC
    """
    scenarios: List[GeneratedScenario] = []

    for adjustment, (name, description) in zip(
        auto_scenario_bounds(base_model, base_results), SCENARIO_LABELS
    ):
        result = calculate_scenario_values(base_model, [adjustment])
        logger.debug(
            "Scenario %s: %s in [%.2f, %.2f] -> EV [%.2f, %.2f]",
            name,
            adjustment.variable_id,
            adjustment.min_value,
            adjustment.max_value,
            result.min_value,
            result.max_value,
        )
        scenarios.append(
            GeneratedScenario(
                name=name,
                description=description,
                min_value=result.min_value,
                max_value=result.max_value,
                min_model=result.min_model,
                max_model=result.max_model,
                min_results=result.min_results,
                max_results=result.max_results,
            )
        )

    return scenarios
