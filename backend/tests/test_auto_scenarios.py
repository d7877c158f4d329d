"""
Tests for the standard auto-generated scenarios.

Tests verify that:
- Exactly three scenarios are produced, in a fixed order with fixed labels
- Bounds are base ± delta, clamped to meaningful ranges
- Fallback base values are used when the model cannot provide one
"""

from __future__ import annotations

import pytest

from valuador.core.config import settings
from valuador.services.modeling.auto_scenarios import auto_scenario_bounds, generate_auto_scenarios
from valuador.services.modeling.projection import calculate_financials
from valuador.services.modeling.types import LineItemAssumptions
from valuador.services.modeling.wacc import calculate_wacc_percent


def bounds_for(model):
    return {
        a.variable_id: (a.min_value, a.max_value)
        for a in auto_scenario_bounds(model, calculate_financials(model))
    }


def test_bounds_order_and_values(simple_model):
    adjustments = auto_scenario_bounds(simple_model, calculate_financials(simple_model))

    assert [a.variable_id for a in adjustments] == ["revenue_growth", "ebitda_margin", "wacc"]
    assert (adjustments[0].min_value, adjustments[0].max_value) == (5.0, 15.0)
    assert adjustments[1].min_value == pytest.approx(35.0)
    assert adjustments[1].max_value == pytest.approx(45.0)
    # No risk profile: WACC falls back to the configured default
    assert adjustments[2].base_value == settings.DEFAULT_WACC_PERCENT
    assert (adjustments[2].min_value, adjustments[2].max_value) == (7.0, 11.0)


def test_wacc_bounds_from_risk_profile(model_with_wacc, risk_profile):
    wacc = calculate_wacc_percent(risk_profile)

    assert bounds_for(model_with_wacc)["wacc"] == pytest.approx((wacc - 2, wacc + 2))


def test_growth_min_is_clamped_at_zero(model_factory):
    model = model_factory(
        revenue=LineItemAssumptions(input_method="growth", base_value=100.0, growth_rate=3.0)
    )

    assert bounds_for(model)["revenue_growth"] == (0.0, 8.0)


def test_growth_falls_back_to_zero(model_factory):
    model = model_factory(
        revenue=LineItemAssumptions(input_method="direct", yearly_values=[100.0, 100.0, 100.0])
    )

    assert bounds_for(model)["revenue_growth"] == (0.0, 5.0)


def test_margin_max_is_clamped_at_hundred(model_factory):
    model = model_factory(
        cogs=LineItemAssumptions(input_method="revenueMargin", revenue_margin_percent=0.0),
        opex=LineItemAssumptions(input_method="percentOfRevenue", percent_of_revenue=2.0),
    )
    low, high = bounds_for(model)["ebitda_margin"]

    assert low == pytest.approx(93.0)
    assert high == 100.0


def test_wacc_min_is_clamped_at_zero(model_factory, risk_profile):
    profile = risk_profile.model_copy(update={"wacc_premium": -0.09})
    model = model_factory(risk_profile=profile)
    base = calculate_wacc_percent(profile)

    assert base < 2
    assert bounds_for(model)["wacc"] == pytest.approx((0.0, base + 2))


def test_generate_auto_scenarios(model_with_wacc):
    base_results = calculate_financials(model_with_wacc)
    scenarios = generate_auto_scenarios(model_with_wacc, base_results)

    assert [s.name for s in scenarios] == [
        "Crecimiento de ingresos (±5%)",
        "Margen EBITDA (±5%)",
        "WACC (±2%)",
    ]
    assert [s.description for s in scenarios] == [
        "Análisis de sensibilidad: crecimiento de ingresos (±5%)",
        "Análisis de sensibilidad: margen EBITDA (±5%)",
        "Análisis de sensibilidad: costo de capital (±2%)",
    ]
    for scenario in scenarios:
        assert scenario.min_value <= base_results.enterprise_value <= scenario.max_value
        assert scenario.min_results.enterprise_value == scenario.min_value
        assert scenario.max_results.enterprise_value == scenario.max_value


def test_generate_auto_scenarios_leaves_base_model_untouched(model_with_wacc):
    before = model_with_wacc.model_dump()
    generate_auto_scenarios(model_with_wacc, calculate_financials(model_with_wacc))

    assert model_with_wacc.model_dump() == before


def test_wacc_scenario_without_risk_profile_is_not_flat(simple_model):
    base_results = calculate_financials(simple_model)
    wacc_scenario = generate_auto_scenarios(simple_model, base_results)[2]

    assert wacc_scenario.min_value < base_results.enterprise_value < wacc_scenario.max_value
    assert wacc_scenario.min_model.discount_rate == 11.0
    assert wacc_scenario.max_model.discount_rate == 7.0


def test_wacc_bounds_from_discount_rate(model_factory):
    assert bounds_for(model_factory(discount_rate=12.0))["wacc"] == (10.0, 14.0)
