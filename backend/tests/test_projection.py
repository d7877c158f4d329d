"""
Tests for the financial projection and DCF.

Tests verify that:
- Line items resolve from each input method
- EBITDA → EBIT → net income → FCF flow is consistent
- NWC changes are measured against a base year
- Terminal value follows the growth / multiples rules
- Enterprise value bridges to equity value
"""

from __future__ import annotations

import pytest

from valuador.core.config import settings
from valuador.services.modeling.projection import (
    calculate_financials,
    extend_series,
    grow_series,
)
from valuador.services.modeling.types import (
    EquityValueAssumptions,
    LineItemAssumptions,
    ModelPeriods,
    TerminalValueAssumptions,
)
from valuador.services.modeling.wacc import calculate_wacc


def test_simple_model_income_statement(simple_model):
    results = calculate_financials(simple_model)

    assert results.revenue == pytest.approx([100.0, 110.0, 121.0])
    assert results.cogs == pytest.approx([40.0, 44.0, 48.4])
    assert results.gross_profit == pytest.approx([60.0, 66.0, 72.6])
    assert results.opex == pytest.approx([20.0, 22.0, 24.2])
    assert results.ebitda == pytest.approx([40.0, 44.0, 48.4])
    assert results.ebitda_margin == pytest.approx([40.0, 40.0, 40.0])
    assert results.ebit == pytest.approx([35.0, 38.5, 42.35])
    assert results.taxes == pytest.approx([8.75, 9.625, 10.5875])
    assert results.net_income == pytest.approx([26.25, 28.875, 31.7625])


def test_simple_model_dcf(simple_model):
    results = calculate_financials(simple_model)
    r = settings.DEFAULT_DISCOUNT_RATE

    # No NWC and capex == D&A, so FCF equals net income
    assert results.change_in_nwc == pytest.approx([0.0, 0.0, 0.0])
    assert results.free_cash_flow == pytest.approx([26.25, 28.875, 31.7625])

    expected_dcf = [fcf / (1 + r) ** (i + 1) for i, fcf in enumerate(results.free_cash_flow)]
    assert results.discounted_cash_flows == pytest.approx(expected_dcf)

    expected_tv = 31.7625 * 1.02 / (r - 0.02)
    assert results.terminal_value == pytest.approx(expected_tv)
    assert results.present_value_terminal_value == pytest.approx(expected_tv / (1 + r) ** 3)
    assert results.enterprise_value == pytest.approx(sum(expected_dcf) + expected_tv / (1 + r) ** 3)


def test_discount_rate_comes_from_risk_profile(model_with_wacc, risk_profile):
    results = calculate_financials(model_with_wacc)

    assert results.discount_rate == pytest.approx(calculate_wacc(risk_profile))


def test_discount_rate_defaults_without_risk_profile(simple_model):
    assert calculate_financials(simple_model).discount_rate == settings.DEFAULT_DISCOUNT_RATE


def test_discount_rate_override_without_risk_profile(model_factory):
    assert calculate_financials(model_factory(discount_rate=12.0)).discount_rate == pytest.approx(0.12)


def test_risk_profile_wins_over_discount_rate_override(model_factory, risk_profile):
    model = model_factory(risk_profile=risk_profile, discount_rate=12.0)

    assert calculate_financials(model).discount_rate == pytest.approx(calculate_wacc(risk_profile))


def test_zero_periods_returns_empty_results(model_factory):
    results = calculate_financials(model_factory(periods=ModelPeriods(number_of_years=0)))

    assert results.revenue == []
    assert results.free_cash_flow == []
    assert results.enterprise_value == 0.0
    assert results.terminal_value == 0.0


def test_nwc_change_against_base_year(model_factory):
    model = model_factory(
        net_working_capital=LineItemAssumptions(
            input_method="percentOfRevenue", percent_method="uniform", percent_of_revenue=10.0
        )
    )
    results = calculate_financials(model)

    # Revenue is extended one year at the last growth rate (121 → 133.1)
    assert results.net_working_capital == pytest.approx([11.0, 12.1, 13.31])
    assert results.change_in_nwc == pytest.approx([1.0, 1.1, 1.21])
    assert results.free_cash_flow == pytest.approx([25.25, 27.775, 30.5525])


def test_direct_input_with_manual_overrides(model_factory):
    model = model_factory(
        revenue=LineItemAssumptions(
            input_method="direct",
            yearly_values=[100.0, 120.0],
            manual_overrides={1: 150.0},
        )
    )
    results = calculate_financials(model)

    # Missing yearly values default to 0, overrides replace computed values
    assert results.revenue == pytest.approx([100.0, 150.0, 0.0])
    assert results.ebitda_margin[2] == 0.0


def test_individual_growth_rates(model_factory):
    model = model_factory(
        revenue=LineItemAssumptions(
            input_method="growth",
            growth_method="individual",
            base_value=200.0,
            individual_growth_rates={1: 50.0, 2: -10.0},
        )
    )

    assert calculate_financials(model).revenue == pytest.approx([200.0, 300.0, 270.0])


def test_gross_margin_cogs(model_factory):
    model = model_factory(cogs=LineItemAssumptions(input_method="grossMargin", gross_margin_percent=65.0))
    results = calculate_financials(model)

    assert results.cogs == pytest.approx([35.0, 38.5, 42.35])
    assert results.gross_margin == pytest.approx([65.0, 65.0, 65.0])


def test_negative_ebit_is_not_taxed(model_factory):
    results = calculate_financials(model_factory(opex=LineItemAssumptions(
        input_method="percentOfRevenue", percent_method="uniform", percent_of_revenue=80.0
    )))

    assert all(e < 0 for e in results.ebit)
    assert results.taxes == pytest.approx([0.0, 0.0, 0.0])


def test_no_growth_terminal_value_when_rate_not_above_growth(model_factory):
    model = model_factory(terminal_value=TerminalValueAssumptions(method="growth", growth_rate=9.0))
    results = calculate_financials(model)

    assert results.terminal_value == 0.0
    assert results.present_value_terminal_value == 0.0
    assert results.enterprise_value == pytest.approx(sum(results.discounted_cash_flows))


def test_multiples_terminal_value(model_factory):
    model = model_factory(
        terminal_value=TerminalValueAssumptions(method="multiples", multiple_metric="ebitda", multiple_value=8.0)
    )
    results = calculate_financials(model)
    r = results.discount_rate

    assert results.terminal_value == pytest.approx(48.4 * 8.0)
    assert results.present_value_terminal_value == pytest.approx(48.4 * 8.0 / (1 + r) ** 3)


def test_multiples_default_to_ten(model_factory):
    model = model_factory(terminal_value=TerminalValueAssumptions(method="multiples"))

    assert calculate_financials(model).terminal_value == pytest.approx(484.0)


def test_equity_bridge(model_factory):
    model = model_factory(
        equity_value=EquityValueAssumptions(
            cash=50.0,
            total_debt=80.0,
            minority_interest=5.0,
            investments_in_subsidiaries=10.0,
            other_adjustments=-2.0,
        )
    )
    results = calculate_financials(model)

    assert results.equity_value == pytest.approx(results.enterprise_value - 80 + 50 - 5 + 10 - 2)


def test_projection_does_not_mutate_model(simple_model):
    before = simple_model.model_dump()
    calculate_financials(simple_model)

    assert simple_model.model_dump() == before


def test_grow_series_uniform():
    assert grow_series(100.0, 3, "uniform", 10.0, {}) == pytest.approx([100.0, 110.0, 121.0])
    assert grow_series(100.0, 0, "uniform", 10.0, {}) == []


def test_extend_series():
    assert extend_series([100.0, 110.0]) == pytest.approx([100.0, 110.0, 121.0])
    assert extend_series([0.0, 5.0]) == [0.0, 5.0, 5.0]
    assert extend_series([]) == [0.0]
