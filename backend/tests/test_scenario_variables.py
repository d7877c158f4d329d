"""
Tests for the scenario variable registry and base value resolution.
"""

from __future__ import annotations

import pytest

from valuador.services.modeling.projection import calculate_financials
from valuador.services.modeling.scenario_variables import (
    SCENARIO_VARIABLES,
    ScenarioVariable,
    format_variable_value,
    get_variable_base_value,
    get_variable_by_id,
)
from valuador.services.modeling.types import LineItemAssumptions, TerminalValueAssumptions
from valuador.services.modeling.wacc import calculate_wacc_percent


def test_registry_ids():
    assert [v.id for v in SCENARIO_VARIABLES] == [
        "wacc",
        "revenue_growth",
        "ebitda_margin",
        "terminal_growth",
        "terminal_multiple",
        "capex_percent",
        "nwc_percent",
        "tax_rate",
    ]


def test_get_variable_by_id():
    assert get_variable_by_id("terminal_multiple").unit == "multiplier"
    assert get_variable_by_id("does_not_exist") is None


def test_format_variable_value():
    assert format_variable_value(get_variable_by_id("wacc"), 12.345) == "12.3%"
    assert format_variable_value(get_variable_by_id("terminal_multiple"), 8) == "8.0x"

    rate = ScenarioVariable("x", "X", "", "rate", 0.1)
    assert format_variable_value(rate, 0.12345) == "0.123"


def test_wacc_base_value(model_with_wacc, simple_model, risk_profile):
    assert get_variable_base_value("wacc", model_with_wacc, None) == pytest.approx(
        calculate_wacc_percent(risk_profile)
    )
    assert get_variable_base_value("wacc", simple_model, None) is None


def test_wacc_base_value_from_discount_rate(model_factory):
    assert get_variable_base_value("wacc", model_factory(discount_rate=11.5), None) == 11.5


def test_wacc_base_value_includes_premium(model_factory, risk_profile):
    profile = risk_profile.model_copy(update={"wacc_premium": 0.01})
    model = model_factory(risk_profile=profile)

    assert get_variable_base_value("wacc", model, None) == pytest.approx(
        calculate_wacc_percent(risk_profile) + 1.0
    )


def test_revenue_growth_base_value(simple_model, model_factory):
    assert get_variable_base_value("revenue_growth", simple_model, None) == 10.0

    zero_growth = model_factory(
        revenue=LineItemAssumptions(input_method="growth", base_value=100.0, growth_rate=0.0)
    )
    assert get_variable_base_value("revenue_growth", zero_growth, None) is None


def test_ebitda_margin_base_value(simple_model):
    results = calculate_financials(simple_model)

    assert get_variable_base_value("ebitda_margin", simple_model, results) == pytest.approx(40.0)
    assert get_variable_base_value("ebitda_margin", simple_model, None) is None


def test_terminal_base_values_depend_on_method(simple_model, model_factory):
    assert get_variable_base_value("terminal_growth", simple_model, None) == 2.0
    assert get_variable_base_value("terminal_multiple", simple_model, None) is None

    multiples = model_factory(terminal_value=TerminalValueAssumptions(method="multiples", multiple_value=9.5))
    assert get_variable_base_value("terminal_multiple", multiples, None) == 9.5
    assert get_variable_base_value("terminal_growth", multiples, None) is None


def test_capex_and_nwc_base_values(simple_model, model_factory):
    assert get_variable_base_value("capex_percent", simple_model, None) == 5.0
    # NWC is percent of revenue with no percent set
    assert get_variable_base_value("nwc_percent", simple_model, None) == 0.0

    direct_capex = model_factory(capex=LineItemAssumptions(input_method="direct", yearly_values=[1.0]))
    assert get_variable_base_value("capex_percent", direct_capex, None) is None


def test_tax_rate_base_value(model_with_wacc, simple_model):
    assert get_variable_base_value("tax_rate", model_with_wacc, None) == pytest.approx(30.0)
    assert get_variable_base_value("tax_rate", simple_model, None) is None


def test_unknown_variable_base_value(simple_model):
    assert get_variable_base_value("unknown", simple_model, None) is None
