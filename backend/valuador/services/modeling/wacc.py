"""
wacc.py — Weighted Average Cost of Capital

Purpose:
- Convert a RiskProfile into a discount rate
- Expose each intermediate (cost of equity, cost of debt, capital weights)
  for report breakdowns

WACC is always recalculated from the risk profile, never cached, so it
cannot drift from its inputs when any parameter changes.

Formulas:
    Re   = Rf + β × (ERP + CRP)
    Rd   = Rf + default spread + company spread
    E/V  = 1 / (1 + D/E)
    D/V  = (D/E) / (1 + D/E)
    WACC = E/V × Re + D/V × Rd × (1 − Tc) + premium
"""

from valuador.services.modeling.errors import InvalidRiskProfileError
from valuador.services.modeling.types import RiskProfile, WaccComponents


def calculate_cost_of_equity(risk_profile: RiskProfile) -> float:
    """CAPM with country risk premium. Negative or zero beta is not rejected."""
    return risk_profile.risk_free_rate + risk_profile.levered_beta * (
        risk_profile.equity_risk_premium + risk_profile.country_risk_premium
    )


def calculate_cost_of_debt(risk_profile: RiskProfile) -> float:
    """Pre-tax cost of debt."""
    return (
        risk_profile.risk_free_rate
        + risk_profile.adjusted_default_spread
        + risk_profile.company_spread
    )


def _check_de_ratio(de_ratio: float) -> None:
    if de_ratio <= -1:
        raise InvalidRiskProfileError(f"de_ratio must be greater than -1, got {de_ratio}")


def calculate_equity_weight(de_ratio: float) -> float:
    """E/V = 1 / (1 + D/E)"""
    _check_de_ratio(de_ratio)
    return 1 / (1 + de_ratio)


def calculate_debt_weight(de_ratio: float) -> float:
    """D/V = (D/E) / (1 + D/E)"""
    _check_de_ratio(de_ratio)
    return de_ratio / (1 + de_ratio)


def calculate_wacc_components(risk_profile: RiskProfile) -> WaccComponents:
    """
    Calculate all WACC components at once.

    Returns:
        WaccComponents with cost of equity, cost of debt, both weights and
        the final WACC (premium included), all as decimals.
    """
    cost_of_equity = calculate_cost_of_equity(risk_profile)
    cost_of_debt = calculate_cost_of_debt(risk_profile)
    equity_weight = calculate_equity_weight(risk_profile.de_ratio)
    debt_weight = calculate_debt_weight(risk_profile.de_ratio)

    base_wacc = (
        equity_weight * cost_of_equity
        + debt_weight * cost_of_debt * (1 - risk_profile.corporate_tax_rate)
    )
    wacc = base_wacc + (risk_profile.wacc_premium or 0.0)

    return WaccComponents(
        cost_of_equity=cost_of_equity,
        cost_of_debt=cost_of_debt,
        equity_weight=equity_weight,
        debt_weight=debt_weight,
        wacc=wacc,
    )


def calculate_wacc(risk_profile: RiskProfile) -> float:
    """WACC as a decimal (e.g., 0.12 for 12%)."""
    return calculate_wacc_components(risk_profile).wacc


def calculate_wacc_percent(risk_profile: RiskProfile) -> float:
    """WACC as a percentage (e.g., 12 for 12%)."""
    return calculate_wacc(risk_profile) * 100


def calculate_levered_beta(unlevered_beta: float, de_ratio: float, corporate_tax_rate: float) -> float:
    """Hamada: βL = βU × (1 + (1 − Tc) × D/E)"""
    return unlevered_beta * (1 + (1 - corporate_tax_rate) * de_ratio)
