"""
projection.py — Financial Projection + DCF

Purpose:
- Turn a FinancialModel into year-by-year financials
- Discount free cash flow at the WACC and add a terminal value
- Bridge enterprise value to equity value

Flow:
    revenue → cogs → gross profit → opex / other items → EBITDA
    → D&A → EBIT → taxes → net income
    → capex / change in NWC → FCF → discounted FCF + PV(terminal) → EV

All rates inside the model are percentage points; the discount rate is a
decimal coming from the WACC module.
"""

from typing import List, Optional, Sequence

from valuador.core.config import settings
from valuador.services.modeling.types import (
    CalculatedFinancials,
    FinancialModel,
    LineItemAssumptions,
)
from valuador.services.modeling.wacc import calculate_wacc


def apply_manual_overrides(values: List[float], overrides: dict) -> List[float]:
    """Replace computed values at the overridden period indexes."""
    if not overrides:
        return values
    return [overrides.get(i, value) for i, value in enumerate(values)]


def grow_series(
    base_value: float,
    periods: int,
    growth_method: str,
    uniform_rate: Optional[float],
    individual_rates: dict,
) -> List[float]:
    """
    Year 0 is the base value; each later year compounds on the previous one.

    Individual rates are keyed by period index; index 0 is never used.
    """
    series: List[float] = []
    for i in range(periods):
        if i == 0:
            series.append(base_value)
            continue
        if growth_method == "individual":
            rate = individual_rates.get(i) or 0.0
        else:
            rate = uniform_rate or 0.0
        series.append(series[i - 1] * (1 + rate / 100))
    return series


def _percent_series(
    driver: Sequence[float],
    periods: int,
    percent_method: str,
    uniform_percent: Optional[float],
    individual_percents: dict,
) -> List[float]:
    values = []
    for i in range(periods):
        if percent_method == "individual":
            pct = individual_percents.get(i) or 0.0
        else:
            pct = uniform_percent or 0.0
        values.append(driver[i] * pct / 100)
    return values


def project_line_item(
    item: LineItemAssumptions,
    periods: int,
    revenue: Optional[Sequence[float]] = None,
    ebit: Optional[Sequence[float]] = None,
) -> List[float]:
    """
    Resolve a line item over `periods` years (manual overrides not applied).

    Percent methods need the matching driver series; a missing driver
    resolves to zeros.
    """
    method = item.input_method

    if method == "direct":
        return [
            item.yearly_values[i] if i < len(item.yearly_values) else 0.0
            for i in range(periods)
        ]

    if method == "growth":
        return grow_series(
            item.base_value or 0.0,
            periods,
            item.growth_method,
            item.growth_rate,
            item.individual_growth_rates,
        )

    if method == "percentOfRevenue" and revenue is not None:
        return _percent_series(
            revenue, periods, item.percent_method, item.percent_of_revenue, item.individual_percents
        )

    if method == "percentOfEBIT" and ebit is not None:
        return _percent_series(
            ebit, periods, item.percent_method, item.percent_of_ebit, item.individual_percents
        )

    if method == "revenueMargin" and revenue is not None:
        return _percent_series(
            revenue, periods, item.percent_method, item.revenue_margin_percent, item.individual_percents
        )

    if method == "grossMargin" and revenue is not None:
        gross_margin = (item.gross_margin_percent or 0.0) / 100
        return [revenue[i] * (1 - gross_margin) for i in range(periods)]

    return [0.0] * periods


def extend_series(values: Sequence[float]) -> List[float]:
    """
    Append one period using the last year-over-year growth.

    Falls back to repeating the last value (or 0 for an empty series) when
    the growth cannot be computed.
    """
    extended = list(values)
    if len(values) > 1 and values[-2] != 0:
        last_growth = (values[-1] - values[-2]) / values[-2]
        extended.append(values[-1] * (1 + last_growth))
    else:
        extended.append(values[-1] if values else 0.0)
    return extended


def _margin(values: Sequence[float], revenue: Sequence[float]) -> List[float]:
    return [(v / r) * 100 if r > 0 else 0.0 for v, r in zip(values, revenue)]


def resolve_discount_rate(model: FinancialModel) -> float:
    """WACC from the risk profile, else the model's own rate, else the configured default."""
    if model.risk_profile is not None:
        return calculate_wacc(model.risk_profile)
    if model.discount_rate is not None:
        return model.discount_rate / 100
    return settings.DEFAULT_DISCOUNT_RATE


def calculate_financials(model: FinancialModel) -> CalculatedFinancials:
    """
    Run the full projection and DCF for a model.

    Args:
        model: FinancialModel (not mutated)

    Returns:
        CalculatedFinancials with every series of length
        `model.periods.number_of_years`
    """
    n = model.periods.number_of_years
    if n <= 0:
        return CalculatedFinancials(discount_rate=resolve_discount_rate(model))

    revenue = apply_manual_overrides(
        project_line_item(model.revenue, n), model.revenue.manual_overrides
    )
    cogs = apply_manual_overrides(
        project_line_item(model.cogs, n, revenue=revenue), model.cogs.manual_overrides
    )
    gross_profit = [r - c for r, c in zip(revenue, cogs)]

    opex = apply_manual_overrides(
        project_line_item(model.opex, n, revenue=revenue), model.opex.manual_overrides
    )
    other_income = apply_manual_overrides(
        project_line_item(model.other_income, n, revenue=revenue), model.other_income.manual_overrides
    )
    other_expenses = apply_manual_overrides(
        project_line_item(model.other_expenses, n, revenue=revenue), model.other_expenses.manual_overrides
    )
    ebitda = [
        gp - o + oi - oe
        for gp, o, oi, oe in zip(gross_profit, opex, other_income, other_expenses)
    ]

    da = apply_manual_overrides(
        project_line_item(model.da, n, revenue=revenue), model.da.manual_overrides
    )
    ebit = [e - d for e, d in zip(ebitda, da)]

    # Only positive EBIT is taxed
    taxable_ebit = [max(0.0, e) for e in ebit]
    taxes = apply_manual_overrides(
        project_line_item(model.taxes, n, revenue=revenue, ebit=taxable_ebit),
        model.taxes.manual_overrides,
    )

    capex = apply_manual_overrides(
        project_line_item(model.capex, n, revenue=revenue, ebit=ebit), model.capex.manual_overrides
    )

    # NWC runs over base year + n so year 1 has a change to measure against
    nwc_with_base = apply_manual_overrides(
        project_line_item(
            model.net_working_capital,
            n + 1,
            revenue=extend_series(revenue),
            ebit=extend_series(ebit),
        ),
        model.net_working_capital.manual_overrides,
    )
    net_working_capital = nwc_with_base[1:]
    change_in_nwc = [nwc_with_base[i + 1] - nwc_with_base[i] for i in range(n)]

    net_income = [e - t for e, t in zip(ebit, taxes)]
    free_cash_flow = [
        ni + d - c - dn
        for ni, d, c, dn in zip(net_income, da, capex, change_in_nwc)
    ]

    discount_rate = resolve_discount_rate(model)
    discounted_cash_flows = [
        fcf / (1 + discount_rate) ** (i + 1) for i, fcf in enumerate(free_cash_flow)
    ]

    terminal_value = 0.0
    pv_terminal_value = 0.0
    last = n - 1
    tv = model.terminal_value

    if tv.method == "growth":
        growth = (tv.growth_rate or 0.0) / 100
        final_fcf = free_cash_flow[last]
        if discount_rate > growth and final_fcf > 0:
            terminal_value = final_fcf * (1 + growth) / (discount_rate - growth)
    elif tv.method == "multiples":
        multiple = tv.multiple_value or 10
        metric_series = {
            "ebitda": ebitda,
            "revenue": revenue,
            "ebit": ebit,
            "netIncome": net_income,
        }.get(tv.multiple_metric or "ebitda", ebitda)
        metric_value = metric_series[last]
        if metric_value > 0:
            terminal_value = metric_value * multiple

    if terminal_value:
        # Discounted from the end of the final projection year
        pv_terminal_value = terminal_value / (1 + discount_rate) ** n

    enterprise_value = sum(discounted_cash_flows) + pv_terminal_value

    eq = model.equity_value
    equity_value = (
        enterprise_value
        - eq.total_debt
        + eq.cash
        - eq.minority_interest
        + eq.investments_in_subsidiaries
        + eq.other_adjustments
    )

    return CalculatedFinancials(
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        gross_margin=_margin(gross_profit, revenue),
        opex=opex,
        ebitda=ebitda,
        ebitda_margin=_margin(ebitda, revenue),
        other_income=other_income,
        other_expenses=other_expenses,
        da=da,
        ebit=ebit,
        ebit_margin=_margin(ebit, revenue),
        taxes=taxes,
        net_income=net_income,
        net_income_margin=_margin(net_income, revenue),
        capex=capex,
        net_working_capital=net_working_capital,
        change_in_nwc=change_in_nwc,
        free_cash_flow=free_cash_flow,
        discounted_cash_flows=discounted_cash_flows,
        terminal_value=terminal_value,
        present_value_terminal_value=pv_terminal_value,
        discount_rate=discount_rate,
        enterprise_value=enterprise_value,
        equity_value=equity_value,
    )
