"""
Shared fixtures for the valuation engine tests.

- `risk_profile`: the reference profile (WACC ≈ 9.78%)
- `simple_model`: a 3-year model whose figures are easy to check by hand
- `db` / `session_factory`: in-memory SQLite with all tables created
- `client`: FastAPI TestClient wired to the in-memory database
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from valuador.core.database import get_db, get_session_factory, init_db
from valuador.main import app
from valuador.services.modeling.types import (
    FinancialModel,
    LineItemAssumptions,
    ModelPeriods,
    RiskProfile,
    TerminalValueAssumptions,
)


def percent_of_revenue(value: float) -> LineItemAssumptions:
    return LineItemAssumptions(
        input_method="percentOfRevenue", percent_method="uniform", percent_of_revenue=value
    )


def make_model(**overrides) -> FinancialModel:
    """
    Revenue 100 growing 10%/yr for 3 years, COGS 40%, opex 20%
    (EBITDA margin 40%), D&A 5%, capex 5%, taxes 25% of EBIT, no NWC,
    2% terminal growth.
    """
    fields = dict(
        periods=ModelPeriods(number_of_years=3),
        revenue=LineItemAssumptions(
            input_method="growth", growth_method="uniform", base_value=100.0, growth_rate=10.0
        ),
        cogs=LineItemAssumptions(input_method="revenueMargin", revenue_margin_percent=40.0),
        opex=percent_of_revenue(20.0),
        da=percent_of_revenue(5.0),
        capex=percent_of_revenue(5.0),
        taxes=LineItemAssumptions(
            input_method="percentOfEBIT", percent_method="uniform", percent_of_ebit=25.0
        ),
        terminal_value=TerminalValueAssumptions(method="growth", growth_rate=2.0),
    )
    fields.update(overrides)
    return FinancialModel(**fields)


@pytest.fixture
def risk_profile() -> RiskProfile:
    return RiskProfile(
        risk_free_rate=0.04,
        levered_beta=1.2,
        equity_risk_premium=0.05,
        country_risk_premium=0.02,
        adjusted_default_spread=0.015,
        company_spread=0.01,
        de_ratio=0.5,
        corporate_tax_rate=0.3,
    )


@pytest.fixture
def simple_model() -> FinancialModel:
    return make_model()


@pytest.fixture
def model_with_wacc(risk_profile) -> FinancialModel:
    return make_model(risk_profile=risk_profile)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    # No context manager: the app lifespan would create tables on the
    # configured database instead of the in-memory one
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def model_factory():
    """Build `make_model()` variants: model_factory(opex=..., periods=...)."""
    return make_model
