"""
wacc.py — Cost of Capital API Endpoint

Purpose:
- Compute the WACC breakdown for a risk profile without saving anything.
- Used by the model editor to preview the discount rate while inputs change.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from valuador.core.logging import get_logger
from valuador.services.modeling.types import RiskProfile
from valuador.services.modeling.wacc import calculate_levered_beta, calculate_wacc_components

logger = get_logger(__name__)

router = APIRouter(
    prefix="/wacc",
    tags=["wacc"]
)


class WaccResponse(BaseModel):
    """All values are decimals except wacc_percent."""
    cost_of_equity: float
    cost_of_debt: float
    equity_weight: float
    debt_weight: float
    wacc: float
    wacc_percent: float
    # Hamada relevering of risk_profile.unlevered_beta, when one is given
    levered_beta_from_unlevered: Optional[float] = None


@router.post("", response_model=WaccResponse)
async def compute_wacc(risk_profile: RiskProfile):
    """
    POST /wacc

    Returns cost of equity, cost of debt, capital weights and the final WACC.
    When the profile carries an unlevered beta, its relevered value at the
    profile's D/E and tax rate is returned alongside for comparison.
    """
    try:
        components = calculate_wacc_components(risk_profile)
        relevered = None
        if risk_profile.unlevered_beta is not None:
            relevered = calculate_levered_beta(
                risk_profile.unlevered_beta,
                risk_profile.de_ratio,
                risk_profile.corporate_tax_rate,
            )
        return WaccResponse(
            cost_of_equity=components.cost_of_equity,
            cost_of_debt=components.cost_of_debt,
            equity_weight=components.equity_weight,
            debt_weight=components.debt_weight,
            wacc=components.wacc,
            wacc_percent=components.wacc * 100,
            levered_beta_from_unlevered=relevered,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error computing WACC")
        raise HTTPException(status_code=500, detail=f"Failed to compute WACC: {str(e)}")
