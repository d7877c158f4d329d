"""
quick_valuation.py — Quick (no account) Valuation Endpoint

Purpose:
- Price Low / Base / High cases from a short per-year form.
- Nothing is persisted.
"""

from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from valuador.core.logging import get_logger
from valuador.services.modeling.quick_valuation import QuickValuationForm, run_quick_valuation

logger = get_logger(__name__)

router = APIRouter(
    prefix="/quick-valuation",
    tags=["quick-valuation"]
)


class QuickValuationCaseOut(BaseModel):
    name: str
    growth_delta: float
    margin_delta: float
    enterprise_value: float


class QuickValuationResponse(BaseModel):
    cases: List[QuickValuationCaseOut]


@router.post("", response_model=QuickValuationResponse)
async def quick_valuation(form: QuickValuationForm):
    """
    POST /quick-valuation

    Returns three cases (Low, Base, High). Growth and EBITDA margin move
    together by 5 points in the Low and High cases.
    """
    try:
        cases = run_quick_valuation(form)
        return QuickValuationResponse(
            cases=[
                QuickValuationCaseOut(
                    name=c.name,
                    growth_delta=c.growth_delta,
                    margin_delta=c.margin_delta,
                    enterprise_value=c.enterprise_value,
                )
                for c in cases
            ]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error running quick valuation")
        raise HTTPException(status_code=500, detail=f"Failed to run quick valuation: {str(e)}")
