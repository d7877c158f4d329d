"""
valuations.py — Saved Valuation API Endpoints

Purpose:
- Save, list, read, update and delete valuations (model inputs + results)
- Results are always computed server-side from `model_data`
- After a valuation is created, the standard sensitivity scenarios are
  generated in the background; the response carries the job id to poll
- Football-field chart data built from the saved scenarios
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from valuador.core.config import settings
from valuador.core.database import get_db, get_session_factory
from valuador.core.logging import get_logger
from valuador.services import valuations as valuation_service
from valuador.services.modeling.types import FinancialModel
from valuador.services.scenario_generation import schedule_auto_scenario_job
from valuador.services.scenarios import list_scenarios, scenarios_to_football_field

logger = get_logger(__name__)

router = APIRouter(
    prefix="/valuations",
    tags=["valuations"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class ValuationCreate(BaseModel):
    """Request body for saving a valuation."""
    name: Optional[str] = None
    owner_id: Optional[str] = None
    model_data: FinancialModel
    industry: Optional[str] = None
    country: Optional[str] = None
    company_name: Optional[str] = None
    generate_scenarios: bool = True


class ValuationUpdate(BaseModel):
    """Partial update; a new `model_data` triggers a recalculation."""
    name: Optional[str] = None
    owner_id: Optional[str] = None
    model_data: Optional[FinancialModel] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    company_name: Optional[str] = None


class ValuationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: Optional[str] = None
    name: Optional[str] = None
    model_data: Dict[str, Any]
    results_data: Optional[Dict[str, Any]] = None
    enterprise_value: Optional[float] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ValuationCreated(ValuationOut):
    scenario_job_id: Optional[int] = None


class FootballFieldRow(BaseModel):
    scenario: str
    min: float
    max: float
    base: float


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def get_valuation_or_404(db: Session, valuation_id: str):
    valuation = valuation_service.get_valuation(db, valuation_id)
    if valuation is None:
        raise HTTPException(status_code=404, detail=f"Valuation {valuation_id} not found")
    return valuation


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------

@router.post("", response_model=ValuationCreated, status_code=status.HTTP_201_CREATED)
def create_valuation(
    payload: ValuationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    POST /valuations

    Saves the model and its computed results. Scenario generation is
    scheduled only after the valuation row is committed, and never blocks
    or fails this request.
    """
    try:
        valuation = valuation_service.create_valuation(
            db,
            payload.model_data,
            name=payload.name,
            owner_id=payload.owner_id,
            industry=payload.industry,
            country=payload.country,
            company_name=payload.company_name,
        )

        job_id = None
        if payload.generate_scenarios and settings.AUTO_SCENARIOS_ENABLED:
            job = schedule_auto_scenario_job(db, background_tasks, valuation.id, session_factory)
            job_id = job.id

        out = ValuationOut.model_validate(valuation)
        return ValuationCreated(**out.model_dump(), scenario_job_id=job_id)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error creating valuation")
        raise HTTPException(status_code=500, detail=f"Failed to create valuation: {str(e)}")


@router.get("", response_model=List[ValuationOut])
def list_valuations(owner_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """
    GET /valuations?owner_id=...

    Newest first.
    """
    return valuation_service.list_valuations(db, owner_id=owner_id)


@router.get("/{valuation_id}", response_model=ValuationOut)
def get_valuation(valuation_id: str, db: Session = Depends(get_db)):
    return get_valuation_or_404(db, valuation_id)


@router.patch("/{valuation_id}", response_model=ValuationOut)
def update_valuation(valuation_id: str, payload: ValuationUpdate, db: Session = Depends(get_db)):
    """
    PATCH /valuations/{valuation_id}

    Existing scenarios are left untouched; call
    POST /valuations/{id}/scenarios/auto to regenerate them.
    """
    try:
        valuation = get_valuation_or_404(db, valuation_id)
        return valuation_service.update_valuation(
            db,
            valuation,
            model=payload.model_data,
            **payload.model_dump(exclude={"model_data"}),
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error updating valuation %s", valuation_id)
        raise HTTPException(status_code=500, detail=f"Failed to update valuation: {str(e)}")


@router.delete("/{valuation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_valuation(valuation_id: str, db: Session = Depends(get_db)):
    valuation = get_valuation_or_404(db, valuation_id)
    valuation_service.delete_valuation(db, valuation)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{valuation_id}/football-field", response_model=List[FootballFieldRow])
def football_field(valuation_id: str, db: Session = Depends(get_db)):
    """
    GET /valuations/{valuation_id}/football-field

    One row per saved scenario with the valuation's EV as the base marker.
    Empty when the valuation has no scenarios.
    """
    valuation = get_valuation_or_404(db, valuation_id)
    scenarios = list_scenarios(db, valuation_id)
    return scenarios_to_football_field(scenarios, valuation.enterprise_value or 0.0)
