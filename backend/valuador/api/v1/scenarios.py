"""
scenarios.py — Valuation Scenario API Endpoints

Purpose:
- CRUD for min/max sensitivity scenarios of a saved valuation
- Trigger (re)generation of the three standard scenarios
- Ad-hoc evaluation of arbitrary variable adjustments (not persisted)
- List the scenario variables with their current base values

Key Interactions:
- valuador.services.scenarios → persistence
- valuador.services.modeling.scenario_calculator → min/max evaluation
- valuador.services.scenario_generation → background auto-scenarios
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from valuador.api.v1.valuations import get_valuation_or_404
from valuador.core.database import get_db, get_session_factory
from valuador.core.logging import get_logger
from valuador.services import scenarios as scenario_service
from valuador.services.modeling.projection import calculate_financials
from valuador.services.modeling.scenario_calculator import (
    calculate_scenario_values,
    generate_scenario_description,
)
from valuador.services.modeling.scenario_variables import (
    SCENARIO_VARIABLES,
    format_variable_value,
    get_variable_base_value,
    get_variable_by_id,
)
from valuador.services.modeling.types import FinancialModel, VariableAdjustment
from valuador.services.scenario_generation import schedule_auto_scenario_job
from valuador.services.valuations import load_model

logger = get_logger(__name__)

router = APIRouter(
    prefix="/valuations/{valuation_id}/scenarios",
    tags=["scenarios"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class ScenarioCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    min_value: float
    max_value: float
    min_model_data: Optional[Dict[str, Any]] = None
    max_model_data: Optional[Dict[str, Any]] = None
    min_results_data: Optional[Dict[str, Any]] = None
    max_results_data: Optional[Dict[str, Any]] = None


class ScenarioUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    min_model_data: Optional[Dict[str, Any]] = None
    max_model_data: Optional[Dict[str, Any]] = None
    min_results_data: Optional[Dict[str, Any]] = None
    max_results_data: Optional[Dict[str, Any]] = None


class ScenarioOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    valuation_id: str
    name: str
    description: Optional[str] = None
    min_value: float
    max_value: float
    min_model_data: Optional[Dict[str, Any]] = None
    max_model_data: Optional[Dict[str, Any]] = None
    min_results_data: Optional[Dict[str, Any]] = None
    max_results_data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdjustmentIn(BaseModel):
    variable_id: str
    min_value: float
    max_value: float


class CalculateRequest(BaseModel):
    """Evaluate adjustments against `model_data`, or the saved model when omitted."""
    adjustments: List[AdjustmentIn] = Field(..., min_length=1)
    model_data: Optional[FinancialModel] = None


class CalculateResponse(BaseModel):
    min_value: float
    max_value: float
    description: str
    min_model_data: Dict[str, Any]
    max_model_data: Dict[str, Any]
    min_results_data: Dict[str, Any]
    max_results_data: Dict[str, Any]


class ScenarioVariableOut(BaseModel):
    id: str
    label: str
    description: str
    unit: str
    step: float
    base_value: Optional[float] = None
    formatted_base_value: Optional[str] = None


class JobScheduled(BaseModel):
    job_id: int
    status: str


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def get_scenario_or_404(db: Session, valuation_id: str, scenario_id: str):
    scenario = scenario_service.get_scenario(db, valuation_id, scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")
    return scenario


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------

@router.post("/auto", response_model=JobScheduled, status_code=status.HTTP_202_ACCEPTED)
def generate_auto_scenarios(
    valuation_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    POST /valuations/{valuation_id}/scenarios/auto

    (Re)generates the three standard scenarios in the background. Existing
    scenarios with the same names are overwritten, others are kept.
    """
    get_valuation_or_404(db, valuation_id)
    job = schedule_auto_scenario_job(db, background_tasks, valuation_id, session_factory)
    return JobScheduled(job_id=job.id, status=job.status)


@router.get("/variables", response_model=List[ScenarioVariableOut])
def list_scenario_variables(valuation_id: str, db: Session = Depends(get_db)):
    """
    GET /valuations/{valuation_id}/scenarios/variables

    Every scenario variable with its base value in the saved model
    (None when the model does not use that variable).
    """
    try:
        valuation = get_valuation_or_404(db, valuation_id)
        model = load_model(valuation)
        results = calculate_financials(model)

        out = []
        for variable in SCENARIO_VARIABLES:
            base = get_variable_base_value(variable.id, model, results)
            out.append(
                ScenarioVariableOut(
                    id=variable.id,
                    label=variable.label,
                    description=variable.description,
                    unit=variable.unit,
                    step=variable.step,
                    base_value=base,
                    formatted_base_value=format_variable_value(variable, base) if base is not None else None,
                )
            )
        return out
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error resolving scenario variables for %s", valuation_id)
        raise HTTPException(status_code=500, detail=f"Failed to resolve scenario variables: {str(e)}")


@router.post("/calculate", response_model=CalculateResponse)
def calculate_scenario(valuation_id: str, payload: CalculateRequest, db: Session = Depends(get_db)):
    """
    POST /valuations/{valuation_id}/scenarios/calculate

    Returns the EV range for the given adjustments without saving it.
    """
    try:
        valuation = get_valuation_or_404(db, valuation_id)

        unknown = [a.variable_id for a in payload.adjustments if get_variable_by_id(a.variable_id) is None]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown scenario variables: {', '.join(unknown)}")

        model = payload.model_data or load_model(valuation)
        adjustments = [
            VariableAdjustment(variable_id=a.variable_id, min_value=a.min_value, max_value=a.max_value)
            for a in payload.adjustments
        ]
        result = calculate_scenario_values(model, adjustments)

        return CalculateResponse(
            min_value=result.min_value,
            max_value=result.max_value,
            description=generate_scenario_description(adjustments),
            min_model_data=result.min_model.model_dump(mode="json"),
            max_model_data=result.max_model.model_dump(mode="json"),
            min_results_data=result.min_results.to_dict(),
            max_results_data=result.max_results.to_dict(),
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error calculating scenario for %s", valuation_id)
        raise HTTPException(status_code=500, detail=f"Failed to calculate scenario: {str(e)}")


@router.get("", response_model=List[ScenarioOut])
def list_scenarios(valuation_id: str, db: Session = Depends(get_db)):
    get_valuation_or_404(db, valuation_id)
    return scenario_service.list_scenarios(db, valuation_id)


@router.post("", response_model=ScenarioOut, status_code=status.HTTP_201_CREATED)
def create_scenario(valuation_id: str, payload: ScenarioCreate, db: Session = Depends(get_db)):
    """
    POST /valuations/{valuation_id}/scenarios

    400 when min_value >= max_value, 409 when the name is taken.
    """
    try:
        get_valuation_or_404(db, valuation_id)
        return scenario_service.create_scenario(db, valuation_id, **payload.model_dump())
    except HTTPException:
        raise
    except scenario_service.ScenarioNameConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error creating scenario for %s", valuation_id)
        raise HTTPException(status_code=500, detail=f"Failed to create scenario: {str(e)}")


@router.get("/{scenario_id}", response_model=ScenarioOut)
def get_scenario(valuation_id: str, scenario_id: str, db: Session = Depends(get_db)):
    return get_scenario_or_404(db, valuation_id, scenario_id)


@router.patch("/{scenario_id}", response_model=ScenarioOut)
def update_scenario(valuation_id: str, scenario_id: str, payload: ScenarioUpdate, db: Session = Depends(get_db)):
    try:
        scenario = get_scenario_or_404(db, valuation_id, scenario_id)
        return scenario_service.update_scenario(db, scenario, **payload.model_dump())
    except HTTPException:
        raise
    except scenario_service.ScenarioNameConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error updating scenario %s", scenario_id)
        raise HTTPException(status_code=500, detail=f"Failed to update scenario: {str(e)}")


@router.delete("/{scenario_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_scenario(valuation_id: str, scenario_id: str, db: Session = Depends(get_db)):
    scenario = get_scenario_or_404(db, valuation_id, scenario_id)
    scenario_service.delete_scenario(db, scenario)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
