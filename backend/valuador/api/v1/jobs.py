"""
jobs.py — Background Job Status Endpoints (API Layer)

Purpose:
- Provide visibility into work that runs after a response is sent, such as
  generating the standard scenarios for a new valuation.
- There is no Celery/Redis: jobs run in-process with FastAPI BackgroundTasks
  and record their outcome on a ScenarioJob row, which clients poll here.

Key Interactions:
- valuador.models.job → ORM entity representing job runs and their metadata.
- valuador.services.jobs → helpers for recording and reading job status.
- valuador.services.scenario_generation → creates/updates job entries.

This API module should NOT:
- Execute scenario generation itself.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from valuador.core.database import get_db
from valuador.services.jobs import get_job_by_id, list_jobs_for_valuation

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class JobOut(BaseModel):
    """
    Reported job status.

    - status: "running", "completed", "failed"
    - message: short summary, or the error message of a failed run
    - details: e.g. {"scenarios": [...]} for a completed auto-scenario run
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    valuation_id: str
    job_type: str
    status: str
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------

@router.get("", response_model=List[JobOut])
def list_jobs(valuation_id: str = Query(...), db: Session = Depends(get_db)):
    """
    GET /jobs?valuation_id=...

    Returns all job records for the valuation, most recent first.
    """
    return list_jobs_for_valuation(db, valuation_id)


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, db: Session = Depends(get_db)):
    """
    GET /jobs/{job_id}
    """
    job = get_job_by_id(db, job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return job
