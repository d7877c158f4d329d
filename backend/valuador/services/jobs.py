"""
jobs.py — Utilities for Recording and Inspecting Job Run Status

Purpose:
- Provide helper functions to:
    * Create job records
    * Update job status
    * Retrieve job summaries for the API
- Keeps job bookkeeping out of the API and the scenario generation runner.

This module does NOT:
- Execute scenario generation.
- Contain any valuation logic.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from valuador.models.job import AUTO_SCENARIOS, ScenarioJob


def get_job_by_id(db: Session, job_id: int) -> Optional[ScenarioJob]:
    return db.get(ScenarioJob, job_id)


def list_jobs_for_valuation(db: Session, valuation_id: str) -> List[ScenarioJob]:
    """Job history for a valuation, most recent first."""
    return (
        db.query(ScenarioJob)
        .filter(ScenarioJob.valuation_id == valuation_id)
        .order_by(ScenarioJob.started_at.desc(), ScenarioJob.id.desc())
        .all()
    )


def create_job(db: Session, valuation_id: str, job_type: str = AUTO_SCENARIOS) -> ScenarioJob:
    """Create and persist a new job record marked as 'running'."""
    job = ScenarioJob(valuation_id=valuation_id, job_type=job_type, status="running")
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def complete_job(db: Session, job: ScenarioJob, message: Optional[str] = None, details: Optional[dict] = None) -> None:
    job.mark_completed(message=message, details=details)
    db.commit()


def fail_job(db: Session, job: ScenarioJob, error_message: str) -> None:
    job.mark_failed(error_message)
    db.commit()
