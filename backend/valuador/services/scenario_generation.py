"""
scenario_generation.py — Background generation of the standard scenarios

Purpose:
- Run the auto-scenario generator for a saved valuation after the HTTP
  response has been sent (scheduled with FastAPI BackgroundTasks)
- Upsert the generated scenarios and record the outcome on a ScenarioJob

The runner owns its session (the request session is closed by then) and
never raises: failures are logged and written to the job row, which is the
only completion/error channel the client sees.
"""

from typing import Callable

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from valuador.core.logging import get_logger
from valuador.services import jobs as job_service
from valuador.services.modeling.auto_scenarios import generate_auto_scenarios
from valuador.services.modeling.projection import calculate_financials
from valuador.services.scenarios import upsert_scenario
from valuador.services.valuations import get_valuation, load_model

logger = get_logger(__name__)


def run_auto_scenario_job(job_id: int, valuation_id: str, session_factory: Callable[[], Session]) -> None:
    db = session_factory()
    try:
        job = job_service.get_job_by_id(db, job_id)
        if job is None:
            logger.error("Scenario job %s not found; nothing to do", job_id)
            return

        try:
            valuation = get_valuation(db, valuation_id)
            if valuation is None:
                raise LookupError(f"Valuation {valuation_id} not found")

            model = load_model(valuation)
            base_results = calculate_financials(model)
            generated = generate_auto_scenarios(model, base_results)

            for scenario in generated:
                upsert_scenario(db, valuation_id, scenario)

            names = [s.name for s in generated]
            job_service.complete_job(
                db,
                job,
                message=f"Generated {len(names)} scenarios",
                details={"scenarios": names},
            )
            logger.info("Auto-scenarios for valuation %s: %s", valuation_id, names)

        except Exception as exc:
            logger.exception("Auto-scenario generation failed for valuation %s", valuation_id)
            db.rollback()
            try:
                job = job_service.get_job_by_id(db, job_id)
                if job is not None:
                    job_service.fail_job(db, job, str(exc))
            except Exception:
                logger.exception("Could not mark scenario job %s as failed", job_id)
    finally:
        db.close()


def schedule_auto_scenario_job(
    db: Session,
    background_tasks: BackgroundTasks,
    valuation_id: str,
    session_factory: Callable[[], Session],
):
    """Create a 'running' job row and queue its runner after the response."""
    job = job_service.create_job(db, valuation_id)
    background_tasks.add_task(run_auto_scenario_job, job.id, valuation_id, session_factory)
    logger.info("Scheduled auto-scenario job %s for valuation %s", job.id, valuation_id)
    return job
