"""
job.py — ORM Model for Background Scenario Generation Runs

Purpose:
- Record the status of work scheduled after a request has returned, such as
  generating the standard sensitivity scenarios for a saved valuation.
- Give the client something to poll: the HTTP response only carries the job id.

This is **not** a queue worker job (there is no Celery/Redis). The work runs
in-process via FastAPI BackgroundTasks; this table is its outcome log.

Key Points:
- Tracks start/end timestamps, status, type, and a short human-readable message.
- Stores structured details in JSON (ex: names of the scenarios written).
"""

import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from valuador.core.database import Base

AUTO_SCENARIOS = "auto-scenarios"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ScenarioJob(Base):
    __tablename__ = "scenario_job"

    id = Column(Integer, primary_key=True, index=True)

    # Not a foreign key: the log outlives a deleted valuation
    valuation_id = Column(String(36), nullable=False, index=True)

    job_type = Column(String, nullable=False, default=AUTO_SCENARIOS)

    # Status lifecycle: "running" → "completed" | "failed"
    status = Column(String, nullable=False, default="running")

    started_at = Column(DateTime(timezone=True), default=_utcnow)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    # Short readable message (ex: "Generated 3 scenarios")
    message = Column(String, nullable=True)

    # Structured run details (ex: {"scenarios": ["WACC (±2%)", ...]})
    details = Column(JSON, nullable=True)

    def mark_completed(self, message: str = None, details: dict = None):
        """
        Helper to finalize a successful job.
        """
        self.status = "completed"
        self.finished_at = _utcnow()
        if message:
            self.message = message
        if details:
            self.details = details

    def mark_failed(self, message: str):
        """
        Helper to finalize a failed job.
        """
        self.status = "failed"
        self.finished_at = _utcnow()
        self.message = message

    def __repr__(self):
        return f"<ScenarioJob {self.job_type} | {self.status} | {self.valuation_id}>"
