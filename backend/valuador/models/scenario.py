"""
scenario.py — ORM Model for Min/Max Sensitivity Scenarios

Purpose:
- Persist one scenario of a valuation: the enterprise value range produced
  by moving one or more variables between a min and a max bound.
- Keep the perturbed models and their projections so a scenario can be
  inspected without recalculating.

Key Points:
- Scenario names are unique per valuation; auto-generated scenarios are
  upserted by name so regeneration never duplicates rows.
- Deleting a valuation deletes its scenarios.
"""

import datetime
import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, JSON, String, UniqueConstraint
from sqlalchemy.orm import relationship

from valuador.core.database import Base


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Scenario(Base):
    __tablename__ = "scenario"
    __table_args__ = (
        UniqueConstraint("valuation_id", "name", name="uq_scenario_valuation_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    valuation_id = Column(
        String(36),
        ForeignKey("valuation.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # Enterprise value range (min <= max)
    min_value = Column(Float, nullable=False)
    max_value = Column(Float, nullable=False)

    # Perturbed FinancialModel / CalculatedFinancials at each bound
    min_model_data = Column(JSON, nullable=True)
    max_model_data = Column(JSON, nullable=True)
    min_results_data = Column(JSON, nullable=True)
    max_results_data = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    valuation = relationship("Valuation", back_populates="scenarios")

    def __repr__(self):
        return f"<Scenario {self.name} | {self.min_value} - {self.max_value}>"
