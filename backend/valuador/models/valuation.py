"""
valuation.py — ORM Model for Saved Valuations

Purpose:
- Store a user's complete DCF model (inputs) and its computed results.
- Act as the parent record for sensitivity scenarios (see scenario.py).

Key Points:
- `model_data` is the serialized FinancialModel (see services/modeling/types.py).
- `results_data` is the serialized CalculatedFinancials for that model; it is
  always recomputed server-side when `model_data` changes.
- `enterprise_value` is denormalized from the results for listing/sorting.
"""

import datetime
import uuid

from sqlalchemy import Column, DateTime, Float, JSON, String
from sqlalchemy.orm import relationship

from valuador.core.database import Base


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Valuation(Base):
    __tablename__ = "valuation"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Free-form owner reference; there is no user table in this service
    owner_id = Column(String, nullable=True, index=True)

    name = Column(String, nullable=True)

    # Serialized FinancialModel
    model_data = Column(JSON, nullable=False)

    # Serialized CalculatedFinancials
    results_data = Column(JSON, nullable=True)

    enterprise_value = Column(Float, nullable=True)

    # Descriptive metadata
    industry = Column(String, nullable=True)
    country = Column(String, nullable=True)
    company_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    scenarios = relationship(
        "Scenario",
        back_populates="valuation",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Valuation {self.id} | {self.name} | EV={self.enterprise_value}>"
