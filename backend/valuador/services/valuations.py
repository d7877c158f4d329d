"""
valuations.py — Persistence helpers for saved valuations

Purpose:
- Create / read / update / delete Valuation rows
- Keep `results_data` and `enterprise_value` consistent with `model_data`
  by recomputing the projection whenever the model is written

This module does NOT:
- Generate scenarios (see scenario_generation.py)
- Commit on behalf of callers beyond the single write it performs
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from valuador.core.logging import get_logger
from valuador.models.valuation import Valuation
from valuador.services.modeling.projection import calculate_financials
from valuador.services.modeling.types import CalculatedFinancials, FinancialModel

logger = get_logger(__name__)

# Plain metadata columns a PATCH may touch directly
_EDITABLE_FIELDS = ("name", "owner_id", "industry", "country", "company_name")


def load_model(valuation: Valuation) -> FinancialModel:
    """Parse the stored model JSON (raises pydantic.ValidationError if invalid)."""
    return FinancialModel.model_validate(valuation.model_data)


def _store_model(valuation: Valuation, model: FinancialModel) -> CalculatedFinancials:
    results = calculate_financials(model)
    valuation.model_data = model.model_dump(mode="json")
    valuation.results_data = results.to_dict()
    valuation.enterprise_value = results.enterprise_value
    return results


def create_valuation(
    db: Session,
    model: FinancialModel,
    name: Optional[str] = None,
    owner_id: Optional[str] = None,
    industry: Optional[str] = None,
    country: Optional[str] = None,
    company_name: Optional[str] = None,
) -> Valuation:
    valuation = Valuation(
        name=name,
        owner_id=owner_id,
        industry=industry,
        country=country,
        company_name=company_name,
    )
    _store_model(valuation, model)
    db.add(valuation)
    db.commit()
    db.refresh(valuation)
    logger.info("Created valuation %s (EV=%.2f)", valuation.id, valuation.enterprise_value)
    return valuation


def get_valuation(db: Session, valuation_id: str) -> Optional[Valuation]:
    return db.get(Valuation, valuation_id)


def list_valuations(db: Session, owner_id: Optional[str] = None) -> List[Valuation]:
    """Newest first, optionally filtered by owner."""
    query = db.query(Valuation)
    if owner_id is not None:
        query = query.filter(Valuation.owner_id == owner_id)
    return query.order_by(Valuation.created_at.desc()).all()


def update_valuation(
    db: Session,
    valuation: Valuation,
    model: Optional[FinancialModel] = None,
    **fields,
) -> Valuation:
    """
    Update metadata and, when `model` is given, replace the model and
    recompute its results. Unknown or None fields are ignored.
    """
    for key in _EDITABLE_FIELDS:
        value = fields.get(key)
        if value is not None:
            setattr(valuation, key, value)

    if model is not None:
        _store_model(valuation, model)

    db.commit()
    db.refresh(valuation)
    return valuation


def delete_valuation(db: Session, valuation: Valuation) -> None:
    db.delete(valuation)
    db.commit()
    logger.info("Deleted valuation %s", valuation.id)
