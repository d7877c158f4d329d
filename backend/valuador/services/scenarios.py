"""
scenarios.py — Persistence helpers for valuation scenarios

Purpose:
- CRUD for Scenario rows belonging to a valuation
- Idempotent upsert of generated scenarios, keyed by (valuation, name)
- Conversion of saved scenarios into football-field chart rows

Key Points:
- A scenario's EV range must satisfy min_value < max_value when entered
  by hand; generated scenarios may be flat (min == max).
- Name conflicts raise ScenarioNameConflict (HTTP 409 in the API layer).
"""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from valuador.core.logging import get_logger
from valuador.models.scenario import Scenario
from valuador.services.modeling.types import GeneratedScenario

logger = get_logger(__name__)

_EDITABLE_FIELDS = (
    "name",
    "description",
    "min_value",
    "max_value",
    "min_model_data",
    "max_model_data",
    "min_results_data",
    "max_results_data",
)


class ScenarioNameConflict(ValueError):
    """A scenario with this name already exists on the valuation."""


def validate_range(min_value: Optional[float], max_value: Optional[float]) -> None:
    if min_value is not None and max_value is not None and min_value >= max_value:
        raise ValueError("min_value must be less than max_value")


def _find_by_name(db: Session, valuation_id: str, name: str) -> Optional[Scenario]:
    return (
        db.query(Scenario)
        .filter(Scenario.valuation_id == valuation_id, Scenario.name == name)
        .first()
    )


def list_scenarios(db: Session, valuation_id: str) -> List[Scenario]:
    """Oldest first, so generated scenarios keep their generation order."""
    return (
        db.query(Scenario)
        .filter(Scenario.valuation_id == valuation_id)
        .order_by(Scenario.created_at.asc())
        .all()
    )


def get_scenario(db: Session, valuation_id: str, scenario_id: str) -> Optional[Scenario]:
    scenario = db.get(Scenario, scenario_id)
    if scenario is None or scenario.valuation_id != valuation_id:
        return None
    return scenario


def scenario_count(db: Session, valuation_id: str) -> int:
    return (
        db.query(func.count(Scenario.id))
        .filter(Scenario.valuation_id == valuation_id)
        .scalar()
    )


def create_scenario(db: Session, valuation_id: str, name: str, min_value: float, max_value: float, **fields) -> Scenario:
    validate_range(min_value, max_value)
    if _find_by_name(db, valuation_id, name) is not None:
        raise ScenarioNameConflict(f"Scenario '{name}' already exists")

    scenario = Scenario(
        valuation_id=valuation_id,
        name=name,
        min_value=min_value,
        max_value=max_value,
    )
    for key in _EDITABLE_FIELDS:
        if key in fields and fields[key] is not None:
            setattr(scenario, key, fields[key])

    db.add(scenario)
    db.commit()
    db.refresh(scenario)
    return scenario


def update_scenario(db: Session, scenario: Scenario, **fields) -> Scenario:
    """Apply the non-None fields; a changed range must stay valid."""
    updates = {k: v for k, v in fields.items() if k in _EDITABLE_FIELDS and v is not None}

    if "min_value" in updates or "max_value" in updates:
        validate_range(
            updates.get("min_value", scenario.min_value),
            updates.get("max_value", scenario.max_value),
        )

    new_name = updates.get("name")
    if new_name and new_name != scenario.name:
        if _find_by_name(db, scenario.valuation_id, new_name) is not None:
            raise ScenarioNameConflict(f"Scenario '{new_name}' already exists")

    for key, value in updates.items():
        setattr(scenario, key, value)

    db.commit()
    db.refresh(scenario)
    return scenario


def delete_scenario(db: Session, scenario: Scenario) -> None:
    db.delete(scenario)
    db.commit()


def upsert_scenario(db: Session, valuation_id: str, generated: GeneratedScenario) -> Scenario:
    """
    Insert or overwrite the scenario named `generated.name`.

    Does not commit; the caller commits once for the whole batch.
    """
    scenario = _find_by_name(db, valuation_id, generated.name)
    if scenario is None:
        scenario = Scenario(valuation_id=valuation_id, name=generated.name)
        db.add(scenario)

    scenario.description = generated.description
    scenario.min_value = generated.min_value
    scenario.max_value = generated.max_value
    scenario.min_model_data = generated.min_model.model_dump(mode="json")
    scenario.max_model_data = generated.max_model.model_dump(mode="json")
    scenario.min_results_data = generated.min_results.to_dict()
    scenario.max_results_data = generated.max_results.to_dict()

    # Make the row visible to the next lookup in the same batch
    db.flush()
    return scenario


def scenarios_to_football_field(scenarios: Sequence[Scenario], base_value: float) -> List[Dict[str, Any]]:
    """One chart row per scenario: {scenario, min, max, base}."""
    return [
        {
            "scenario": s.name,
            "min": s.min_value,
            "max": s.max_value,
            "base": base_value,
        }
        for s in scenarios
    ]
