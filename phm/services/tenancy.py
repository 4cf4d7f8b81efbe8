# phm/services/tenancy.py
from typing import Any, Dict, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from phm.core.errors import NotFoundError, ValidationError

T = TypeVar("T")


def get_owned_or_404(db: Session, model: Type[T], entity_id: Optional[int], account_id: int, label: str) -> T:
    """
    Fetch ``model`` by id inside one account. Rows of other accounts are
    reported exactly like missing rows.
    """
    obj = None
    if entity_id is not None:
        obj = (
            db.query(model)
            .filter(model.id == entity_id, model.account_id == account_id)
            .first()
        )
    if obj is None:
        raise NotFoundError(label)
    return obj


def reject_nulls(changes: Dict[str, Any], required: Iterable[str]) -> None:
    """Sending null for a column that cannot be empty is a validation error."""
    nulled = [f for f in required if f in changes and changes[f] is None]
    if nulled:
        raise ValidationError(
            "Invalid request data",
            details=[{"field": f, "message": "Field cannot be null", "type": "null"} for f in nulled],
        )


def apply_update(obj, payload: BaseModel, required: Iterable[str] = ()) -> Dict[str, Any]:
    """Copy the fields the client actually sent onto ``obj``."""
    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, required)
    for field, value in changes.items():
        setattr(obj, field, value)
    return changes
