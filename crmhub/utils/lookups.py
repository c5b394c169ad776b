# crmhub/utils/lookups.py
from typing import Type, TypeVar

from sqlalchemy.orm import Session

from crmhub.core.exceptions import NotFound, ValidationError

T = TypeVar("T")


def get_or_404(db: Session, model: Type[T], object_id: int, label: str) -> T:
    obj = db.get(model, object_id)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def reject_nulls(data: dict, *fields: str) -> dict:
    """Partial updates may omit required columns but not clear them"""
    cleared = [field for field in fields if field in data and data[field] is None]
    if cleared:
        raise ValidationError(f"Cannot be empty: {', '.join(cleared)}")
    return data
