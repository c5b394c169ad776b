# crmhub/routers/activities.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from crmhub.database import get_db
from crmhub.schemas.activity import ActivityOut
from crmhub.services.activity import DEFAULT_LIMIT, MAX_LIMIT, recent_activities
from crmhub.services.policy import Principal
from crmhub.utils.auth import get_principal

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=List[ActivityOut])
def list_activities(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return recent_activities(db, principal, limit)
