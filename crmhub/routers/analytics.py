# crmhub/routers/analytics.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from crmhub.database import get_db
from crmhub.models.user import User
from crmhub.schemas.analytics import DashboardMetrics
from crmhub.services.analytics import load_dashboard_metrics
from crmhub.utils.auth import get_current_user

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=DashboardMetrics)
def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Pipeline and task counters, computed fresh on every request"""
    return load_dashboard_metrics(db)
