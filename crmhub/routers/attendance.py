# crmhub/routers/attendance.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crmhub.config.settings import Settings
from crmhub.database import get_db
from crmhub.models.user import User
from crmhub.schemas.attendance import AttendanceOut, AttendanceWithUser
from crmhub.services.attendance import AttendanceService
from crmhub.services.policy import Principal
from crmhub.utils.auth import get_current_user, get_principal, get_settings

router = APIRouter(prefix="/attendance", tags=["attendance"])


def get_attendance_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AttendanceService:
    return AttendanceService(db, settings.reference_timezone)


@router.get("", response_model=List[AttendanceWithUser])
def list_attendance(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    principal: Principal = Depends(get_principal),
    service: AttendanceService = Depends(get_attendance_service),
):
    """Admins see everyone, managers their team and themselves, employees themselves"""
    return service.list_attendance(principal, start_date, end_date)


@router.get("/my", response_model=List[AttendanceOut])
def my_attendance(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.my_attendance(current_user.id, start_date, end_date)


@router.post("/mark-in", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
def mark_in(
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.mark_in(current_user)


@router.patch("/{record_id}/mark-out", response_model=AttendanceOut)
def mark_out(
    record_id: int,
    principal: Principal = Depends(get_principal),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.mark_out(record_id, principal)
