# crmhub/services/attendance.py
import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from crmhub.core.exceptions import (
    AlreadyClosed,
    AlreadyMarkedToday,
    AlreadyOpen,
    Forbidden,
    InvalidOrdering,
    NotFound,
)
from crmhub.models.attendance import Attendance
from crmhub.models.user import User
from crmhub.services.activity import log_activity
from crmhub.services.policy import Operation, Principal, is_permitted, visibility_scope
from crmhub.utils.datetime_utils import as_utc, reference_date, utcnow

logger = logging.getLogger(__name__)


class AttendanceService:
    """Mark-in / mark-out state machine, one interval per user per day.

    Days are calendar days in the reference timezone. The checks below keep
    the common case fast and the error messages precise; the unique
    constraints on the attendance table are what actually guarantee a single
    open interval under concurrent requests.
    """

    def __init__(self, db: Session, reference_timezone: str):
        self.db = db
        self.reference_timezone = reference_timezone

    def _open_interval(self, user_id: int) -> Optional[Attendance]:
        return (
            self.db.query(Attendance)
            .filter(Attendance.user_id == user_id, Attendance.mark_out_time.is_(None))
            .first()
        )

    def _record_for_day(self, user_id: int, day: str) -> Optional[Attendance]:
        return (
            self.db.query(Attendance)
            .filter(Attendance.user_id == user_id, Attendance.date == day)
            .first()
        )

    def mark_in(self, user: User, now: Optional[datetime] = None) -> Attendance:
        now = now or utcnow()
        today = reference_date(self.reference_timezone, now).isoformat()

        if self._open_interval(user.id):
            raise AlreadyOpen()
        if self._record_for_day(user.id, today):
            raise AlreadyMarkedToday()

        record = Attendance(user_id=user.id, date=today, mark_in_time=now)
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError:
            # A concurrent mark-in won; report which constraint we hit
            self.db.rollback()
            logger.info("Concurrent mark-in rejected for user %s", user.id)
            if self._open_interval(user.id):
                raise AlreadyOpen()
            raise AlreadyMarkedToday()

        log_activity(
            self.db,
            actor_id=user.id,
            activity_type="marked_in",
            entity_type="attendance",
            entity_id=record.id,
            description=f"{user.name} marked in",
            details={"date": today},
        )
        self.db.commit()
        self.db.refresh(record)
        return record

    def mark_out(self, record_id: int, principal: Principal, now: Optional[datetime] = None) -> Attendance:
        now = now or utcnow()

        record = self.db.get(Attendance, record_id)
        if not record:
            raise NotFound("Attendance record not found")
        if record.user_id != principal.user_id and not principal.is_admin:
            raise Forbidden("You can only mark out your own attendance")
        if record.mark_out_time is not None:
            raise AlreadyClosed()
        if as_utc(now) <= as_utc(record.mark_in_time):
            raise InvalidOrdering()

        record.mark_out_time = now
        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="marked_out",
            entity_type="attendance",
            entity_id=record.id,
            target_user_id=record.user_id if record.user_id != principal.user_id else None,
            description="Marked out",
            details={"date": record.date},
        )
        self.db.commit()
        self.db.refresh(record)
        return record

    def my_attendance(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Attendance]:
        query = self.db.query(Attendance).filter(Attendance.user_id == user_id)
        query = self._date_range(query, start_date, end_date)
        return query.order_by(Attendance.date.desc()).all()

    def list_attendance(
        self,
        principal: Principal,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[dict]:
        """Attendance rows visible to the principal, with the owner's name"""
        query = self.db.query(Attendance).options(joinedload(Attendance.user))

        if not is_permitted(principal.role, Operation.VIEW_ALL_ATTENDANCE):
            scope = visibility_scope(principal) or frozenset()
            query = query.filter(Attendance.user_id.in_(list(scope)))

        query = self._date_range(query, start_date, end_date)
        records = query.order_by(Attendance.date.desc(), Attendance.mark_in_time.desc()).all()
        return [self._with_user(record) for record in records]

    @staticmethod
    def _date_range(query, start_date: Optional[date], end_date: Optional[date]):
        # ISO dates compare correctly as strings
        if start_date:
            query = query.filter(Attendance.date >= start_date.isoformat())
        if end_date:
            query = query.filter(Attendance.date <= end_date.isoformat())
        return query

    @staticmethod
    def _with_user(record: Attendance) -> dict:
        user = record.user
        return {
            "id": record.id,
            "user_id": record.user_id,
            "date": record.date,
            "mark_in_time": record.mark_in_time,
            "mark_out_time": record.mark_out_time,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
            "user_name": user.name if user else "Unknown User",
            "user_email": user.email if user else None,
        }
