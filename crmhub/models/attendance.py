# crmhub/models/attendance.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from crmhub.database import Base
from crmhub.utils.datetime_utils import utcnow


class Attendance(Base):
    """One mark-in/mark-out interval per user per reference-timezone day"""

    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    mark_in_time = Column(DateTime(timezone=True), nullable=False)
    mark_out_time = Column(DateTime(timezone=True), nullable=True)  # NULL while clocked in

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
        # At most one open interval per user, whatever the day
        Index(
            "uq_attendance_open_interval",
            "user_id",
            unique=True,
            postgresql_where=mark_out_time.is_(None),
            sqlite_where=mark_out_time.is_(None),
        ),
    )
