# crmhub/models/user.py
import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import backref, relationship

from crmhub.database import Base
from crmhub.utils.datetime_utils import utcnow


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    # Unset for legacy/demo rows; see Settings.allow_passwordless_login
    hashed_password = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.EMPLOYEE.value)
    status = Column(String, nullable=False, default=UserStatus.ACTIVE.value)
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    manager = relationship("User", remote_side=[id], backref=backref("team_members", passive_deletes=True))

    @property
    def name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.email

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
