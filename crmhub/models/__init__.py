from crmhub.models.user import User, UserRole, UserStatus
from crmhub.models.crm import Lead, Deal, Stage
from crmhub.models.employee import Employee
from crmhub.models.task import Task, TaskStatus, TaskPriority
from crmhub.models.attendance import Attendance
from crmhub.models.social import (
    SocialProfile,
    PostingSchedule,
    Platform,
    AccountType,
    PostType,
    PostStatus,
    ApprovalStatus,
)
from crmhub.models.activity import Activity

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Lead",
    "Deal",
    "Stage",
    "Employee",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "Attendance",
    "SocialProfile",
    "PostingSchedule",
    "Platform",
    "AccountType",
    "PostType",
    "PostStatus",
    "ApprovalStatus",
    "Activity",
]
