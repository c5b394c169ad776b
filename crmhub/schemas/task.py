# crmhub/schemas/task.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from crmhub.models.task import TaskPriority, TaskStatus
from crmhub.schemas.common import OptionalId


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    assigned_to: OptionalId = None
    due_date: Optional[datetime] = None
    completed: bool = False


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assigned_to: OptionalId = None
    due_date: Optional[datetime] = None
    completed: Optional[bool] = None


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


def sync_completion(data: dict) -> dict:
    """Keep ``status`` and ``completed`` consistent when only one is sent"""
    status = data.get("status")
    if status is not None and "completed" not in data:
        data["completed"] = status == TaskStatus.DONE
    elif data.get("completed") is True and "status" not in data:
        data["status"] = TaskStatus.DONE
    return data
