from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class AttendanceOut(BaseModel):
    id: int
    user_id: int
    date: str
    mark_in_time: datetime
    mark_out_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class AttendanceWithUser(AttendanceOut):
    user_name: str
    user_email: Optional[str] = None
