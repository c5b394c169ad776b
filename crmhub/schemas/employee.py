from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from crmhub.schemas.user import UserBasic


class EmployeeCreate(BaseModel):
    user_id: int
    department: str = Field(min_length=1)
    phone: Optional[str] = None
    performance_score: int = Field(default=0, ge=0, le=100)


class EmployeeUpdate(BaseModel):
    department: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    performance_score: Optional[int] = Field(default=None, ge=0, le=100)


class EmployeeOut(BaseModel):
    id: int
    user_id: int
    department: str
    phone: Optional[str] = None
    performance_score: int
    created_at: datetime
    updated_at: datetime
    user: Optional[UserBasic] = None

    model_config = {
        "from_attributes": True
    }
