from pydantic import BaseModel, EmailStr
from typing import List, Optional
from datetime import datetime

from crmhub.models.user import UserRole, UserStatus
from crmhub.schemas.common import OptionalId


class UserBasic(BaseModel):
    id: int
    name: str
    email: str
    role: str

    model_config = {
        "from_attributes": True
    }


class UserOut(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: str
    profile_image_url: Optional[str] = None
    role: str
    status: str
    manager_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    profile_image_url: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    manager_id: OptionalId = None


class PermissionsOut(BaseModel):
    role: str
    operations: List[str]
    team_member_ids: List[int]
