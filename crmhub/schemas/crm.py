from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional

from crmhub.models.crm import Stage
from crmhub.schemas.common import OptionalId


class LeadCreate(BaseModel):
    name: str = Field(min_length=1)
    company: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    stage: Stage = Stage.LEAD
    assigned_to: OptionalId = None
    notes: Optional[str] = None
    last_contact: Optional[datetime] = None


class LeadUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    stage: Optional[Stage] = None
    assigned_to: OptionalId = None
    notes: Optional[str] = None
    last_contact: Optional[datetime] = None


class LeadOut(BaseModel):
    id: int
    name: str
    company: str
    email: str
    phone: Optional[str] = None
    stage: Stage
    assigned_to: Optional[int] = None
    notes: Optional[str] = None
    last_contact: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class DealCreate(BaseModel):
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    value: int = Field(ge=0)
    stage: Stage = Stage.LEAD
    assigned_to: OptionalId = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None


class DealUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = Field(default=None, min_length=1)
    value: Optional[int] = Field(default=None, ge=0)
    stage: Optional[Stage] = None
    assigned_to: OptionalId = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None


class DealOut(BaseModel):
    id: int
    title: str
    company: str
    value: int
    stage: Stage
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }
