from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, Optional


class ActivityOut(BaseModel):
    id: int
    user_id: int
    activity_type: str
    entity_type: str
    entity_id: Optional[int] = None
    target_user_id: Optional[int] = None
    description: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
    user_name: str
    user_email: Optional[str] = None
    target_user_name: Optional[str] = None
    target_user_email: Optional[str] = None
