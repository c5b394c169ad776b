from pydantic import BaseModel
from typing import List


class DashboardMetrics(BaseModel):
    total_leads: int
    active_deals: int
    total_revenue: int
    conversion_rate: int
    task_completion_rate: int
    active_employees: int


class PlatformCount(BaseModel):
    platform: str
    count: int


class PostingStats(BaseModel):
    by_platform: List[PlatformCount]
    upcoming: int
    pending: int
