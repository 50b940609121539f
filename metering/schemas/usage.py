"""
Usage summary schemas
"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class CategoryUsage(BaseModel):
    """Monthly usage of one category"""
    used: int
    limit: Optional[int] = None  # None means unlimited
    remaining: Optional[int] = None


class UsageSummary(BaseModel):
    """Usage statistics for display"""
    tier: str
    unlimited: bool
    regular: CategoryUsage
    raw: CategoryUsage
    monthly_bandwidth_bytes: int = 0
    window_started_at: Optional[datetime] = None
    window_resets_at: Optional[datetime] = None
