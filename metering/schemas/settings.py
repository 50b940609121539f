"""
Administrative settings schemas
"""
from pydantic import BaseModel
from typing import Optional


class EnforcementUpdate(BaseModel):
    """Request body for toggling global enforcement"""
    enabled: bool


class EnforcementStatus(BaseModel):
    """Current global enforcement configuration"""
    enforcement_enabled: bool
    size_ceilings_when_disabled: bool
    updated_by: Optional[str] = None
