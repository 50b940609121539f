"""
Admission-related schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
import enum

from metering.core.formats import OperationCategory


class DecisionReason(str, enum.Enum):
    """Reason codes attached to every admission decision"""
    ALLOWED = "allowed"
    SUPER_BYPASS = "superuser_bypass"
    ENFORCEMENT_DISABLED = "enforcement_disabled"
    UNSUPPORTED_FORMAT = "unsupported_format"
    FILE_TOO_LARGE = "file_too_large"
    QUOTA_EXHAUSTED = "quota_exhausted"
    SERVICE_UNAVAILABLE = "service_unavailable"

    def __str__(self):
        return self.value


class OverrideContext(BaseModel):
    """Administrative override supplied with a request"""
    super_bypass: bool = False
    bypass_reason: Optional[str] = Field(None, max_length=255)
    acting_administrator: Optional[str] = Field(None, max_length=255)

    class Config:
        frozen = True


class EnforcementSettings(BaseModel):
    """Snapshot of the global enforcement configuration"""
    enforcement_enabled: bool = True
    size_ceilings_when_disabled: bool = False

    class Config:
        frozen = True


class UsageSnapshot(BaseModel):
    """Usage of one category in the current window"""
    category: OperationCategory
    used: int
    limit: int
    remaining: int


class AdmissionDecision(BaseModel):
    """Allow/deny verdict for one operation"""
    allowed: bool
    reason: DecisionReason
    message: Optional[str] = None
    was_bypassed: bool = False
    upgrade_suggested: Optional[str] = None
    category: Optional[OperationCategory] = None
    usage: Optional[UsageSnapshot] = None
    retryable: bool = False


class OperationRequest(BaseModel):
    """Operation descriptor sent by the HTTP caller"""
    filename: str = Field(..., min_length=1, max_length=255)
    file_size_bytes: int
    operation: str = "compress"
    page_context: Optional[str] = Field(None, max_length=255)
