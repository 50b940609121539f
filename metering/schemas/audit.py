"""
Audit log schemas
"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from metering.models.audit_record import AuditEvent


class AuditRecordCreate(BaseModel):
    """Fields of a new audit record"""
    identity: str
    session_id: str
    event: AuditEvent = AuditEvent.OPERATION.value
    operation_category: str
    file_format: str = ""
    file_size_mb: float = 0.0
    page_context: Optional[str] = None
    was_bypassed: bool = False
    bypass_reason: Optional[str] = None
    acting_administrator: Optional[str] = None
    reason: Optional[str] = None

    class Config:
        use_enum_values = True


class AuditRecordResponse(AuditRecordCreate):
    """Stored audit record"""
    id: str
    created_at: datetime

    class Config:
        from_attributes = True
