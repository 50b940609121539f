"""
Audit record model (append-only operation log)
"""
from sqlalchemy import Column, String, Boolean, DateTime, Float
import uuid
import enum

from metering.core.clock import utcnow
from metering.db.base import Base


class AuditEvent(str, enum.Enum):
    """Kinds of audited events"""
    OPERATION = "operation"
    DENIED = "denied"

    def __str__(self):
        return self.value


class AuditRecord(Base):
    """
    One audited operation or denial. Rows are never updated or deleted.
    """
    __tablename__ = "operation_log"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    identity = Column(String(64), nullable=False, index=True)
    session_id = Column(String(128), nullable=False)

    event = Column(String(20), default=AuditEvent.OPERATION.value, nullable=False)
    operation_category = Column(String(20), nullable=False)
    file_format = Column(String(20), nullable=False, default="")
    file_size_mb = Column(Float, nullable=False, default=0.0)
    page_context = Column(String(255), nullable=True)

    # Override accountability
    was_bypassed = Column(Boolean, default=False, nullable=False, index=True)
    bypass_reason = Column(String(255), nullable=True)
    acting_administrator = Column(String(255), nullable=True)

    # Decision reason code for denials
    reason = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditRecord(id={self.id}, identity={self.identity}, event={self.event}, bypassed={self.was_bypassed})>"
