"""
Append-only audit log for operations, denials and administrative bypasses
"""
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
import logging

from metering.models.audit_record import AuditRecord
from metering.schemas.audit import AuditRecordCreate

logger = logging.getLogger(__name__)


class AuditService:
    """Service for the audit log"""

    @classmethod
    async def write(cls, db: AsyncSession, record: AuditRecordCreate) -> AuditRecord:
        """
        Append an audit record

        Args:
            db: Database session
            record: Record fields

        Returns:
            Stored AuditRecord
        """
        row = AuditRecord(**record.model_dump())
        db.add(row)
        await db.commit()
        await db.refresh(row)

        if row.was_bypassed:
            logger.info(
                f"Bypassed {row.operation_category} operation logged for {row.identity} "
                f"by {row.acting_administrator or 'system'} ({row.bypass_reason or 'no reason given'})"
            )
        return row

    @classmethod
    async def list_records(
        cls,
        db: AsyncSession,
        identity: Optional[str] = None,
        session_id: Optional[str] = None,
        bypassed_only: bool = False,
        since: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[AuditRecord]:
        """
        Query audit records, newest first

        Args:
            db: Database session
            identity: Only records for this identity
            session_id: Only records for this session
            bypassed_only: Only records where an override applied
            since: Only records created at or after this time
            limit: Maximum number of records

        Returns:
            List of AuditRecord
        """
        query = select(AuditRecord)

        if identity is not None:
            query = query.where(AuditRecord.identity == identity)
        if session_id is not None:
            query = query.where(AuditRecord.session_id == session_id)
        if bypassed_only:
            query = query.where(AuditRecord.was_bypassed.is_(True))
        if since is not None:
            query = query.where(AuditRecord.created_at >= since)

        query = query.order_by(AuditRecord.created_at.desc()).limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())
