"""
Commits successful operations to the usage ledger and the audit log
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging

from metering.core.errors import LedgerUnavailableError
from metering.core.formats import OperationCategory, classify_file, file_extension
from metering.models.audit_record import AuditEvent, AuditRecord
from metering.schemas.admission import DecisionReason, EnforcementSettings, OverrideContext
from metering.schemas.audit import AuditRecordCreate
from metering.schemas.tier import MB, Tier
from metering.services.audit_service import AuditService
from metering.services.usage_ledger_service import UsageLedgerService

logger = logging.getLogger(__name__)


class RecorderService:
    """Service for recording completed operations"""

    @classmethod
    async def record(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        tier: Tier,
        filename: str,
        file_size_bytes: int,
        page_context: Optional[str],
        override: Optional[OverrideContext] = None,
        enforcement: Optional[EnforcementSettings] = None,
    ) -> Optional[AuditRecord]:
        """
        Record an operation that has already succeeded

        Metered tiers have their ledger incremented; every tier gets an audit
        record. An audit failure is logged and never raised, since the image
        work has already been delivered.

        Args:
            db: Database session
            identity: User id or "anonymous"
            session_id: Session identifier
            tier: Resolved tier
            filename: Name of the processed file
            file_size_bytes: Size of the processed file (negative is treated as 0)
            page_context: Page or integration the operation came from
            override: Administrative override, if any
            enforcement: Enforcement snapshot the operation was admitted under

        Returns:
            The stored AuditRecord, or None if nothing was audited

        Raises:
            LedgerUnavailableError: If the ledger increment failed
        """
        category = classify_file(filename)
        if category == OperationCategory.UNKNOWN:
            logger.warning(f"Not recording operation on unsupported file '{filename}' for {identity}")
            return None

        size = max(0, file_size_bytes or 0)

        try:
            await UsageLedgerService.record_usage(db, identity, session_id, tier, category, size)
        except SQLAlchemyError as e:
            logger.error(f"Usage ledger write failed for {identity}/{session_id}: {e}")
            await db.rollback()
            raise LedgerUnavailableError() from e

        override = override or OverrideContext()
        enforcement_off = enforcement is not None and not enforcement.enforcement_enabled
        was_bypassed = override.super_bypass or enforcement_off

        bypass_reason = None
        if override.super_bypass:
            bypass_reason = override.bypass_reason or DecisionReason.SUPER_BYPASS.value
        elif enforcement_off:
            bypass_reason = DecisionReason.ENFORCEMENT_DISABLED.value

        record = AuditRecordCreate(
            identity=identity,
            session_id=session_id,
            event=AuditEvent.OPERATION,
            operation_category=category.value,
            file_format=file_extension(filename),
            file_size_mb=round(size / MB, 2),
            page_context=page_context,
            was_bypassed=was_bypassed,
            bypass_reason=bypass_reason,
            acting_administrator=override.acting_administrator if override.super_bypass else None,
        )

        try:
            return await AuditService.write(db, record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to write audit record for {identity}/{session_id}: {e}")
            await db.rollback()
            return None
