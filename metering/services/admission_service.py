"""
Admission control: decides whether an operation may run

Rules, first match wins:
1. Unsupported file format -> deny
2. Administrative super bypass -> allow (bypassed)
3. Global enforcement disabled -> allow (bypassed)
4. Unmetered tier -> per-file size ceiling only
5. Metered tier -> size ceiling, then monthly quota from the ledger
6. Otherwise allow, with a usage snapshot

Rules 1-4 and the size part of 5 are stateless (``precheck``) and run before
any ledger read.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging

from metering.core.config import settings
from metering.core.formats import OperationCategory, classify_file, file_extension
from metering.models.audit_record import AuditEvent
from metering.schemas.admission import (
    AdmissionDecision,
    DecisionReason,
    EnforcementSettings,
    OverrideContext,
    UsageSnapshot,
)
from metering.schemas.audit import AuditRecordCreate
from metering.schemas.tier import MB, Tier
from metering.services.audit_service import AuditService
from metering.services.usage_ledger_service import UsageLedgerService, category_count

logger = logging.getLogger(__name__)

NO_OVERRIDE = OverrideContext()


def _size_check(tier: Tier, category: OperationCategory, file_size_bytes: int) -> Optional[AdmissionDecision]:
    ceiling = tier.size_ceiling_for(category)
    if file_size_bytes <= ceiling:
        return None

    return AdmissionDecision(
        allowed=False,
        reason=DecisionReason.FILE_TOO_LARGE,
        message=(
            f"File too large. Maximum {ceiling // MB}MB for {category.value} files "
            f"on the {tier.display_name} plan."
        ),
        upgrade_suggested=tier.upgrade_to,
        category=category,
    )


def precheck(
    tier: Tier,
    filename: str,
    file_size_bytes: int,
    enforcement: EnforcementSettings,
    override: Optional[OverrideContext] = None,
) -> Optional[AdmissionDecision]:
    """
    Apply every rule that needs no ledger state

    Returns:
        A final decision, or None when a metered tier must consult the ledger
    """
    override = override or NO_OVERRIDE
    category = classify_file(filename)

    if category == OperationCategory.UNKNOWN:
        return AdmissionDecision(
            allowed=False,
            reason=DecisionReason.UNSUPPORTED_FORMAT,
            message=f"Unsupported file format '{file_extension(filename) or filename}'",
            category=category,
        )

    if override.super_bypass:
        return AdmissionDecision(
            allowed=True,
            reason=DecisionReason.SUPER_BYPASS,
            was_bypassed=True,
            category=category,
        )

    if not enforcement.enforcement_enabled:
        if enforcement.size_ceilings_when_disabled:
            too_large = _size_check(tier, category, file_size_bytes)
            if too_large is not None:
                return too_large
        return AdmissionDecision(
            allowed=True,
            reason=DecisionReason.ENFORCEMENT_DISABLED,
            was_bypassed=True,
            category=category,
        )

    too_large = _size_check(tier, category, file_size_bytes)
    if too_large is not None:
        return too_large

    if not tier.is_metered:
        return AdmissionDecision(allowed=True, reason=DecisionReason.ALLOWED, category=category)

    return None


def evaluate_quota(tier: Tier, category: OperationCategory, used: int) -> AdmissionDecision:
    """Compare a metered tier's current usage against its monthly allowance"""
    limit = tier.monthly_limit_for(category)
    snapshot = UsageSnapshot(
        category=category,
        used=used,
        limit=limit,
        remaining=max(0, limit - used),
    )

    if used >= limit:
        return AdmissionDecision(
            allowed=False,
            reason=DecisionReason.QUOTA_EXHAUSTED,
            message=(
                f"You've reached your monthly limit of {limit} {category.value} operations. "
                f"Upgrade for unlimited processing."
            ),
            upgrade_suggested=tier.upgrade_to,
            category=category,
            usage=snapshot,
        )

    return AdmissionDecision(allowed=True, reason=DecisionReason.ALLOWED, category=category, usage=snapshot)


class AdmissionService:
    """Service for admission decisions"""

    @classmethod
    async def decide(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        tier: Tier,
        filename: str,
        file_size_bytes: int,
        enforcement: EnforcementSettings,
        override: Optional[OverrideContext] = None,
    ) -> AdmissionDecision:
        """
        Decide whether an operation may proceed

        Args:
            db: Database session
            identity: User id or "anonymous"
            session_id: Session identifier
            tier: Resolved tier
            filename: Name of the uploaded file
            file_size_bytes: Declared size
            enforcement: Global enforcement snapshot
            override: Administrative override, if any

        Returns:
            AdmissionDecision. Ledger failures come back as a retryable
            SERVICE_UNAVAILABLE denial rather than an exception.
        """
        decision = precheck(tier, filename, file_size_bytes, enforcement, override)

        if decision is None:
            category = classify_file(filename)
            try:
                entry = await UsageLedgerService.get_current(db, identity, session_id)
            except SQLAlchemyError as e:
                logger.error(f"Usage ledger read failed for {identity}/{session_id}: {e}")
                await db.rollback()
                return AdmissionDecision(
                    allowed=False,
                    reason=DecisionReason.SERVICE_UNAVAILABLE,
                    message="Usage service temporarily unavailable, please retry",
                    category=category,
                    retryable=True,
                )
            decision = evaluate_quota(tier, category, category_count(entry, category))

        if decision.was_bypassed:
            logger.info(f"Admission bypassed for {identity}/{session_id}: {decision.reason}")

        if not decision.allowed and settings.AUDIT_DENIED_DECISIONS and decision.reason in (
            DecisionReason.FILE_TOO_LARGE,
            DecisionReason.QUOTA_EXHAUSTED,
        ):
            await cls._audit_denial(db, identity, session_id, filename, file_size_bytes, decision)

        return decision

    @classmethod
    async def _audit_denial(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        filename: str,
        file_size_bytes: int,
        decision: AdmissionDecision,
    ) -> None:
        try:
            await AuditService.write(db, AuditRecordCreate(
                identity=identity,
                session_id=session_id,
                event=AuditEvent.DENIED,
                operation_category=decision.category.value,
                file_format=file_extension(filename),
                file_size_mb=round(max(0, file_size_bytes) / MB, 2),
                reason=decision.reason.value,
            ))
        except SQLAlchemyError as e:
            logger.error(f"Failed to audit denial for {identity}/{session_id}: {e}")
            await db.rollback()
