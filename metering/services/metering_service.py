"""
Entry points used by the HTTP layer

Plan labels are resolved to tiers here, once, and the global enforcement
snapshot is read here, so the engine below never sees raw labels or shared
mutable settings.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from metering.schemas.admission import AdmissionDecision, EnforcementSettings, OverrideContext
from metering.schemas.billing import CostBreakdown, PrepaidSavings
from metering.services.admission_service import AdmissionService
from metering.services.pricing_service import PricingService
from metering.services.recorder_service import RecorderService
from metering.services.settings_service import SettingsService
from metering.services.tier_service import TierService


class MeteringService:
    """Facade over admission, recording and pricing"""

    @classmethod
    async def check_admission(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        tier_label: Optional[str],
        filename: str,
        file_size_bytes: int,
        override: Optional[OverrideContext] = None,
    ) -> AdmissionDecision:
        """Called before the image operation runs"""
        tier = TierService.resolve_tier(tier_label)
        enforcement = await SettingsService.get_enforcement_settings(db)
        return await AdmissionService.decide(
            db, identity, session_id, tier, filename, file_size_bytes, enforcement, override
        )

    @classmethod
    async def record_operation(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        tier_label: Optional[str],
        filename: str,
        file_size_bytes: int,
        page_context: Optional[str],
        override: Optional[OverrideContext] = None,
        enforcement: Optional[EnforcementSettings] = None,
    ) -> None:
        """
        Called after the image operation succeeded

        Pass the enforcement snapshot the admission ran under so the audit
        record matches that decision. Without it the current snapshot is
        read, which can differ if enforcement was toggled in between.
        """
        tier = TierService.resolve_tier(tier_label)
        if enforcement is None:
            enforcement = await SettingsService.get_enforcement_settings(db)
        await RecorderService.record(
            db, identity, session_id, tier, filename, file_size_bytes, page_context,
            override=override, enforcement=enforcement,
        )

    @classmethod
    def preview_cost(cls, operation_count: int) -> CostBreakdown:
        return PricingService.compute_cost(operation_count)

    @classmethod
    def preview_prepaid_savings(cls, bundle_id: str) -> PrepaidSavings:
        return PricingService.compute_prepaid_savings(bundle_id)
