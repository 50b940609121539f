"""
Tier catalog and plan label resolution
"""
from typing import Dict, List, Optional
import logging

from metering.core.config import settings
from metering.core.formats import OperationCategory
from metering.schemas.tier import MB, MeteringPolicy, Tier

logger = logging.getLogger(__name__)

ANONYMOUS_TIER = "anonymous"
FREE_TIER = "free"

WEB_CAPABILITIES = frozenset({"compress", "convert"})
PAID_CAPABILITIES = WEB_CAPABILITIES | {"enhance", "batch", "api", "all_output_formats"}


def _quota_tier(tier_id: str, display_name: str) -> Tier:
    """Free-style tier built from the configured free limits"""
    return Tier(
        id=tier_id,
        display_name=display_name,
        metering_policy=MeteringPolicy.MONTHLY_QUOTA,
        monthly_free_operations={
            OperationCategory.REGULAR: settings.FREE_MONTHLY_REGULAR_OPERATIONS,
            OperationCategory.RAW: settings.FREE_MONTHLY_RAW_OPERATIONS,
        },
        file_size_ceiling_bytes={
            OperationCategory.REGULAR: settings.FREE_MAX_REGULAR_FILE_MB * MB,
            OperationCategory.RAW: settings.FREE_MAX_RAW_FILE_MB * MB,
        },
        rate_ceiling_per_hour=100,
        enabled_capabilities=WEB_CAPABILITIES | {"enhance"},
        upgrade_to="starter",
    )


def _unmetered_tier(
    tier_id: str,
    display_name: str,
    max_file_mb: int,
    rate_ceiling_per_hour: Optional[int],
    extra_capabilities: frozenset,
    upgrade_to: Optional[str],
) -> Tier:
    return Tier(
        id=tier_id,
        display_name=display_name,
        metering_policy=MeteringPolicy.UNMETERED,
        file_size_ceiling_bytes={
            OperationCategory.REGULAR: max_file_mb * MB,
            OperationCategory.RAW: max_file_mb * MB,
        },
        rate_ceiling_per_hour=rate_ceiling_per_hour,
        enabled_capabilities=PAID_CAPABILITIES | extra_capabilities,
        upgrade_to=upgrade_to,
    )


def build_catalog() -> Dict[str, Tier]:
    """Build the tier table, ordered from most to least restrictive"""
    tiers = [
        _quota_tier(ANONYMOUS_TIER, "Anonymous"),
        _quota_tier(FREE_TIER, "Free"),
        _unmetered_tier("starter", "Starter", 75, 500, frozenset(), "pro"),
        _unmetered_tier("pro", "Pro", 150, 2000, frozenset({"webhook", "priority"}), "business"),
        _unmetered_tier("business", "Business", 200, 10000, frozenset({"webhook", "priority", "whitelabel"}), "enterprise"),
        _unmetered_tier("enterprise", "Enterprise", 200, None, frozenset({"webhook", "priority", "whitelabel"}), None),
    ]
    return {tier.id: tier for tier in tiers}


# Every plan label that has been sold, mapped to the tier it grants.
# Billing cycle changes price, not capability.
PLAN_LABELS: Dict[str, str] = {
    "anonymous": ANONYMOUS_TIER,
    "free": FREE_TIER,
    "free_registered": FREE_TIER,
    "starter": "starter",
    "starter-monthly": "starter",
    "starter-yearly": "starter",
    "starter-m": "starter",
    "starter-y": "starter",
    "starter_m": "starter",
    "starter_y": "starter",
    "premium": "starter",
    "test_premium": "starter",
    "test-premium": "starter",
    "pro": "pro",
    "pro-monthly": "pro",
    "pro-yearly": "pro",
    "pro-m": "pro",
    "pro-y": "pro",
    "pro_m": "pro",
    "pro_y": "pro",
    "business": "business",
    "business-monthly": "business",
    "business-yearly": "business",
    "business-m": "business",
    "business-y": "business",
    "business_m": "business",
    "business_y": "business",
    "enterprise": "enterprise",
}


class TierService:
    """Service for tier lookup"""

    TIERS: Dict[str, Tier] = build_catalog()

    @classmethod
    def resolve_tier(cls, plan_label: Optional[str]) -> Tier:
        """
        Resolve a subscription plan label to a tier

        Never fails: no label means the anonymous tier, an unknown label
        degrades to the free tier.
        """
        if plan_label is None or not plan_label.strip():
            return cls.TIERS[ANONYMOUS_TIER]

        tier_id = PLAN_LABELS.get(plan_label.strip().lower())
        if tier_id is None:
            logger.warning(f"Unknown plan label '{plan_label}', falling back to free tier")
            tier_id = FREE_TIER

        return cls.TIERS[tier_id]

    @classmethod
    def get_tier(cls, tier_id: str) -> Optional[Tier]:
        return cls.TIERS.get(tier_id)

    @classmethod
    def list_tiers(cls) -> List[Tier]:
        return list(cls.TIERS.values())

    @classmethod
    def reload(cls) -> None:
        """Rebuild the catalog from current settings (changes apply prospectively)"""
        cls.TIERS = build_catalog()
        logger.info("Tier catalog reloaded")
