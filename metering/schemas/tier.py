"""
Tier-related schemas
"""
from pydantic import BaseModel
from typing import Dict, FrozenSet, Optional
import enum

from metering.core.formats import OperationCategory

MB = 1024 * 1024


class MeteringPolicy(str, enum.Enum):
    """How a tier's operation volume is tracked"""
    UNMETERED = "unmetered"
    MONTHLY_QUOTA = "monthly_quota"

    def __str__(self):
        return self.value


class Tier(BaseModel):
    """Plan tier definition. Read-only at request time."""
    id: str
    display_name: str
    metering_policy: MeteringPolicy
    monthly_free_operations: Dict[OperationCategory, int] = {}  # empty for unmetered tiers
    file_size_ceiling_bytes: Dict[OperationCategory, int]
    rate_ceiling_per_hour: Optional[int] = None  # None means unlimited
    enabled_capabilities: FrozenSet[str] = frozenset()
    upgrade_to: Optional[str] = None

    class Config:
        frozen = True

    @property
    def is_metered(self) -> bool:
        return self.metering_policy == MeteringPolicy.MONTHLY_QUOTA

    def allows(self, capability: str) -> bool:
        return capability in self.enabled_capabilities

    def size_ceiling_for(self, category: OperationCategory) -> int:
        return self.file_size_ceiling_bytes[category]

    def monthly_limit_for(self, category: OperationCategory) -> Optional[int]:
        """Free operations per window for a category, None when unmetered"""
        if not self.is_metered:
            return None
        return self.monthly_free_operations.get(category, 0)


class TierResponse(BaseModel):
    """Public view of a tier"""
    id: str
    display_name: str
    metering_policy: MeteringPolicy
    monthly_free_operations: Dict[str, int]
    max_file_size_mb: Dict[str, float]
    rate_ceiling_per_hour: Optional[int] = None
    capabilities: list[str]
    upgrade_to: Optional[str] = None

    @classmethod
    def from_tier(cls, tier: Tier) -> "TierResponse":
        return cls(
            id=tier.id,
            display_name=tier.display_name,
            metering_policy=tier.metering_policy,
            monthly_free_operations={c.value: n for c, n in tier.monthly_free_operations.items()},
            max_file_size_mb={c.value: round(n / MB, 2) for c, n in tier.file_size_ceiling_bytes.items()},
            rate_ceiling_per_hour=tier.rate_ceiling_per_hour,
            capabilities=sorted(tier.enabled_capabilities),
            upgrade_to=tier.upgrade_to,
        )
