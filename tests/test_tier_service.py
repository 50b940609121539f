"""
Unit tests for the tier catalog and plan label resolution
"""
import pytest

from metering.core.formats import OperationCategory
from metering.schemas.tier import MB, MeteringPolicy
from metering.services.tier_service import TierService, PLAN_LABELS


class TestResolveTier:
    """Test plan label resolution"""

    def test_missing_label_is_anonymous(self):
        assert TierService.resolve_tier(None).id == "anonymous"
        assert TierService.resolve_tier("   ").id == "anonymous"

    def test_unknown_label_falls_back_to_free(self):
        assert TierService.resolve_tier("platinum-galaxy").id == "free"

    @pytest.mark.parametrize("label,expected", [
        ("free", "free"),
        ("free_registered", "free"),
        ("starter-monthly", "starter"),
        ("starter_y", "starter"),
        ("premium", "starter"),
        ("test-premium", "starter"),
        ("PRO-YEARLY", "pro"),
        ("pro_m", "pro"),
        ("business-y", "business"),
        ("enterprise", "enterprise"),
    ])
    def test_billing_cycle_suffixes_resolve_to_base_tier(self, label, expected):
        assert TierService.resolve_tier(label).id == expected

    def test_every_label_maps_to_a_tier(self):
        for tier_id in PLAN_LABELS.values():
            assert TierService.get_tier(tier_id) is not None


class TestCatalog:
    """Test the tier table contents"""

    def test_free_and_anonymous_are_metered(self):
        for tier_id in ("anonymous", "free"):
            tier = TierService.get_tier(tier_id)
            assert tier.metering_policy == MeteringPolicy.MONTHLY_QUOTA
            assert tier.monthly_limit_for(OperationCategory.REGULAR) == 100
            assert tier.monthly_limit_for(OperationCategory.RAW) == 100
            assert tier.size_ceiling_for(OperationCategory.REGULAR) == 7 * MB
            assert tier.size_ceiling_for(OperationCategory.RAW) == 15 * MB
            assert tier.upgrade_to == "starter"

    @pytest.mark.parametrize("tier_id,max_mb,rate", [
        ("starter", 75, 500),
        ("pro", 150, 2000),
        ("business", 200, 10000),
        ("enterprise", 200, None),
    ])
    def test_paid_tiers_are_unmetered(self, tier_id, max_mb, rate):
        tier = TierService.get_tier(tier_id)
        assert not tier.is_metered
        assert tier.monthly_limit_for(OperationCategory.REGULAR) is None
        assert tier.size_ceiling_for(OperationCategory.RAW) == max_mb * MB
        assert tier.rate_ceiling_per_hour == rate

    def test_upgrade_path(self):
        path = []
        tier = TierService.get_tier("free")
        while tier.upgrade_to:
            path.append(tier.upgrade_to)
            tier = TierService.get_tier(tier.upgrade_to)
        assert path == ["starter", "pro", "business", "enterprise"]

    def test_capabilities(self):
        assert not TierService.get_tier("free").allows("api")
        assert TierService.get_tier("starter").allows("api")
        assert TierService.get_tier("pro").allows("webhook")
        assert not TierService.get_tier("starter").allows("webhook")

    def test_reload_applies_new_settings(self, monkeypatch):
        from metering.core.config import settings

        monkeypatch.setattr(settings, "FREE_MONTHLY_REGULAR_OPERATIONS", 250)
        TierService.reload()
        try:
            assert TierService.get_tier("free").monthly_limit_for(OperationCategory.REGULAR) == 250
        finally:
            monkeypatch.undo()
            TierService.reload()
