"""
Property-based tests for stateless admission rules
"""
from hypothesis import given, strategies as st, settings as hyp_settings

from metering.core.formats import OperationCategory
from metering.schemas.admission import DecisionReason, EnforcementSettings, OverrideContext
from metering.services.admission_service import evaluate_quota, precheck
from metering.services.tier_service import TierService

tiers = st.sampled_from(TierService.list_tiers())
sizes = st.integers(min_value=-10, max_value=500 * 1024 * 1024)
overrides = st.builds(
    OverrideContext,
    super_bypass=st.booleans(),
    bypass_reason=st.one_of(st.none(), st.text(max_size=20)),
)
enforcements = st.builds(
    EnforcementSettings,
    enforcement_enabled=st.booleans(),
    size_ceilings_when_disabled=st.booleans(),
)
unknown_names = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=8).map(
    lambda stem: f"{stem}.xyz"
)
known_names = st.sampled_from(["a.jpg", "b.png", "c.webp", "d.cr2", "e.nef", "f.dng"])


# Property 1: unrecognized formats are denied regardless of tier, override or size
@given(tier=tiers, filename=unknown_names, size=sizes, override=overrides, enforcement=enforcements)
@hyp_settings(max_examples=200, deadline=None)
def test_property_unknown_format_always_denied(tier, filename, size, override, enforcement):
    decision = precheck(tier, filename, size, enforcement, override)

    assert decision is not None
    assert decision.allowed is False
    assert decision.reason == DecisionReason.UNSUPPORTED_FORMAT


# Property 2: a super bypass allows any supported file
@given(tier=tiers, filename=known_names, size=sizes, enforcement=enforcements)
@hyp_settings(max_examples=200, deadline=None)
def test_property_bypass_supersedes_everything(tier, filename, size, enforcement):
    decision = precheck(tier, filename, size, enforcement, OverrideContext(super_bypass=True))

    assert decision.allowed is True
    assert decision.was_bypassed is True


# Property 3: paid tiers decide on size alone and never need the ledger
@given(
    tier=st.sampled_from([t for t in TierService.list_tiers() if not t.is_metered]),
    filename=known_names,
    size=sizes,
)

@hyp_settings(max_examples=200, deadline=None)
def test_property_paid_tiers_enforce_size_only(tier, filename, size):
    decision = precheck(tier, filename, size, EnforcementSettings())
    category = OperationCategory.RAW if filename.endswith((".cr2", ".nef", ".dng")) else OperationCategory.REGULAR

    assert decision is not None
    assert decision.allowed == (size <= tier.size_ceiling_for(category))


# Property 4: metered tiers are allowed exactly while usage is under the limit
@given(
    tier=st.sampled_from([t for t in TierService.list_tiers() if t.is_metered]),
    category=st.sampled_from([OperationCategory.REGULAR, OperationCategory.RAW]),
    used=st.integers(min_value=0, max_value=1000),
)

@hyp_settings(max_examples=200, deadline=None)
def test_property_quota_boundary(tier, category, used):
    decision = evaluate_quota(tier, category, used)
    limit = tier.monthly_limit_for(category)

    assert decision.allowed == (used < limit)
    assert decision.usage.remaining == max(0, limit - used)
    if not decision.allowed:
        assert decision.upgrade_suggested == tier.upgrade_to
