"""
Property-based tests for pay-as-you-go band allocation
"""
from decimal import Decimal
from hypothesis import given, strategies as st, settings as hyp_settings

from metering.schemas.billing import PricingBand
from metering.services.pricing_service import PricingSchedule, PricingService


@st.composite
def schedules(draw):
    """Random valid schedules: contiguous bands ending in an unbounded one"""
    widths = draw(st.lists(st.integers(min_value=1, max_value=5000), min_size=0, max_size=5))
    prices = draw(st.lists(
        st.decimals(min_value=0, max_value=1, places=4),
        min_size=len(widths) + 1,
        max_size=len(widths) + 1,
    ))
    bands = []
    lower = draw(st.sampled_from([0, 1]))
    for width, price in zip(widths, prices):
        upper = max(lower, 1) + width - 1
        bands.append(PricingBand(lower_bound=lower, upper_bound=upper, unit_price=price))
        lower = upper + 1
    bands.append(PricingBand(lower_bound=lower, upper_bound=None, unit_price=prices[-1]))
    return PricingSchedule(bands=tuple(bands))


# Property 1: band counts sum to the input and the total is the sum of subtotals
@given(operation_count=st.integers(min_value=0, max_value=200000))
@hyp_settings(max_examples=200, deadline=None)
def test_property_default_schedule_coverage(operation_count):
    breakdown = PricingService.compute_cost(operation_count)

    assert sum(band.operations for band in breakdown.bands) == operation_count
    assert breakdown.total_cost == sum((band.subtotal for band in breakdown.bands), Decimal("0"))


@given(schedule=schedules(), operation_count=st.integers(min_value=0, max_value=30000))
@hyp_settings(max_examples=200, deadline=None)
def test_property_custom_schedule_coverage(schedule, operation_count):
    breakdown = PricingService.compute_cost(operation_count, schedule)

    assert sum(band.operations for band in breakdown.bands) == operation_count
    assert breakdown.total_cost == sum((band.subtotal for band in breakdown.bands), Decimal("0"))
    for band in breakdown.bands:
        assert band.subtotal == band.unit_price * band.operations
        assert band.to_operation - band.from_operation + 1 == band.operations


# Property 2: cost never decreases as the operation count grows
@given(a=st.integers(min_value=0, max_value=100000), b=st.integers(min_value=0, max_value=100000))
@hyp_settings(max_examples=100, deadline=None)
def test_property_cost_is_monotonic(a, b):
    low, high = sorted((a, b))
    assert PricingService.compute_cost(low).total_cost <= PricingService.compute_cost(high).total_cost
