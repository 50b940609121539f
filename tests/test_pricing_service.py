"""
Unit tests for pay-as-you-go pricing and prepaid bundles
"""
import pytest
from decimal import Decimal

from metering.core.errors import InvalidPricingScheduleError, UnknownBundleError
from metering.schemas.billing import PricingBand
from metering.services.pricing_service import PricingSchedule, PricingService


def test_cost_of_5500_operations():
    """Test 500 free, 4500 at $0.005 and 500 at $0.003"""
    breakdown = PricingService.compute_cost(5500)

    assert breakdown.total_cost == Decimal("24.00")
    assert [band.operations for band in breakdown.bands] == [500, 4500, 500]
    assert [band.subtotal for band in breakdown.bands] == [Decimal("0"), Decimal("22.50"), Decimal("1.50")]
    assert breakdown.bands[1].from_operation == 501
    assert breakdown.bands[1].to_operation == 5000
    assert breakdown.bands[2].from_operation == 5001
    assert breakdown.bands[2].to_operation == 5500


def test_zero_operations_cost_nothing():
    breakdown = PricingService.compute_cost(0)
    assert breakdown.total_cost == Decimal("0")
    assert breakdown.bands == []


def test_operations_within_free_band():
    breakdown = PricingService.compute_cost(500)
    assert breakdown.total_cost == Decimal("0")
    assert len(breakdown.bands) == 1


def test_unbounded_band_absorbs_the_rest():
    breakdown = PricingService.compute_cost(100000)
    assert breakdown.total_cost == Decimal("257.5")
    assert breakdown.bands[-1].operations == 50000
    assert breakdown.bands[-1].unit_price == Decimal("0.002")


@pytest.mark.parametrize("bad", [-1, 1.5, "10", True])
def test_invalid_operation_counts(bad):
    with pytest.raises(ValueError):
        PricingService.compute_cost(bad)


def test_custom_schedule():
    schedule = PricingSchedule(bands=(
        PricingBand(lower_bound=1, upper_bound=10, unit_price=Decimal("1")),
        PricingBand(lower_bound=11, upper_bound=None, unit_price=Decimal("0.5")),
    ))
    breakdown = PricingService.compute_cost(14, schedule)
    assert breakdown.total_cost == Decimal("12")


class TestScheduleValidation:
    """Test pricing schedules are rejected when malformed"""

    def test_empty(self):
        with pytest.raises(InvalidPricingScheduleError):
            PricingSchedule(bands=())

    def test_gap_between_bands(self):
        with pytest.raises(InvalidPricingScheduleError):
            PricingSchedule(bands=(
                PricingBand(lower_bound=0, upper_bound=100, unit_price=Decimal("0")),
                PricingBand(lower_bound=150, upper_bound=None, unit_price=Decimal("1")),
            ))

    def test_overlapping_bands(self):
        with pytest.raises(InvalidPricingScheduleError):
            PricingSchedule(bands=(
                PricingBand(lower_bound=0, upper_bound=100, unit_price=Decimal("0")),
                PricingBand(lower_bound=50, upper_bound=None, unit_price=Decimal("1")),
            ))

    def test_bounded_last_band(self):
        with pytest.raises(InvalidPricingScheduleError):
            PricingSchedule(bands=(
                PricingBand(lower_bound=0, upper_bound=100, unit_price=Decimal("0")),
            ))

    def test_unbounded_band_not_last(self):
        with pytest.raises(InvalidPricingScheduleError):
            PricingSchedule(bands=(
                PricingBand(lower_bound=0, upper_bound=None, unit_price=Decimal("0")),
                PricingBand(lower_bound=101, upper_bound=None, unit_price=Decimal("1")),
            ))

    def test_negative_price(self):
        with pytest.raises(InvalidPricingScheduleError):
            PricingSchedule(bands=(
                PricingBand(lower_bound=0, upper_bound=None, unit_price=Decimal("-0.01")),
            ))

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            PricingSchedule(bands=())


class TestPrepaidBundles:
    """Test prepaid bundle comparison"""

    @pytest.mark.parametrize("bundle_id,payg,savings,percent", [
        ("api_10k", "37.5", "2.5", "6.67"),
        ("api_50k", "157.5", "32.5", "20.63"),
        ("api_100k", "257.5", "57.5", "22.33"),
    ])
    def test_savings(self, bundle_id, payg, savings, percent):
        result = PricingService.compute_prepaid_savings(bundle_id)
        assert result.pay_as_you_go_cost == Decimal(payg)
        assert result.savings == Decimal(savings)
        assert result.savings_percent == Decimal(percent)

    def test_unknown_bundle(self):
        with pytest.raises(UnknownBundleError) as exc_info:
            PricingService.compute_prepaid_savings("api_1m")
        assert exc_info.value.bundle_id == "api_1m"

    def test_free_schedule_has_zero_percent(self):
        schedule = PricingSchedule(bands=(
            PricingBand(lower_bound=0, upper_bound=None, unit_price=Decimal("0")),
        ))
        result = PricingService.compute_prepaid_savings("api_10k", schedule)
        assert result.savings == Decimal("-35")
        assert result.savings_percent == Decimal("0")

    def test_list_bundles(self):
        assert [b.id for b in PricingService.list_bundles()] == ["api_10k", "api_50k", "api_100k"]
