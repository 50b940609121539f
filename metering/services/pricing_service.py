"""
Pay-as-you-go cost calculation and prepaid bundle comparison

All amounts are Decimal; nothing here touches storage.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence

from metering.core.errors import InvalidPricingScheduleError, UnknownBundleError
from metering.schemas.billing import (
    BandCharge,
    CostBreakdown,
    PrepaidBundle,
    PrepaidSavings,
    PricingBand,
)


@dataclass(frozen=True)
class PricingSchedule:
    """Validated, ordered pricing bands"""
    bands: Sequence[PricingBand]

    def __post_init__(self):
        validate_bands(self.bands)


def validate_bands(bands: Sequence[PricingBand]) -> None:
    """
    Check that bands are sorted, contiguous, non-overlapping and end unbounded

    Raises:
        InvalidPricingScheduleError: On any violation
    """
    if not bands:
        raise InvalidPricingScheduleError("Pricing schedule has no bands")

    if bands[0].lower_bound < 0:
        raise InvalidPricingScheduleError("First band must start at or above 0")

    for index, band in enumerate(bands):
        if band.unit_price < 0:
            raise InvalidPricingScheduleError(f"Band {index} has a negative unit price")

        is_last = index == len(bands) - 1
        if band.upper_bound is None:
            if not is_last:
                raise InvalidPricingScheduleError(f"Only the last band may be unbounded (band {index})")
            continue

        if is_last:
            raise InvalidPricingScheduleError("Last band must be unbounded")
        if band.upper_bound < band.first_operation:
            raise InvalidPricingScheduleError(f"Band {index} is empty or inverted")

        following = bands[index + 1]
        if following.lower_bound != band.upper_bound + 1:
            raise InvalidPricingScheduleError(
                f"Bands {index} and {index + 1} are not contiguous "
                f"({band.upper_bound} -> {following.lower_bound})"
            )


DEFAULT_SCHEDULE = PricingSchedule(bands=(
    PricingBand(lower_bound=0, upper_bound=500, unit_price=Decimal("0")),
    PricingBand(lower_bound=501, upper_bound=5000, unit_price=Decimal("0.005")),
    PricingBand(lower_bound=5001, upper_bound=50000, unit_price=Decimal("0.003")),
    PricingBand(lower_bound=50001, upper_bound=None, unit_price=Decimal("0.002")),
))

PREPAID_BUNDLES: Dict[str, PrepaidBundle] = {
    bundle.id: bundle
    for bundle in (
        PrepaidBundle(id="api_10k", name="10K Operations", operations=10000, price=Decimal("35")),
        PrepaidBundle(id="api_50k", name="50K Operations", operations=50000, price=Decimal("125")),
        PrepaidBundle(id="api_100k", name="100K Operations", operations=100000, price=Decimal("200")),
    )
}

PERCENT = Decimal("0.01")


class PricingService:
    """Service for metered billing arithmetic"""

    @classmethod
    def compute_cost(
        cls,
        operation_count: int,
        schedule: Optional[PricingSchedule] = None,
    ) -> CostBreakdown:
        """
        Compute the pay-as-you-go cost of a number of operations

        Args:
            operation_count: Non-negative number of metered operations
            schedule: Pricing bands (defaults to the published schedule)

        Returns:
            CostBreakdown listing every band actually touched

        Raises:
            ValueError: If operation_count is negative or not an integer
        """
        if isinstance(operation_count, bool) or not isinstance(operation_count, int):
            raise ValueError(f"Operation count must be an integer, got {operation_count!r}")
        if operation_count < 0:
            raise ValueError(f"Operation count must be non-negative, got {operation_count}")

        schedule = schedule or DEFAULT_SCHEDULE
        remaining = operation_count
        total = Decimal("0")
        charges: List[BandCharge] = []

        for band in schedule.bands:
            if remaining <= 0:
                break

            capacity = band.capacity
            consumed = remaining if capacity is None else min(remaining, capacity)
            subtotal = band.unit_price * consumed

            charges.append(BandCharge(
                from_operation=band.first_operation,
                to_operation=band.first_operation + consumed - 1,
                operations=consumed,
                unit_price=band.unit_price,
                subtotal=subtotal,
            ))

            total += subtotal
            remaining -= consumed

        return CostBreakdown(operation_count=operation_count, total_cost=total, bands=charges)

    @classmethod
    def get_bundle(cls, bundle_id: str) -> PrepaidBundle:
        """
        Raises:
            UnknownBundleError: If no bundle has this id
        """
        bundle = PREPAID_BUNDLES.get(bundle_id)
        if bundle is None:
            raise UnknownBundleError(bundle_id)
        return bundle

    @classmethod
    def list_bundles(cls) -> List[PrepaidBundle]:
        return list(PREPAID_BUNDLES.values())

    @classmethod
    def compute_prepaid_savings(
        cls,
        bundle_id: str,
        schedule: Optional[PricingSchedule] = None,
    ) -> PrepaidSavings:
        """
        Compare a prepaid bundle's flat price with the pay-as-you-go cost
        of the same number of operations
        """
        bundle = cls.get_bundle(bundle_id)
        payg_cost = cls.compute_cost(bundle.operations, schedule).total_cost
        savings = payg_cost - bundle.price

        if payg_cost == 0:
            percent = Decimal("0")
        else:
            percent = (savings / payg_cost * 100).quantize(PERCENT, rounding=ROUND_HALF_UP)

        return PrepaidSavings(
            bundle=bundle,
            pay_as_you_go_cost=payg_cost,
            savings=savings,
            savings_percent=percent,
        )
