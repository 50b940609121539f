"""
Billing schemas: pricing bands, prepaid bundles and cost breakdowns
"""
from pydantic import BaseModel
from decimal import Decimal
from typing import Optional


class PricingBand(BaseModel):
    """
    Unit price for a contiguous range of operation ordinals

    Operations are numbered from 1, so a band starting at 0 holds
    ``upper_bound`` operations.
    """
    lower_bound: int
    upper_bound: Optional[int] = None  # None means unbounded
    unit_price: Decimal

    class Config:
        frozen = True

    @property
    def first_operation(self) -> int:
        return max(self.lower_bound, 1)

    @property
    def capacity(self) -> Optional[int]:
        """Operations this band can absorb, None when unbounded"""
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.first_operation + 1


class PrepaidBundle(BaseModel):
    """Fixed-price block of operations"""
    id: str
    name: str
    operations: int
    price: Decimal

    class Config:
        frozen = True


class BandCharge(BaseModel):
    """Operations and cost attributed to one band"""
    from_operation: int
    to_operation: int
    operations: int
    unit_price: Decimal
    subtotal: Decimal


class CostBreakdown(BaseModel):
    """Total cost of a number of metered operations, band by band"""
    operation_count: int
    total_cost: Decimal
    bands: list[BandCharge]


class PrepaidSavings(BaseModel):
    """Prepaid bundle price compared with pay-as-you-go"""
    bundle: PrepaidBundle
    pay_as_you_go_cost: Decimal
    savings: Decimal
    savings_percent: Decimal
