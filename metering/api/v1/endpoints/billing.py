"""
Pay-as-you-go pricing and prepaid bundle endpoints
"""
from fastapi import APIRouter, HTTPException, Query, status
from typing import List

from metering.core.errors import UnknownBundleError
from metering.schemas.billing import CostBreakdown, PrepaidBundle, PrepaidSavings
from metering.services.metering_service import MeteringService
from metering.services.pricing_service import PricingService

router = APIRouter()


@router.get("/cost", response_model=CostBreakdown)
async def preview_cost(operations: int = Query(..., description="Number of metered operations")):
    """
    Preview the pay-as-you-go cost of a number of operations

    - Returns the total and the per-band breakdown
    - 400 on a negative count
    """
    try:
        return MeteringService.preview_cost(operations)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/bundles", response_model=List[PrepaidBundle])
async def list_bundles():
    """List the prepaid operation bundles"""
    return PricingService.list_bundles()


@router.get("/bundles/{bundle_id}/savings", response_model=PrepaidSavings)
async def bundle_savings(bundle_id: str):
    """
    Compare a prepaid bundle against pay-as-you-go

    - 404 if the bundle does not exist
    """
    try:
        return MeteringService.preview_prepaid_savings(bundle_id)
    except UnknownBundleError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
