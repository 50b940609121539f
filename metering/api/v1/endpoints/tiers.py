"""
Tier catalog endpoints
"""
from fastapi import APIRouter, HTTPException, status
from typing import List

from metering.schemas.tier import TierResponse
from metering.services.tier_service import TierService

router = APIRouter()


@router.get("", response_model=List[TierResponse])
async def list_tiers():
    """List every tier from most to least restrictive"""
    return [TierResponse.from_tier(tier) for tier in TierService.list_tiers()]


@router.get("/{tier_id}", response_model=TierResponse)
async def get_tier(tier_id: str):
    tier = TierService.get_tier(tier_id)
    if tier is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown tier: {tier_id}"
        )
    return TierResponse.from_tier(tier)
