"""
Usage statistics endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from metering.api.dependencies import Caller, get_caller, get_db
from metering.schemas.usage import UsageSummary
from metering.services.tier_service import TierService
from metering.services.usage_ledger_service import UsageLedgerService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UsageSummary)
async def get_usage(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the caller's usage in the current monthly window

    - Metered tiers report used / limit / remaining per category
    - Unmetered tiers report unlimited usage
    """
    tier = TierService.resolve_tier(caller.plan_label)
    try:
        return await UsageLedgerService.get_usage_summary(db, caller.identity, caller.session_id, tier)
    except SQLAlchemyError as e:
        logger.error(f"Usage summary failed for {caller.identity}/{caller.session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Usage service temporarily unavailable"
        )
