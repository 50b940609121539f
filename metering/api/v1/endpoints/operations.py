"""
Operation admission and recording endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from metering.api.dependencies import Caller, get_caller, get_db, get_override_context, get_rate_limiter
from metering.core.errors import LedgerUnavailableError
from metering.schemas.admission import AdmissionDecision, DecisionReason, OperationRequest, OverrideContext
from metering.services.metering_service import MeteringService
from metering.services.rate_limit_service import RateLimitService
from metering.services.tier_service import TierService

router = APIRouter()


@router.post("/check", response_model=AdmissionDecision)
async def check_operation(
    operation: OperationRequest,
    response: Response,
    caller: Caller = Depends(get_caller),
    override: OverrideContext = Depends(get_override_context),
    rate_limiter: RateLimitService = Depends(get_rate_limiter),
    db: AsyncSession = Depends(get_db),
):
    """
    Decide whether an image operation may run

    - 403 if the caller's tier does not offer the operation
    - 429 if the hourly rate ceiling is reached
    - 503 if usage storage is unavailable (retry later)
    - Otherwise 200 with the allow/deny decision
    """
    tier = TierService.resolve_tier(caller.plan_label)

    if not override.super_bypass and not tier.allows(operation.operation):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Operation '{operation.operation}' is not available on the {tier.display_name} plan"
        )

    if not override.super_bypass:
        limit = rate_limiter.check(caller.rate_key, tier)
        if limit.limit is not None:
            headers = {
                "X-RateLimit-Limit": str(limit.limit),
                "X-RateLimit-Remaining": str(limit.remaining if limit.remaining is not None else limit.limit),
                "X-RateLimit-Reset": str(limit.reset_at),
            }
            if not limit.allowed:
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail=f"Rate limit exceeded. Limit: {limit.limit} requests per hour",
                    headers=headers,
                )
            response.headers.update(headers)

    decision = await MeteringService.check_admission(
        db,
        caller.identity,
        caller.session_id,
        caller.plan_label,
        operation.filename,
        operation.file_size_bytes,
        override,
    )

    if decision.reason == DecisionReason.SERVICE_UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=decision.message,
            headers={"Retry-After": "5"},
        )

    return decision


@router.post("/record", status_code=204)
async def record_operation(
    operation: OperationRequest,
    caller: Caller = Depends(get_caller),
    override: OverrideContext = Depends(get_override_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Record an operation that has completed successfully

    - Counts against the monthly quota on metered tiers
    - Always written to the audit log
    """
    try:
        await MeteringService.record_operation(
            db,
            caller.identity,
            caller.session_id,
            caller.plan_label,
            operation.filename,
            operation.file_size_bytes,
            operation.page_context,
            override,
        )
    except LedgerUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
            headers={"Retry-After": "5"},
        )

    return Response(status_code=204)
