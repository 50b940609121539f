"""
Administrative endpoints: enforcement switch, audit log, API keys and tier catalog
"""
from datetime import datetime
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from metering.api.dependencies import get_db, require_admin
from metering.schemas.api_key import APIKeyResponse
from metering.schemas.audit import AuditRecordResponse
from metering.schemas.settings import EnforcementStatus, EnforcementUpdate
from metering.schemas.tier import TierResponse
from metering.services.api_key_service import APIKeyService
from metering.services.audit_service import AuditService
from metering.services.settings_service import SettingsService
from metering.services.tier_service import TierService

router = APIRouter(dependencies=[Depends(require_admin)])


async def _status(db: AsyncSession) -> EnforcementStatus:
    snapshot = await SettingsService.get_enforcement_settings(db)
    row = await SettingsService.get_setting_row(db)
    return EnforcementStatus(
        enforcement_enabled=snapshot.enforcement_enabled,
        size_ceilings_when_disabled=snapshot.size_ceilings_when_disabled,
        updated_by=row.updated_by if row else None,
    )


@router.get("/settings/enforcement", response_model=EnforcementStatus)
async def get_enforcement(db: AsyncSession = Depends(get_db)):
    """Get the global enforcement switch"""
    return await _status(db)


@router.put("/settings/enforcement", response_model=EnforcementStatus)
async def set_enforcement(
    update: EnforcementUpdate,
    x_admin_user: Optional[str] = Header(None, max_length=255),
    db: AsyncSession = Depends(get_db),
):
    """
    Turn global enforcement on or off

    - Takes effect for new requests immediately on this instance
    - Other instances pick it up within the settings cache TTL
    """
    await SettingsService.set_enforcement(db, update.enabled, acting_administrator=x_admin_user)
    return await _status(db)


@router.get("/audit", response_model=List[AuditRecordResponse])
async def list_audit_records(
    identity: Optional[str] = None,
    session_id: Optional[str] = None,
    bypassed_only: bool = False,
    since: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    """List audit records, newest first"""
    return await AuditService.list_records(
        db,
        identity=identity,
        session_id=session_id,
        bypassed_only=bypassed_only,
        since=since,
        limit=limit,
    )


@router.post("/users/{user_id}/api-key", response_model=APIKeyResponse, status_code=status.HTTP_201_CREATED)
async def issue_api_key(user_id: str, db: AsyncSession = Depends(get_db)):
    """
    Issue a new API key for a user

    If the user already has an API key, this will replace it (old key becomes invalid)

    **Important**: The API key is only shown once.
    """
    api_key_service = APIKeyService(db)
    user = await api_key_service.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown user: {user_id}"
        )

    api_key = await api_key_service.issue_api_key(user)
    return APIKeyResponse(user_id=user.id, api_key=api_key)


@router.post("/tiers/reload", response_model=List[TierResponse])
async def reload_tiers():
    """Rebuild the tier catalog from current settings"""
    TierService.reload()
    return [TierResponse.from_tier(tier) for tier in TierService.list_tiers()]
