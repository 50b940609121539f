"""
FastAPI dependencies for caller identity and administrative access
"""
from dataclasses import dataclass
from fastapi import Cookie, Depends, HTTPException, status, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from metering.core.config import settings
from metering.core.security import constant_time_equals
from metering.db.session import get_db
from metering.schemas.admission import OverrideContext
from metering.services.api_key_service import APIKeyService
from metering.services.rate_limit_service import RateLimitService
from metering.services.tier_service import ANONYMOUS_TIER, FREE_TIER

# Authenticated users share one ledger row across all their sessions
ACCOUNT_SESSION = "account"

_rate_limiter: Optional[RateLimitService] = None


@dataclass
class Caller:
    """Who is making the request"""
    identity: str
    session_id: str
    plan_label: Optional[str]

    @property
    def rate_key(self) -> str:
        return f"{self.identity}:{self.session_id}"


async def get_caller(
    x_api_key: Optional[str] = Header(None),
    x_session_id: Optional[str] = Header(None),
    session_id: Optional[str] = Cookie(None),
    db: AsyncSession = Depends(get_db),
) -> Caller:
    """
    Dependency to resolve the caller from an API key or an anonymous session

    Raises:
        HTTPException: 401 on an invalid API key, 400 when an anonymous
            caller sends no session identifier
    """
    if x_api_key:
        api_key_service = APIKeyService(db)
        user = await api_key_service.validate_api_key(x_api_key)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid API key"
            )
        return Caller(identity=user.id, session_id=ACCOUNT_SESSION, plan_label=user.subscription_plan or FREE_TIER)

    session = x_session_id or session_id
    if not session:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing session identifier"
        )
    return Caller(identity=ANONYMOUS_TIER, session_id=session[:128], plan_label=None)


def _is_admin_key(x_admin_key: Optional[str]) -> bool:
    if not settings.ADMIN_API_KEY or not x_admin_key:
        return False
    return constant_time_equals(x_admin_key, settings.ADMIN_API_KEY)


async def require_admin(x_admin_key: Optional[str] = Header(None)) -> None:
    """
    Dependency guarding administrative endpoints

    Raises:
        HTTPException: 403 if the admin key is missing or wrong
    """
    if not _is_admin_key(x_admin_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )


async def get_override_context(
    x_super_bypass: Optional[str] = Header(None),
    x_bypass_reason: Optional[str] = Header(None, max_length=255),
    x_admin_user: Optional[str] = Header(None, max_length=255),
    x_admin_key: Optional[str] = Header(None),
) -> OverrideContext:
    """
    Dependency building the override context for a request

    A super bypass is only honoured together with a valid admin key.
    """
    if not x_super_bypass or x_super_bypass.strip().lower() not in ("1", "true", "yes"):
        return OverrideContext()

    if not _is_admin_key(x_admin_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super bypass requires administrator access"
        )

    return OverrideContext(
        super_bypass=True,
        bypass_reason=x_bypass_reason,
        acting_administrator=x_admin_user,
    )


def get_rate_limiter() -> RateLimitService:
    """Dependency returning the process-wide rate limiter"""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimitService.from_settings()
    return _rate_limiter
