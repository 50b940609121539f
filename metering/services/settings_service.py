"""
Global enforcement settings with a short-TTL in-process cache
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging
import time

from metering.core.clock import utcnow
from metering.core.config import settings
from metering.models.app_setting import AppSetting
from metering.schemas.admission import EnforcementSettings

logger = logging.getLogger(__name__)

ENFORCEMENT_KEY = "enforcement.monthly"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class SettingsService:
    """Service for the global enforcement switch"""

    _cached: Optional[EnforcementSettings] = None
    _cached_at: float = 0.0

    @classmethod
    def default_settings(cls) -> EnforcementSettings:
        return EnforcementSettings(
            enforcement_enabled=settings.ENFORCEMENT_ENABLED,
            size_ceilings_when_disabled=settings.ENFORCE_SIZE_WHEN_DISABLED,
        )

    @classmethod
    def invalidate_cache(cls) -> None:
        cls._cached = None
        cls._cached_at = 0.0

    @classmethod
    async def get_enforcement_settings(cls, db: AsyncSession) -> EnforcementSettings:
        """
        Get the current enforcement snapshot

        Served from cache for SETTINGS_CACHE_TTL_SECONDS. If the store cannot be
        read, the last known snapshot (or the configured default) is returned.
        """
        now = time.monotonic()
        if cls._cached is not None and now - cls._cached_at < settings.SETTINGS_CACHE_TTL_SECONDS:
            return cls._cached

        try:
            result = await db.execute(select(AppSetting).where(AppSetting.key == ENFORCEMENT_KEY))
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to read enforcement settings, using last known value: {e}")
            await db.rollback()
            return cls._cached or cls.default_settings()

        enabled = settings.ENFORCEMENT_ENABLED if row is None else _parse_bool(row.value)
        snapshot = EnforcementSettings(
            enforcement_enabled=enabled,
            size_ceilings_when_disabled=settings.ENFORCE_SIZE_WHEN_DISABLED,
        )

        cls._cached = snapshot
        cls._cached_at = now
        return snapshot

    @classmethod
    async def set_enforcement(
        cls,
        db: AsyncSession,
        enabled: bool,
        acting_administrator: Optional[str] = None,
    ) -> AppSetting:
        """
        Turn global enforcement on or off

        Args:
            db: Database session
            enabled: New value
            acting_administrator: Who made the change

        Returns:
            Updated setting row
        """
        result = await db.execute(select(AppSetting).where(AppSetting.key == ENFORCEMENT_KEY))
        row = result.scalar_one_or_none()

        if row is None:
            row = AppSetting(key=ENFORCEMENT_KEY, value=str(enabled).lower())
            db.add(row)
        else:
            row.value = str(enabled).lower()

        row.updated_by = acting_administrator
        row.updated_at = utcnow()
        await db.commit()
        await db.refresh(row)

        cls.invalidate_cache()
        logger.info(f"Global enforcement {'enabled' if enabled else 'disabled'} by {acting_administrator or 'unknown'}")
        return row

    @classmethod
    async def get_setting_row(cls, db: AsyncSession) -> Optional[AppSetting]:
        result = await db.execute(select(AppSetting).where(AppSetting.key == ENFORCEMENT_KEY))
        return result.scalar_one_or_none()
