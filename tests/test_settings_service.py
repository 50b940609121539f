"""
Unit tests for the global enforcement switch
"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from metering.core.config import settings
from metering.services.settings_service import SettingsService


@pytest.mark.asyncio
async def test_defaults_when_unset(db_session):
    snapshot = await SettingsService.get_enforcement_settings(db_session)
    assert snapshot.enforcement_enabled is settings.ENFORCEMENT_ENABLED
    assert snapshot.size_ceilings_when_disabled is settings.ENFORCE_SIZE_WHEN_DISABLED


@pytest.mark.asyncio
async def test_toggle_takes_effect_immediately(db_session):
    await SettingsService.get_enforcement_settings(db_session)

    row = await SettingsService.set_enforcement(db_session, False, acting_administrator="ops@example.com")
    assert row.value == "false"
    assert row.updated_by == "ops@example.com"

    snapshot = await SettingsService.get_enforcement_settings(db_session)
    assert snapshot.enforcement_enabled is False

    await SettingsService.set_enforcement(db_session, True)
    assert (await SettingsService.get_enforcement_settings(db_session)).enforcement_enabled is True


@pytest.mark.asyncio
async def test_cached_snapshot_is_reused(db_session):
    first = await SettingsService.get_enforcement_settings(db_session)

    db = MagicMock()
    db.execute = AsyncMock()
    second = await SettingsService.get_enforcement_settings(db)

    assert second == first
    db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_store_failure_falls_back_to_last_known(db_session, monkeypatch):
    await SettingsService.set_enforcement(db_session, False)
    await SettingsService.get_enforcement_settings(db_session)
    monkeypatch.setattr(settings, "SETTINGS_CACHE_TTL_SECONDS", 0.0)

    db = MagicMock()
    db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
    db.rollback = AsyncMock()

    snapshot = await SettingsService.get_enforcement_settings(db)
    assert snapshot.enforcement_enabled is False


@pytest.mark.asyncio
async def test_store_failure_without_cache_uses_default():
    db = MagicMock()
    db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
    db.rollback = AsyncMock()

    snapshot = await SettingsService.get_enforcement_settings(db)
    assert snapshot == SettingsService.default_settings()
