"""
Global application settings model
"""
from sqlalchemy import Column, String, DateTime

from metering.core.clock import utcnow
from metering.db.base import Base


class AppSetting(Base):
    """
    Key/value row for rarely mutated, administratively controlled settings
    """
    __tablename__ = "app_settings"

    key = Column(String(100), primary_key=True)
    value = Column(String(255), nullable=False)
    updated_by = Column(String(255), nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<AppSetting(key={self.key}, value={self.value})>"
