"""
User model
"""
from sqlalchemy import Column, String, Boolean, DateTime
import uuid

from metering.core.clock import utcnow
from metering.db.base import Base


class User(Base):
    """
    Registered user (durable identity for metering)
    """
    __tablename__ = "users"

    # Primary key - use String for SQLite compatibility
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    email = Column(String(255), unique=True, nullable=False, index=True)

    # Plan label as sold (e.g. "pro-yearly"); resolved to a Tier at request time
    subscription_plan = Column(String(50), nullable=True)

    # API key (hashed)
    api_key_hash = Column(String(64), unique=True, nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, plan={self.subscription_plan})>"
