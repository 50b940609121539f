"""
API Key service for resolving API callers to users
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from metering.core.clock import utcnow
from metering.core.security import generate_api_key, hash_api_key
from metering.models import User


class APIKeyService:
    """Service for API key operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def issue_api_key(self, user: User) -> str:
        """
        Generate and store a new API key for a user (replaces any old key)

        Returns:
            Plain text API key (only shown once)
        """
        api_key = generate_api_key()
        user.api_key_hash = hash_api_key(api_key)
        user.updated_at = utcnow()
        await self.db.commit()
        return api_key

    async def get_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def validate_api_key(self, api_key: str) -> Optional[User]:
        """
        Validate API key and return associated user

        Args:
            api_key: Plain text API key

        Returns:
            User if valid and active, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.api_key_hash == hash_api_key(api_key))
        )
        user = result.scalar_one_or_none()

        if not user or not user.is_active:
            return None

        return user
