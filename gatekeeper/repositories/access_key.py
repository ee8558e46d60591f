"""
Access key repository.
"""
from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.infrastructure.database.models import AccessKeyModel
from gatekeeper.repositories.base import BaseRepository


class AccessKeyRepository(BaseRepository[AccessKeyModel]):
    """Access key repository."""

    def __init__(self, db: AsyncSession):
        super().__init__(AccessKeyModel, db)

    async def list_by_owner(
        self,
        owner_user_id: UUID,
    ) -> List[AccessKeyModel]:
        """
        Get all keys owned by a user, oldest first.

        Args:
            owner_user_id: Owner's user ID

        Returns:
            List of access keys
        """
        stmt = (
            select(AccessKeyModel)
            .where(AccessKeyModel.owner_user_id == owner_user_id)
            .order_by(AccessKeyModel.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def set_active(
        self,
        access_key_id: str,
        active: bool,
    ) -> bool:
        """
        Flip the active flag in a single UPDATE.

        Args:
            access_key_id: Public key identifier
            active: New flag value

        Returns:
            True if a row matched
        """
        stmt = (
            update(AccessKeyModel)
            .where(AccessKeyModel.access_key_id == access_key_id)
            .values(active=active)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0
