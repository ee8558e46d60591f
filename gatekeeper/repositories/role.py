"""
Role repository.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.infrastructure.database.models import RoleModel
from gatekeeper.repositories.base import BaseRepository


class RoleRepository(BaseRepository[RoleModel]):
    """Role repository."""

    def __init__(self, db: AsyncSession):
        super().__init__(RoleModel, db)

    async def get_by_name(
        self,
        name: str,
    ) -> Optional[RoleModel]:
        """
        Get role by exact name.

        Args:
            name: Role name (case-sensitive)

        Returns:
            Role if found
        """
        stmt = select(RoleModel).where(RoleModel.name == name)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[RoleModel]:
        """List all roles ordered by name."""
        stmt = select(RoleModel).order_by(RoleModel.name)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
