"""
User repository.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.infrastructure.database.models import UserModel
from gatekeeper.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserModel]):
    """User repository."""

    def __init__(self, db: AsyncSession):
        super().__init__(UserModel, db)
