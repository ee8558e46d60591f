"""
Base repository implementation.
"""
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.infrastructure.database.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations."""

    def __init__(
        self,
        model: Type[ModelType],
        db: AsyncSession,
    ):
        self.model = model
        self.db = db

    async def create(
        self,
        data: Dict[str, Any],
    ) -> ModelType:
        """
        Create a new record.

        Args:
            data: Record data

        Returns:
            Created record
        """
        db_obj = self.model(**data)
        self.db.add(db_obj)
        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj

    async def get(
        self,
        id: Any,
    ) -> Optional[ModelType]:
        """
        Get record by primary key.

        Args:
            id: Record primary key

        Returns:
            Record if found
        """
        return await self.db.get(self.model, id)

    async def upsert(
        self,
        data: Dict[str, Any],
    ) -> ModelType:
        """
        Insert a record or overwrite the one with the same primary key.

        Args:
            data: Full record data including the primary key

        Returns:
            Persisted record
        """
        db_obj = await self.db.merge(self.model(**data))
        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj

