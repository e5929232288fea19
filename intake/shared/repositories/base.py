"""
Base Repository

Generic repository over one SQLAlchemy model. Entity repositories inherit
from it and add their own queries.

    class FrameRepository(TargetRepository[Frame]): ...

    repo = FrameRepository(session)
    frame = await repo.get(frame_id)  # Frame, not Any

Transactions:
=============
Repository methods only flush. The unit of work (get_db() for a request,
session_scope() for a worker step) commits or rolls back, so writing a
verdict and marking its job done land together.
"""

from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intake.shared.models.base import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Lookup and insert shared by every repository.

    Attributes:
        model: The SQLAlchemy model class
        session: The async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    async def get(self, record_id: UUID) -> Optional[ModelType]:
        """
        Fetch one row by primary key.

        Returns:
            The model instance, or None if no row has that id
        """
        result = await self.session.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Insert a row and return it with database defaults loaded.

        Args:
            **kwargs: Column values
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance
