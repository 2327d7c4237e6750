"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.
    Repositories never commit: the calling service owns the unit of work.
    Balance and status changes go through single-statement UPDATEs that
    bypass the identity map, so lookups reload rows from the database.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class StakeRepository(BaseRepository[Stake]):
            def __init__(self, session: AsyncSession):
                super().__init__(Stake, session)
    """

    def __init__(
        self, model: Type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by_id(
        self, id: int, fresh: bool = False
    ) -> Optional[ModelType]:
        """
        Get entity by ID.

        Args:
            id: Entity ID
            fresh: Reload attributes from the database even if the
                entity is already in the identity map

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, id, populate_existing=fresh)

    async def get_by(
        self, **filters: Any
    ) -> Optional[ModelType]:
        """
        Get single entity by filters.

        Args:
            **filters: Column filters

        Returns:
            First matching entity or None
        """
        stmt = (
            select(self.model)
            .filter_by(**filters)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        **filters: Any,
    ) -> List[ModelType]:
        """
        Find all entities matching filters.

        Args:
            limit: Max number of results
            offset: Number of results to skip
            **filters: Column filters

        Returns:
            List of matching entities
        """
        stmt = (
            select(self.model)
            .filter_by(**filters)
            .execution_options(populate_existing=True)
        )

        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by(
        self, **filters: Any
    ) -> List[ModelType]:
        """Find entities by filters."""
        return await self.find_all(**filters)

    async def create(self, **data: Any) -> ModelType:
        """
        Create new entity.

        Args:
            **data: Entity data

        Returns:
            Created entity (flushed, primary key assigned)
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(
        self, id: int, **data: Any
    ) -> Optional[ModelType]:
        """
        Update entity by ID.

        Not for guarded state transitions, use update_where for those.

        Args:
            id: Entity ID
            **data: Updated data

        Returns:
            Updated entity or None if not found
        """
        entity = await self.get_by_id(id)
        if not entity:
            return None

        for key, value in data.items():
            setattr(entity, key, value)

        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update_where(
        self, *conditions: ColumnElement[bool], **values: Any
    ) -> int:
        """
        Conditional UPDATE executed in a single SQL statement.

        The affected row count tells the caller whether the
        precondition held at write time.

        Args:
            *conditions: WHERE clauses
            **values: Column values to set

        Returns:
            Number of affected rows
        """
        stmt = (
            update(self.model)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            Count of matching entities
        """
        stmt = select(func.count()).select_from(self.model)

        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, **filters: Any) -> bool:
        """Check if entity exists."""
        count = await self.count(**filters)
        return count > 0
