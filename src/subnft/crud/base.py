from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.core.errors import NotFound
from src.subnft.models.base import Base

ModelType = TypeVar("ModelType", bound=BaseModel)
SQLModelType = TypeVar("SQLModelType", bound=Base)


class CRUDBase(Generic[ModelType, SQLModelType]):
    def __init__(self, model: Type[ModelType], sql_model: Type[SQLModelType]):
        """
        CRUD object with default methods to Read and stage writes.
        Writes are flushed, never committed: the caller owns the transaction.
        **Parameters**
        * `model`: A Pydantic model class
        * `sql_model`: A SQLAlchemy model class
        """
        self.model = model
        self.sql_model = sql_model
        self.pk = sql_model.__mapper__.primary_key[0]

    async def exists(self, db: AsyncSession, *, id: Any) -> bool:
        """Check if an object exists."""
        stmt = select(self.pk).where(self.pk == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count(self, db: AsyncSession) -> int:
        """Count all objects."""
        stmt = select(func.count()).select_from(self.sql_model)
        result = await db.execute(stmt)
        return result.scalar_one()

    async def get(self, db: AsyncSession, *, id: Any) -> Optional[SQLModelType]:
        """Get a single object by primary key."""
        stmt = select(self.sql_model).where(self.pk == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_404(self, db: AsyncSession, *, id: Any) -> SQLModelType:
        """Get a single object by primary key or raise NotFound."""
        obj = await self.get(db, id=id)
        if obj is None:
            raise NotFound(f"{self.sql_model.__name__} {id} not found")
        return obj

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: Optional[int] = None
    ) -> list[SQLModelType]:
        """Get multiple objects in primary key order.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return, all when None

        Returns:
            list[SQLModelType]: List of model objects
        """
        stmt = select(self.sql_model).order_by(self.pk).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def add(self, db: AsyncSession, *, db_obj: SQLModelType) -> SQLModelType:
        """Stage a new object and load server generated fields."""
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: SQLModelType, values: dict[str, Any]) -> SQLModelType:
        """Stage attribute changes on an object."""
        for field, value in values.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.flush()
        return db_obj
