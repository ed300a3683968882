from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.crud.base import CRUDBase
from src.subnft.models.event import SubscriptionEvent
from src.subnft.schemas.event import EventResponse


class CRUDEvent(CRUDBase[EventResponse, SubscriptionEvent]):
    """Append-only event log."""

    async def record(
        self,
        db: AsyncSession,
        *,
        operation: str,
        actor: str,
        timestamp: int,
        token_id: Optional[int] = None,
        amount: int = 0,
    ) -> SubscriptionEvent:
        event = SubscriptionEvent(
            operation=operation,
            token_id=token_id,
            actor=actor,
            amount=amount,
            timestamp=timestamp,
        )
        return await self.add(db, db_obj=event)

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        token_id: Optional[int] = None,
        actor: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[SubscriptionEvent]:
        stmt = select(SubscriptionEvent)
        if token_id is not None:
            stmt = stmt.where(SubscriptionEvent.token_id == token_id)
        if actor is not None:
            stmt = stmt.where(SubscriptionEvent.actor == actor)
        stmt = stmt.order_by(SubscriptionEvent.id).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())


event = CRUDEvent(EventResponse, SubscriptionEvent)
