from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.core.errors import InvalidPlan, NotFound
from src.subnft.crud.base import CRUDBase
from src.subnft.models.plan import Plan as PlanModel
from src.subnft.models.subscription import Subscription as SubscriptionModel, UserSubscription
from src.subnft.schemas.subscription import SubscriptionResponse


class CRUDSubscription(CRUDBase[SubscriptionResponse, SubscriptionModel]):
    """Subscription registry: the single writer of subscription records and the account index."""

    async def next_token_id(self, db: AsyncSession) -> int:
        """Token ids start at 0 and are never reused, cancelled records are kept."""
        stmt = select(func.max(SubscriptionModel.token_id))
        result = await db.execute(stmt)
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def mint(
        self,
        db: AsyncSession,
        *,
        owner: str,
        plan_id: int,
        expiry_date: int,
        period_price: int,
        period_length: int,
    ) -> SubscriptionModel:
        """Create an active subscription bound to ``owner`` and index it."""
        plan = await db.get(PlanModel, plan_id)
        if plan is None or not plan.is_active:
            raise InvalidPlan(f"Plan {plan_id} does not exist or is not active")

        token_id = await self.next_token_id(db)
        subscription = SubscriptionModel(
            token_id=token_id,
            owner=owner,
            plan_id=plan_id,
            expiry_date=expiry_date,
            is_active=True,
            auto_renewal_enabled=False,
            period_price=period_price,
            period_length=period_length,
        )
        db.add(subscription)
        await db.flush()
        db.add(UserSubscription(account=owner, token_id=token_id))
        await db.flush()
        return subscription

    async def set_expiry(self, db: AsyncSession, *, subscription: SubscriptionModel, expiry_date: int) -> None:
        await self.update(db, db_obj=subscription, values={"expiry_date": expiry_date})

    async def set_active(self, db: AsyncSession, *, subscription: SubscriptionModel, is_active: bool) -> None:
        await self.update(db, db_obj=subscription, values={"is_active": is_active})

    async def set_auto_renewal(self, db: AsyncSession, *, subscription: SubscriptionModel, enabled: bool) -> None:
        await self.update(db, db_obj=subscription, values={"auto_renewal_enabled": enabled})

    async def set_period(
        self, db: AsyncSession, *, subscription: SubscriptionModel, period_price: int, period_length: int
    ) -> None:
        await self.update(
            db,
            db_obj=subscription,
            values={"period_price": period_price, "period_length": period_length},
        )

    async def transfer_ownership(
        self, db: AsyncSession, *, subscription: SubscriptionModel, new_owner: Optional[str]
    ) -> None:
        """Rebind a token. ``None`` retires the identity."""
        await self.update(db, db_obj=subscription, values={"owner": new_owner})

    async def subscriptions_of(self, db: AsyncSession, *, owner: str) -> list[int]:
        """Every token id ever minted to ``owner``, in mint order."""
        stmt = (
            select(UserSubscription.token_id)
            .where(UserSubscription.account == owner)
            .order_by(UserSubscription.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def balance_of(self, db: AsyncSession, *, owner: str) -> int:
        """Number of live tokens held by ``owner``."""
        stmt = select(func.count()).select_from(SubscriptionModel).where(
            SubscriptionModel.owner == owner,
            SubscriptionModel.is_active.is_(True),
        )
        result = await db.execute(stmt)
        return result.scalar_one()

    async def owner_of(self, db: AsyncSession, *, token_id: int) -> str:
        subscription = await self.get(db, id=token_id)
        if subscription is None or subscription.owner is None:
            raise NotFound(f"Invalid token ID {token_id}")
        return subscription.owner


subscription = CRUDSubscription(SubscriptionResponse, SubscriptionModel)
