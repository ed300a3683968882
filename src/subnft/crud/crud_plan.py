from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.crud.base import CRUDBase
from src.subnft.models.plan import Plan as PlanModel
from src.subnft.schemas.plan import PlanResponse


class CRUDPlan(CRUDBase[PlanResponse, PlanModel]):
    """Plan catalog storage. Plan ids are assigned sequentially from 1."""

    async def create_plan(
        self,
        db: AsyncSession,
        *,
        name: str,
        price: int,
        description: str,
        creator: str,
        duration: int,
    ) -> PlanModel:
        plan = PlanModel(
            name=name,
            price=price,
            description=description,
            creator=creator,
            duration=duration,
            is_active=True,
        )
        return await self.add(db, db_obj=plan)

    async def get_available_plans(self, db: AsyncSession) -> list[PlanModel]:
        """All plans in creation order, inactive ones included."""
        return await self.get_multi(db)

    async def set_active(self, db: AsyncSession, *, plan: PlanModel, is_active: bool) -> PlanModel:
        return await self.update(db, db_obj=plan, values={"is_active": is_active})


plan = CRUDPlan(PlanResponse, PlanModel)
