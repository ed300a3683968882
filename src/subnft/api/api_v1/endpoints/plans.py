from typing import Annotated

from fastapi import APIRouter, Depends

from src.subnft.core.pbac import require_permission
from src.subnft.db.session import SessionDep
from src.subnft.schemas.plan import PlanCreate, PlanResponse, PlanUpdate
from src.subnft.services.lifecycle_service import EngineDep

router = APIRouter()


@router.get("", response_model=list[PlanResponse])
async def read_plans(db: SessionDep, engine: EngineDep) -> list[PlanResponse]:
    """Get every plan in creation order, inactive plans included."""
    return await engine.get_available_plans(db)


@router.get("/{plan_id}", response_model=PlanResponse)
async def read_plan(plan_id: int, db: SessionDep, engine: EngineDep) -> PlanResponse:
    """Get a specific plan."""
    return await engine.get_plan(db, plan_id)


@router.post("", response_model=PlanResponse)
async def create_plan(
    plan_in: PlanCreate,
    db: SessionDep,
    engine: EngineDep,
    current_account: Annotated[str, Depends(require_permission("create", "plans"))],
) -> PlanResponse:
    """Create new plan."""
    return await engine.create_plan(
        db,
        caller=current_account,
        name=plan_in.name,
        price=plan_in.price,
        description=plan_in.description,
        duration=plan_in.duration,
    )


@router.patch("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: int,
    plan_in: PlanUpdate,
    db: SessionDep,
    engine: EngineDep,
    current_account: Annotated[str, Depends(require_permission("update", "plans"))],
) -> PlanResponse:
    """Activate or deactivate a plan."""
    return await engine.set_plan_active(db, caller=current_account, plan_id=plan_id, is_active=plan_in.is_active)
