from typing import Annotated

from fastapi import APIRouter, Depends

from src.subnft.core.pbac import require_permission
from src.subnft.db.session import SessionDep
from src.subnft.schemas.enums import Operation
from src.subnft.schemas.subscription import (
    CommandResponse,
    OwnerResponse,
    SubscribeRequest,
    SubscriptionResponse,
)
from src.subnft.services.lifecycle_service import EngineDep

router = APIRouter()

Subscriber = Annotated[str, Depends(require_permission("create", "subscriptions"))]
Manager = Annotated[str, Depends(require_permission("update", "subscriptions"))]


@router.post("", response_model=SubscriptionResponse)
async def subscribe(
    request: SubscribeRequest,
    db: SessionDep,
    engine: EngineDep,
    current_account: Subscriber,
) -> SubscriptionResponse:
    """Pay for a plan and mint a subscription to the caller."""
    subscription = await engine.subscribe(
        db, caller=current_account, plan_id=request.plan_id, duration=request.duration
    )
    return engine.describe(subscription)


@router.get("/{token_id}", response_model=SubscriptionResponse)
async def read_subscription(token_id: int, db: SessionDep, engine: EngineDep) -> SubscriptionResponse:
    """Get subscription details. Cancelled subscriptions report is_active false."""
    subscription = await engine.get_subscription(db, token_id)
    return engine.describe(subscription)


@router.get("/{token_id}/owner", response_model=OwnerResponse)
async def read_owner(token_id: int, db: SessionDep, engine: EngineDep) -> OwnerResponse:
    """Current holder of a live token."""
    owner = await engine.owner_of(db, token_id)
    return OwnerResponse(token_id=token_id, owner=owner)


@router.get("/{token_id}/expired")
async def read_expired(token_id: int, db: SessionDep, engine: EngineDep) -> dict:
    """Whether the subscription is past expiry or cancelled."""
    return {"token_id": token_id, "expired": await engine.is_subscription_expired(db, token_id)}


@router.post("/{token_id}/renew", response_model=CommandResponse)
async def renew_subscription(
    token_id: int,
    db: SessionDep,
    engine: EngineDep,
    current_account: Manager,
) -> CommandResponse:
    """Pay one more plan period."""
    subscription = await engine.renew_subscription(db, caller=current_account, token_id=token_id)
    return CommandResponse(
        operation=Operation.RENEW.value,
        token_id=token_id,
        amount=subscription.period_price,
        expiry_date=subscription.expiry_date,
    )


@router.post("/{token_id}/cancel", response_model=CommandResponse)
async def cancel_subscription(
    token_id: int,
    db: SessionDep,
    engine: EngineDep,
    current_account: Manager,
) -> CommandResponse:
    """Cancel and refund the unused part of the current period."""
    refund = await engine.cancel_subscription(db, caller=current_account, token_id=token_id)
    return CommandResponse(operation=Operation.CANCEL.value, token_id=token_id, amount=refund)


@router.post("/{token_id}/auto-renewal", response_model=CommandResponse)
async def toggle_auto_renewal(
    token_id: int,
    db: SessionDep,
    engine: EngineDep,
    current_account: Manager,
) -> CommandResponse:
    """Flip auto-renewal on or off."""
    enabled = await engine.toggle_auto_renewal(db, caller=current_account, token_id=token_id)
    return CommandResponse(
        operation=Operation.TOGGLE_AUTO_RENEWAL.value,
        token_id=token_id,
        auto_renewal_enabled=enabled,
    )


@router.post("/{token_id}/process-auto-renewal", response_model=CommandResponse)
async def process_auto_renewal(
    token_id: int,
    db: SessionDep,
    engine: EngineDep,
    current_account: Manager,
) -> CommandResponse:
    """Renew a due subscription at its owner's expense. Any account may trigger it."""
    subscription = await engine.process_auto_renewal(db, caller=current_account, token_id=token_id)
    return CommandResponse(
        operation=Operation.AUTO_RENEW.value,
        token_id=token_id,
        amount=subscription.period_price,
        expiry_date=subscription.expiry_date,
    )
