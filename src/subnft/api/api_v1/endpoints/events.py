from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from src.subnft.crud.crud_event import event as crud_event
from src.subnft.db.session import SessionDep
from src.subnft.schemas.event import EventResponse
from src.subnft.utils.validation import normalize_account

router = APIRouter()


@router.get("", response_model=list[EventResponse])
async def read_events(
    db: SessionDep,
    token_id: Optional[int] = None,
    actor: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[EventResponse]:
    """Event log in commit order, optionally filtered by token or actor."""
    if actor is not None:
        try:
            actor = normalize_account(actor)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return await crud_event.get_filtered(db, token_id=token_id, actor=actor, skip=skip, limit=limit)
