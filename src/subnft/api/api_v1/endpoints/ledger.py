import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.subnft.core.config import settings
from src.subnft.core.pbac import require_permission
from src.subnft.db.session import SessionDep
from src.subnft.schemas.ledger import AllowanceResponse, ApproveRequest, BalanceResponse
from src.subnft.services.lifecycle_service import EngineDep
from src.subnft.utils.money import format_usdc

router = APIRouter()
logger = logging.getLogger(__name__)

LedgerUser = Annotated[str, Depends(require_permission("create", "ledger"))]


@router.post("/approve", response_model=AllowanceResponse)
async def approve(
    request: ApproveRequest,
    db: SessionDep,
    engine: EngineDep,
    current_account: LedgerUser,
) -> AllowanceResponse:
    """Allow the treasury to pull up to ``amount`` from the caller."""
    allowance = await engine.approve(db, caller=current_account, amount=request.amount)
    return AllowanceResponse(
        owner=current_account,
        spender=engine.treasury,
        allowance=allowance,
        formatted=format_usdc(allowance),
    )


@router.post("/faucet", response_model=BalanceResponse)
async def faucet(
    db: SessionDep,
    engine: EngineDep,
    current_account: LedgerUser,
) -> BalanceResponse:
    """Dispense test USDC to the caller."""
    if not settings.FAUCET_ENABLED:
        logger.warning(f"Faucet request from {current_account} while disabled")
        raise HTTPException(status_code=403, detail="Faucet is disabled")
    await engine.faucet(db, caller=current_account)
    balance = await engine.ledger.balance_of(db, current_account)
    return BalanceResponse(account=current_account, balance=balance, formatted=format_usdc(balance))
