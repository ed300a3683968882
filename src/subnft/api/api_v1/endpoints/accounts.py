from fastapi import APIRouter

from src.subnft.api.auth_deps import PathAccount
from src.subnft.db.session import SessionDep
from src.subnft.schemas.ledger import AllowanceResponse, BalanceResponse
from src.subnft.schemas.subscription import SubscriptionResponse
from src.subnft.services.lifecycle_service import EngineDep
from src.subnft.utils.money import format_usdc

router = APIRouter()


@router.get("/{account}/subscriptions", response_model=list[SubscriptionResponse])
async def read_account_subscriptions(
    account: PathAccount, db: SessionDep, engine: EngineDep
) -> list[SubscriptionResponse]:
    """Every subscription ever issued to the account, cancelled ones included."""
    token_ids = await engine.get_user_subscriptions(db, account)
    return [engine.describe(await engine.get_subscription(db, token_id)) for token_id in token_ids]


@router.get("/{account}/tokens")
async def read_account_tokens(account: PathAccount, db: SessionDep, engine: EngineDep) -> dict:
    """Token ids issued to the account and the number still held."""
    return {
        "account": account,
        "token_ids": await engine.get_user_subscriptions(db, account),
        "balance": await engine.balance_of(db, account),
    }


@router.get("/{account}/balance", response_model=BalanceResponse)
async def read_balance(account: PathAccount, db: SessionDep, engine: EngineDep) -> BalanceResponse:
    """USDC balance of the account."""
    balance = await engine.ledger.balance_of(db, account)
    return BalanceResponse(account=account, balance=balance, formatted=format_usdc(balance))


@router.get("/{account}/allowance", response_model=AllowanceResponse)
async def read_allowance(account: PathAccount, db: SessionDep, engine: EngineDep) -> AllowanceResponse:
    """USDC the treasury may still pull from the account."""
    allowance = await engine.ledger.allowance(db, account, engine.treasury)
    return AllowanceResponse(
        owner=account,
        spender=engine.treasury,
        allowance=allowance,
        formatted=format_usdc(allowance),
    )
