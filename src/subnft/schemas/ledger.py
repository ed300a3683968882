from pydantic import Field

from .base import BaseSchema


class BalanceResponse(BaseSchema):
    account: str
    balance: int
    formatted: str


class AllowanceResponse(BaseSchema):
    owner: str
    spender: str
    allowance: int
    formatted: str


class ApproveRequest(BaseSchema):
    """Allow the treasury to pull up to ``amount`` from the caller."""
    amount: int = Field(..., ge=0)
