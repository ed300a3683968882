"""Shared accounts and fakes for the test suite."""
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.core.config import settings
from src.subnft.services.ledger_service import TokenLedger
from src.subnft.utils.money import USDC_UNIT

ADMIN = settings.admin_accounts[0]
ALICE = "0xb2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2"
BOB = "0xc3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3"
TREASURY = settings.TREASURY_ACCOUNT

THIRTY_DAYS = 2_592_000
DEFI_PRICE = 29_990_000
START_BALANCE = 1_000 * USDC_UNIT


class FakeClock:
    """Settable clock, in unix seconds."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class RecordingPublisher:
    """Stands in for the SQS publisher and keeps what it was given."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def publish_event(self, event: Dict[str, Any]) -> str:
        self.events.append(event)
        return str(len(self.events))

    @property
    def operations(self) -> List[str]:
        return [event["operation"] for event in self.events]


async def fund(
    db: AsyncSession,
    ledger: TokenLedger,
    account: str,
    amount: int = START_BALANCE,
    allowance: int = START_BALANCE,
) -> None:
    """Mint test USDC to ``account`` and approve the treasury to pull it."""
    await ledger.mint(db, account, amount)
    await ledger.approve(db, account, TREASURY, allowance)
    await db.commit()
