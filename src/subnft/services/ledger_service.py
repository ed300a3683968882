"""
Payment ledger for the USDC stand-in.

Amounts are integers scaled by 10^6. ``PaymentLedger`` is the interface the
lifecycle engine consumes; ``TokenLedger`` is the bundled implementation that
keeps balances and allowances in the service database, so a ledger write and
the subscription change it pays for commit in the same transaction.
"""
import logging
from typing import Protocol

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.core.config import settings
from src.subnft.core.errors import InsufficientAllowance, InsufficientBalance
from src.subnft.models.ledger import TokenAllowance, TokenBalance

logger = logging.getLogger(__name__)


def balance_lock_statement(*accounts: str) -> Select:
    """Row locks on the balances a transfer touches, always taken in account order."""
    return (
        select(TokenBalance.account)
        .where(TokenBalance.account.in_(sorted(set(accounts))))
        .order_by(TokenBalance.account)
        .with_for_update()
    )


class PaymentLedger(Protocol):
    """Fungible token operations used to price subscription commands."""

    async def balance_of(self, db: AsyncSession, account: str) -> int: ...

    async def allowance(self, db: AsyncSession, owner: str, spender: str) -> int: ...

    async def transfer_from(self, db: AsyncSession, owner: str, spender: str, amount: int) -> None: ...

    async def transfer(self, db: AsyncSession, sender: str, to: str, amount: int) -> None: ...

    async def approve(self, db: AsyncSession, owner: str, spender: str, amount: int) -> None: ...

    async def faucet(self, db: AsyncSession, account: str) -> int: ...


class TokenLedger:
    """SQL backed USDC ledger with approve/transferFrom semantics."""

    def __init__(self, faucet_amount: int = settings.FAUCET_AMOUNT):
        self.faucet_amount = faucet_amount

    async def balance_of(self, db: AsyncSession, account: str) -> int:
        stmt = select(TokenBalance.balance).where(TokenBalance.account == account)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def allowance(self, db: AsyncSession, owner: str, spender: str) -> int:
        stmt = select(TokenAllowance.amount).where(
            TokenAllowance.owner == owner,
            TokenAllowance.spender == spender,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def approve(self, db: AsyncSession, owner: str, spender: str, amount: int) -> None:
        """Set (not add to) the amount ``spender`` may pull from ``owner``."""
        if amount < 0:
            raise ValueError("allowance cannot be negative")
        stmt = (
            update(TokenAllowance)
            .where(TokenAllowance.owner == owner, TokenAllowance.spender == spender)
            .values(amount=amount)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        if result.rowcount == 0:
            db.add(TokenAllowance(owner=owner, spender=spender, amount=amount))
            await db.flush()
        logger.info(f"Approved {spender} to spend {amount} from {owner}")

    async def mint(self, db: AsyncSession, account: str, amount: int) -> None:
        """Create new tokens for ``account``."""
        if amount < 0:
            raise ValueError("mint amount cannot be negative")
        await self._credit(db, account, amount)

    async def faucet(self, db: AsyncSession, account: str) -> int:
        """Dispense the fixed test amount to ``account``."""
        await self.mint(db, account, self.faucet_amount)
        logger.info(f"Faucet sent {self.faucet_amount} to {account}")
        return self.faucet_amount

    async def transfer_from(self, db: AsyncSession, owner: str, spender: str, amount: int) -> None:
        """Pull ``amount`` from ``owner`` into ``spender``, consuming allowance.

        Both checks run before any write, balance first.

        Raises:
            InsufficientBalance: owner holds less than ``amount``
            InsufficientAllowance: spender is approved for less than ``amount``
        """
        if amount == 0:
            return
        await self._lock_balances(db, owner, spender)
        balance = await self.balance_of(db, owner)
        if balance < amount:
            raise InsufficientBalance(owner, amount, balance)
        allowed = await self.allowance(db, owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(owner, amount, allowed)

        stmt = (
            update(TokenAllowance)
            .where(
                TokenAllowance.owner == owner,
                TokenAllowance.spender == spender,
                TokenAllowance.amount >= amount,
            )
            .values(amount=TokenAllowance.amount - amount)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        if result.rowcount != 1:
            raise InsufficientAllowance(owner, amount, await self.allowance(db, owner, spender))
        await self._debit(db, owner, amount)
        await self._credit(db, spender, amount)
        logger.info(f"transferFrom {owner} -> {spender}: {amount}")

    async def transfer(self, db: AsyncSession, sender: str, to: str, amount: int) -> None:
        """Move ``amount`` from ``sender`` to ``to``.

        Raises:
            InsufficientBalance: sender holds less than ``amount``
        """
        if amount == 0:
            return
        await self._lock_balances(db, sender, to)
        await self._debit(db, sender, amount)
        await self._credit(db, to, amount)
        logger.info(f"transfer {sender} -> {to}: {amount}")

    async def _lock_balances(self, db: AsyncSession, *accounts: str) -> None:
        await db.execute(balance_lock_statement(*accounts))

    async def _debit(self, db: AsyncSession, account: str, amount: int) -> None:
        stmt = (
            update(TokenBalance)
            .where(TokenBalance.account == account, TokenBalance.balance >= amount)
            .values(balance=TokenBalance.balance - amount)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        if result.rowcount != 1:
            raise InsufficientBalance(account, amount, await self.balance_of(db, account))

    async def _credit(self, db: AsyncSession, account: str, amount: int) -> None:
        exists = await db.execute(select(TokenBalance.account).where(TokenBalance.account == account))
        if exists.scalar_one_or_none() is None:
            db.add(TokenBalance(account=account, balance=amount))
            await db.flush()
            return
        stmt = (
            update(TokenBalance)
            .where(TokenBalance.account == account)
            .values(balance=TokenBalance.balance + amount)
            .execution_options(synchronize_session=False)
        )
        await db.execute(stmt)


token_ledger = TokenLedger()

