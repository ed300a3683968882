"""
Subscription lifecycle engine.

Implements subscribe, renew, cancel with pro-rated refund, auto-renewal
toggling and keeper-triggered auto-renewal on top of the plan catalog, the
subscription registry and a payment ledger.

Every command runs in one database transaction: the ledger transfer and the
registry change it pays for are committed together or rolled back together.
Commands touching the same token id are serialised by a per-token lock;
commands on different tokens run concurrently.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated, Any, AsyncIterator, Callable, Dict, List, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.subnft.core.config import settings
from src.subnft.core.errors import (
    AlreadyCancelled,
    InvalidArgument,
    InvalidPlan,
    LedgerError,
    NotDue,
    NotFound,
    PaymentFailed,
    Unauthorized,
)
from src.subnft.crud.crud_event import event as crud_event
from src.subnft.crud.crud_plan import plan as crud_plan
from src.subnft.crud.crud_subscription import subscription as crud_subscription
from src.subnft.models.plan import Plan
from src.subnft.models.subscription import Subscription
from src.subnft.schemas.enums import Operation
from src.subnft.schemas.subscription import SubscriptionDetails, SubscriptionResponse
from src.subnft.services.ledger_service import PaymentLedger, token_ledger
from src.subnft.services.messaging_service import MessagingService, get_messaging_service
from src.subnft.utils.subscription import current_timestamp, get_subscription_status

logger = logging.getLogger(__name__)


def calculate_refund(price: int, period_length: int, expiry_date: int, now: int) -> int:
    """
    Linear proration of the unused part of the current paid period.

    Uses floor division and never exceeds ``price``.
    """
    if period_length <= 0:
        return 0
    remaining = max(0, expiry_date - now)
    return min(price, price * remaining // period_length)


class SubscriptionLifecycleEngine:
    def __init__(
        self,
        ledger: PaymentLedger,
        treasury: str,
        is_admin: Callable[[str], bool],
        clock: Callable[[], int] = current_timestamp,
        default_plan_duration: int = settings.DEFAULT_PLAN_DURATION,
        publisher: Callable[[], Optional[MessagingService]] = get_messaging_service,
    ):
        self.ledger = ledger
        self.treasury = treasury
        self.is_admin = is_admin
        self.clock = clock
        self.default_plan_duration = default_plan_duration
        self.publisher = publisher

        self._token_locks: Dict[int, asyncio.Lock] = {}
        self._token_lock_users: Dict[int, int] = {}
        self._mint_lock = asyncio.Lock()
        self._catalog_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _hold_token(self, token_id: int) -> AsyncIterator[None]:
        """Serialise commands on one token id. The lock is dropped once nobody holds or waits on it."""
        lock = self._token_locks.get(token_id)
        if lock is None:
            lock = self._token_locks[token_id] = asyncio.Lock()
        self._token_lock_users[token_id] = self._token_lock_users.get(token_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._token_lock_users[token_id] -= 1
            if self._token_lock_users[token_id] == 0:
                del self._token_lock_users[token_id]
                del self._token_locks[token_id]

    @asynccontextmanager
    async def _transaction(self, db: AsyncSession) -> AsyncIterator[List[Dict[str, Any]]]:
        """Commit on success, roll back on any error, then publish recorded events."""
        events: List[Dict[str, Any]] = []
        try:
            yield events
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._publish(events)

    async def _publish(self, events: List[Dict[str, Any]]) -> None:
        if not events:
            return
        publisher = self.publisher()
        if publisher is None:
            return
        for payload in events:
            await publisher.publish_event(payload)

    async def _record(
        self,
        db: AsyncSession,
        events: List[Dict[str, Any]],
        operation: Operation,
        actor: str,
        now: int,
        token_id: Optional[int] = None,
        amount: int = 0,
    ) -> None:
        row = await crud_event.record(
            db,
            operation=operation.value,
            actor=actor,
            timestamp=now,
            token_id=token_id,
            amount=amount,
        )
        events.append({
            "id": row.id,
            "operation": row.operation,
            "token_id": row.token_id,
            "actor": row.actor,
            "amount": row.amount,
            "timestamp": row.timestamp,
        })
        logger.info(f"{operation.value} token={token_id} actor={actor} amount={amount}")

    async def _charge(self, db: AsyncSession, payer: str, amount: int) -> None:
        try:
            await self.ledger.transfer_from(db, payer, self.treasury, amount)
        except LedgerError as e:
            raise PaymentFailed(e.reason, str(e)) from e

    async def _refund(self, db: AsyncSession, to: str, amount: int) -> None:
        try:
            await self.ledger.transfer(db, self.treasury, to, amount)
        except LedgerError as e:
            raise PaymentFailed(e.reason, str(e)) from e

    async def _live_subscription(self, db: AsyncSession, token_id: int) -> Subscription:
        """A minted, not cancelled subscription. Retired tokens count as unknown."""
        subscription = await crud_subscription.get_or_404(db, id=token_id)
        if not subscription.is_active or subscription.owner is None:
            raise NotFound(f"Invalid token ID {token_id}")
        return subscription

    def _require_owner(self, subscription: Subscription, caller: str) -> None:
        if subscription.owner != caller:
            raise Unauthorized(f"{caller} does not own subscription {subscription.token_id}")

    async def _extend(self, db: AsyncSession, subscription: Subscription, payer: str, now: int) -> int:
        """Charge one plan period to ``payer`` and extend from max(now, expiry)."""
        plan = await crud_plan.get_or_404(db, id=subscription.plan_id)
        await self._charge(db, payer, plan.price)
        new_expiry = max(now, subscription.expiry_date) + plan.duration
        await crud_subscription.set_expiry(db, subscription=subscription, expiry_date=new_expiry)
        await crud_subscription.set_active(db, subscription=subscription, is_active=True)
        await crud_subscription.set_period(
            db, subscription=subscription, period_price=plan.price, period_length=plan.duration
        )
        return plan.price

    # ------------------------------------------------------------------
    # plan catalog
    # ------------------------------------------------------------------

    async def create_plan(
        self,
        db: AsyncSession,
        *,
        caller: str,
        name: str,
        price: int,
        description: str = "",
        duration: Optional[int] = None,
    ) -> Plan:
        """Add a plan to the catalog. Administrator only."""
        if not self.is_admin(caller):
            raise Unauthorized(f"{caller} is not allowed to create plans")
        if duration is None:
            duration = self.default_plan_duration
        if not name:
            raise InvalidArgument("Plan name is required")
        if price < 0:
            raise InvalidArgument("Plan price cannot be negative")
        if duration <= 0:
            raise InvalidArgument("Plan duration must be positive")

        async with self._catalog_lock:
            now = self.clock()
            async with self._transaction(db) as events:
                plan = await crud_plan.create_plan(
                    db,
                    name=name,
                    price=price,
                    description=description,
                    creator=caller,
                    duration=duration,
                )
                await self._record(db, events, Operation.CREATE_PLAN, caller, now)
        return plan

    async def set_plan_active(self, db: AsyncSession, *, caller: str, plan_id: int, is_active: bool) -> Plan:
        """Activate or deactivate a plan. Existing subscriptions are unaffected."""
        if not self.is_admin(caller):
            raise Unauthorized(f"{caller} is not allowed to manage plans")
        async with self._catalog_lock:
            now = self.clock()
            async with self._transaction(db) as events:
                plan = await crud_plan.get_or_404(db, id=plan_id)
                await crud_plan.set_active(db, plan=plan, is_active=is_active)
                await self._record(db, events, Operation.SET_PLAN_ACTIVE, caller, now)
        return plan

    async def get_available_plans(self, db: AsyncSession) -> list[Plan]:
        return await crud_plan.get_available_plans(db)

    async def get_plan(self, db: AsyncSession, plan_id: int) -> Plan:
        return await crud_plan.get_or_404(db, id=plan_id)

    # ------------------------------------------------------------------
    # subscription commands
    # ------------------------------------------------------------------

    async def subscribe(self, db: AsyncSession, *, caller: str, plan_id: int, duration: int) -> Subscription:
        """
        Pay the plan price and mint a new subscription to ``caller``.

        Args:
            db: Database session
            caller: Paying account, becomes the owner
            plan_id: Active plan to subscribe to
            duration: Length of the first paid period in seconds

        Returns:
            Subscription: The minted record

        Raises:
            InvalidArgument: duration is not positive
            InvalidPlan: plan missing or inactive
            PaymentFailed: ledger rejected the payment
        """
        if duration <= 0:
            raise InvalidArgument("Duration must be positive")
        async with self._mint_lock:
            now = self.clock()
            async with self._transaction(db) as events:
                plan = await crud_plan.get(db, id=plan_id)
                if plan is None or not plan.is_active:
                    raise InvalidPlan(f"Plan {plan_id} does not exist or is not active")
                await self._charge(db, caller, plan.price)
                subscription = await crud_subscription.mint(
                    db,
                    owner=caller,
                    plan_id=plan_id,
                    expiry_date=now + duration,
                    period_price=plan.price,
                    period_length=duration,
                )
                await self._record(
                    db, events, Operation.SUBSCRIBE, caller, now,
                    token_id=subscription.token_id, amount=plan.price,
                )
        return subscription

    async def renew_subscription(self, db: AsyncSession, *, caller: str, token_id: int) -> Subscription:
        """Owner pays one more plan period; expiry never moves backwards."""
        async with self._hold_token(token_id):
            now = self.clock()
            async with self._transaction(db) as events:
                subscription = await self._live_subscription(db, token_id)
                self._require_owner(subscription, caller)
                amount = await self._extend(db, subscription, caller, now)
                await self._record(db, events, Operation.RENEW, caller, now, token_id=token_id, amount=amount)
        return subscription

    async def cancel_subscription(self, db: AsyncSession, *, caller: str, token_id: int) -> int:
        """
        Cancel a subscription and refund the unused part of the current period.

        The record is kept with ``is_active`` false and its owner cleared, so
        the token id is retired and never reassigned.

        Returns:
            int: Refunded amount
        """
        async with self._hold_token(token_id):
            now = self.clock()
            async with self._transaction(db) as events:
                subscription = await crud_subscription.get_or_404(db, id=token_id)
                if not subscription.is_active:
                    raise AlreadyCancelled(f"Subscription {token_id} is already cancelled")
                self._require_owner(subscription, caller)

                refund = calculate_refund(
                    subscription.period_price,
                    subscription.period_length,
                    subscription.expiry_date,
                    now,
                )
                await self._refund(db, caller, refund)
                await crud_subscription.set_active(db, subscription=subscription, is_active=False)
                await crud_subscription.transfer_ownership(db, subscription=subscription, new_owner=None)
                await self._record(db, events, Operation.CANCEL, caller, now, token_id=token_id, amount=refund)
        return refund

    async def toggle_auto_renewal(self, db: AsyncSession, *, caller: str, token_id: int) -> bool:
        """Flip the auto-renewal flag. Returns the new value."""
        async with self._hold_token(token_id):
            now = self.clock()
            async with self._transaction(db) as events:
                subscription = await self._live_subscription(db, token_id)
                self._require_owner(subscription, caller)
                enabled = not subscription.auto_renewal_enabled
                await crud_subscription.set_auto_renewal(db, subscription=subscription, enabled=enabled)
                await self._record(db, events, Operation.TOGGLE_AUTO_RENEWAL, caller, now, token_id=token_id)
        return enabled

    async def process_auto_renewal(self, db: AsyncSession, *, caller: str, token_id: int) -> Subscription:
        """
        Renew a due subscription on behalf of its owner.

        Anyone may trigger it; the owner pays. On payment failure nothing
        changes and the subscription stays expired.

        Raises:
            NotDue: auto-renewal disabled or expiry not reached
            PaymentFailed: owner balance or allowance too low
        """
        async with self._hold_token(token_id):
            now = self.clock()
            async with self._transaction(db) as events:
                subscription = await self._live_subscription(db, token_id)
                if not subscription.auto_renewal_enabled:
                    raise NotDue(f"Auto-renewal is not enabled for subscription {token_id}")
                if now < subscription.expiry_date:
                    raise NotDue(f"Subscription {token_id} is not due until {subscription.expiry_date}")
                try:
                    amount = await self._extend(db, subscription, subscription.owner, now)
                except PaymentFailed as e:
                    logger.warning(f"Auto-renewal of {token_id} failed: {e.reason}")
                    raise
                await self._record(
                    db, events, Operation.AUTO_RENEW, caller, now, token_id=token_id, amount=amount
                )
        return subscription

    # ------------------------------------------------------------------
    # ledger commands
    # ------------------------------------------------------------------

    async def approve(self, db: AsyncSession, *, caller: str, amount: int) -> int:
        """Allow the treasury to pull up to ``amount`` from ``caller``."""
        if amount < 0:
            raise InvalidArgument("Allowance cannot be negative")
        async with self._transaction(db) as events:
            now = self.clock()
            await self.ledger.approve(db, caller, self.treasury, amount)
            await self._record(db, events, Operation.APPROVE, caller, now, amount=amount)
        return amount

    async def faucet(self, db: AsyncSession, *, caller: str) -> int:
        """Dispense test USDC to ``caller``. Returns the amount sent."""
        async with self._transaction(db) as events:
            now = self.clock()
            amount = await self.ledger.faucet(db, caller)
            await self._record(db, events, Operation.FAUCET, caller, now, amount=amount)
        return amount

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    async def get_subscription(self, db: AsyncSession, token_id: int) -> Subscription:
        """Any minted record, cancelled ones included."""
        return await crud_subscription.get_or_404(db, id=token_id)

    async def get_subscription_details(self, db: AsyncSession, token_id: int) -> SubscriptionDetails:
        subscription = await self.get_subscription(db, token_id)
        return SubscriptionDetails(
            plan_id=subscription.plan_id,
            expiry_date=subscription.expiry_date,
            is_active=subscription.is_active,
        )

    async def get_user_subscriptions(self, db: AsyncSession, owner: str) -> list[int]:
        return await crud_subscription.subscriptions_of(db, owner=owner)

    async def is_subscription_expired(self, db: AsyncSession, token_id: int) -> bool:
        """Cancelled subscriptions count as expired."""
        subscription = await self.get_subscription(db, token_id)
        return not subscription.is_active or self.clock() >= subscription.expiry_date

    async def owner_of(self, db: AsyncSession, token_id: int) -> str:
        return await crud_subscription.owner_of(db, token_id=token_id)

    async def balance_of(self, db: AsyncSession, owner: str) -> int:
        return await crud_subscription.balance_of(db, owner=owner)

    def describe(self, subscription: Subscription) -> SubscriptionResponse:
        status, days_remaining = get_subscription_status(
            subscription.expiry_date, subscription.is_active, self.clock()
        )
        return SubscriptionResponse(
            token_id=subscription.token_id,
            owner=subscription.owner,
            plan_id=subscription.plan_id,
            expiry_date=subscription.expiry_date,
            is_active=subscription.is_active,
            auto_renewal_enabled=subscription.auto_renewal_enabled,
            status=status,
            days_remaining=days_remaining,
        )


lifecycle_engine = SubscriptionLifecycleEngine(
    ledger=token_ledger,
    treasury=settings.TREASURY_ACCOUNT,
    is_admin=settings.is_admin,
)


def get_lifecycle_engine() -> SubscriptionLifecycleEngine:
    return lifecycle_engine


EngineDep = Annotated[SubscriptionLifecycleEngine, Depends(get_lifecycle_engine)]
