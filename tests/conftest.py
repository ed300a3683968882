from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from src.subnft.core.config import settings
from src.subnft.db.session import get_db
from src.subnft.main import app
from src.subnft.models import Base
from src.subnft.services.auth_service import AuthService
from src.subnft.services.ledger_service import TokenLedger
from src.subnft.services.lifecycle_service import SubscriptionLifecycleEngine, get_lifecycle_engine
from tests.helpers import ADMIN, ALICE, BOB, DEFI_PRICE, THIRTY_DAYS, TREASURY, FakeClock, RecordingPublisher, fund


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path):
    """A fresh file-backed SQLite database per test with all tables created."""
    db_path = tmp_path / "test.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path.as_posix()}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger() -> TokenLedger:
    return TokenLedger(faucet_amount=settings.FAUCET_AMOUNT)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def lifecycle(ledger, clock, publisher) -> SubscriptionLifecycleEngine:
    return SubscriptionLifecycleEngine(
        ledger=ledger,
        treasury=TREASURY,
        is_admin=settings.is_admin,
        clock=clock,
        default_plan_duration=THIRTY_DAYS,
        publisher=lambda: publisher,
    )


@pytest_asyncio.fixture
async def defi_plan(db, lifecycle):
    """Plan 1: 29.99 USDC every 30 days."""
    return await lifecycle.create_plan(
        db,
        caller=ADMIN,
        name="DeFi Analytics Pro",
        price=DEFI_PRICE,
        description="Advanced DeFi analytics and portfolio tracking",
        duration=THIRTY_DAYS,
    )


@pytest_asyncio.fixture
async def funded(db, ledger):
    """ALICE and BOB each hold 1000 USDC, fully approved to the treasury."""
    await fund(db, ledger, ALICE)
    await fund(db, ledger, BOB)


@pytest.fixture
def auth_service() -> AuthService:
    return AuthService()


@pytest.fixture
def auth_headers(auth_service):
    def _headers(account: str) -> dict:
        return {"Authorization": f"Bearer {auth_service.create_access_token(account)}"}
    return _headers


@pytest_asyncio.fixture
async def client(session_factory, lifecycle):
    """API client bound to the per-test database and engine."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lifecycle_engine] = lambda: lifecycle
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
