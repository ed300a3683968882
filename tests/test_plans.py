import pytest

from src.subnft.core.config import settings
from src.subnft.core.errors import InvalidArgument, NotFound, Unauthorized
from src.subnft.db.init_db import DEFAULT_PLANS, init_db
from tests.helpers import ADMIN, ALICE, THIRTY_DAYS


async def test_admin_creates_plans_with_sequential_ids(db, lifecycle):
    first = await lifecycle.create_plan(db, caller=ADMIN, name="Basic", price=1_000_000)
    second = await lifecycle.create_plan(db, caller=ADMIN, name="Pro", price=5_000_000, duration=60)

    assert (first.id, second.id) == (1, 2)
    assert first.is_active is True
    assert first.creator == ADMIN
    assert first.duration == THIRTY_DAYS
    assert second.duration == 60


async def test_non_admin_cannot_create_plans(db, lifecycle):
    with pytest.raises(Unauthorized):
        await lifecycle.create_plan(db, caller=ALICE, name="Basic", price=1_000_000)
    assert await lifecycle.get_available_plans(db) == []


@pytest.mark.parametrize(
    "name, price, duration",
    [
        ("", 1_000_000, None),
        ("Basic", -1, None),
        ("Basic", 1_000_000, 0),
    ],
)
async def test_invalid_plan_arguments(db, lifecycle, name, price, duration):
    with pytest.raises(InvalidArgument):
        await lifecycle.create_plan(db, caller=ADMIN, name=name, price=price, duration=duration)


async def test_deactivated_plans_stay_listed(db, lifecycle):
    await lifecycle.create_plan(db, caller=ADMIN, name="Basic", price=1_000_000)
    await lifecycle.create_plan(db, caller=ADMIN, name="Pro", price=5_000_000)

    updated = await lifecycle.set_plan_active(db, caller=ADMIN, plan_id=1, is_active=False)

    assert updated.is_active is False
    plans = await lifecycle.get_available_plans(db)
    assert [(plan.id, plan.is_active) for plan in plans] == [(1, False), (2, True)]


async def test_set_plan_active_requires_admin_and_known_plan(db, lifecycle):
    await lifecycle.create_plan(db, caller=ADMIN, name="Basic", price=1_000_000)

    with pytest.raises(Unauthorized):
        await lifecycle.set_plan_active(db, caller=ALICE, plan_id=1, is_active=False)
    with pytest.raises(NotFound):
        await lifecycle.set_plan_active(db, caller=ADMIN, plan_id=9, is_active=False)


async def test_init_db_seeds_default_plans_once(db_engine, session_factory, lifecycle):
    await init_db(db_engine, session_factory)
    await init_db(db_engine, session_factory)

    async with session_factory() as session:
        plans = await lifecycle.get_available_plans(session)

    assert [plan.name for plan in plans] == [name for name, _, _ in DEFAULT_PLANS]
    assert plans[0].price == 29_990_000
    assert all(plan.creator == settings.admin_accounts[0] for plan in plans)
    assert all(plan.duration == settings.DEFAULT_PLAN_DURATION for plan in plans)
