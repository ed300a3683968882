import pytest
from sqlalchemy.dialects import postgresql

from src.subnft.core.errors import InsufficientAllowance, InsufficientBalance
from src.subnft.services.ledger_service import balance_lock_statement
from tests.helpers import ALICE, BOB, TREASURY


async def test_unknown_accounts_hold_nothing(db, ledger):
    assert await ledger.balance_of(db, ALICE) == 0
    assert await ledger.allowance(db, ALICE, TREASURY) == 0


async def test_approve_sets_rather_than_adds(db, ledger):
    await ledger.approve(db, ALICE, TREASURY, 500)
    await ledger.approve(db, ALICE, TREASURY, 200)
    await db.commit()

    assert await ledger.allowance(db, ALICE, TREASURY) == 200


async def test_approve_rejects_negative_amounts(db, ledger):
    with pytest.raises(ValueError):
        await ledger.approve(db, ALICE, TREASURY, -1)


async def test_faucet_credits_fixed_amount(db, ledger):
    first = await ledger.faucet(db, ALICE)
    await ledger.faucet(db, ALICE)
    await db.commit()

    assert first == ledger.faucet_amount
    assert await ledger.balance_of(db, ALICE) == 2 * ledger.faucet_amount


async def test_transfer_from_consumes_allowance(db, ledger):
    await ledger.mint(db, ALICE, 1_000)
    await ledger.approve(db, ALICE, TREASURY, 600)

    await ledger.transfer_from(db, ALICE, TREASURY, 400)
    await db.commit()

    assert await ledger.balance_of(db, ALICE) == 600
    assert await ledger.balance_of(db, TREASURY) == 400
    assert await ledger.allowance(db, ALICE, TREASURY) == 200


async def test_transfer_from_checks_balance_before_allowance(db, ledger):
    await ledger.mint(db, ALICE, 100)

    with pytest.raises(InsufficientBalance) as exc_info:
        await ledger.transfer_from(db, ALICE, TREASURY, 500)
    assert exc_info.value.available == 100
    assert exc_info.value.required == 500


async def test_transfer_from_requires_allowance(db, ledger):
    await ledger.mint(db, ALICE, 1_000)
    await ledger.approve(db, ALICE, TREASURY, 10)

    with pytest.raises(InsufficientAllowance):
        await ledger.transfer_from(db, ALICE, TREASURY, 11)
    assert await ledger.balance_of(db, ALICE) == 1_000


async def test_zero_transfer_is_a_no_op(db, ledger):
    await ledger.transfer_from(db, ALICE, TREASURY, 0)
    await ledger.transfer(db, TREASURY, ALICE, 0)

    assert await ledger.balance_of(db, ALICE) == 0


async def test_transfer_moves_funds(db, ledger):
    await ledger.mint(db, ALICE, 300)

    await ledger.transfer(db, ALICE, BOB, 120)
    await db.commit()

    assert await ledger.balance_of(db, ALICE) == 180
    assert await ledger.balance_of(db, BOB) == 120


async def test_transfer_never_overdraws(db, ledger):
    await ledger.mint(db, ALICE, 50)

    with pytest.raises(InsufficientBalance):
        await ledger.transfer(db, ALICE, BOB, 51)
    assert await ledger.balance_of(db, ALICE) == 50
    assert await ledger.balance_of(db, BOB) == 0


def test_balance_rows_are_locked_in_account_order():
    forward = balance_lock_statement(BOB, ALICE)
    backward = balance_lock_statement(ALICE, BOB, ALICE)
    compiled = str(forward.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))

    assert "FOR UPDATE" in compiled
    assert "ORDER BY token_balances.account" in compiled
    assert compiled.index(ALICE) < compiled.index(BOB)
    assert str(backward.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})) == compiled


async def test_opposite_transfers_between_two_accounts(db, ledger):
    await ledger.mint(db, ALICE, 100)
    await ledger.mint(db, TREASURY, 100)
    await ledger.approve(db, ALICE, TREASURY, 100)

    await ledger.transfer_from(db, ALICE, TREASURY, 30)
    await ledger.transfer(db, TREASURY, ALICE, 10)
    await db.commit()

    assert await ledger.balance_of(db, ALICE) == 80
    assert await ledger.balance_of(db, TREASURY) == 120
