"""
Concurrency and atomicity of balance-affecting writes.

Two sessions on a file-backed SQLite database stand in for two requests
handled at the same time. The predecessor lookups are slowed down so that,
without the scope locks, both writers read the same predecessor.
"""

import asyncio
from datetime import date

import pytest
from sqlalchemy import event, select, func
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from roadledger.app.db.session import create_tables, enable_sqlite_foreign_keys
from roadledger.app.domain.ledger.running_balance import scope_locks
from roadledger.app.models.cashbook_entry import CashbookEntry
from roadledger.app.models.enums import CashbookCategory, EntryType
from roadledger.app.models.fuel_transaction import FuelTransaction
from roadledger.app.models.fuel_wallet import FuelWallet
from roadledger.app.models.ledger_entry import LedgerEntry
from roadledger.app.schemas.cashbook import CashbookEntryCreate
from roadledger.app.services import cashbook_service, fuel_service, ledger_service

VEHICLE = "MH12AB1234"


@pytest.fixture
async def shared_engine(tmp_path):
    """Real file so each session gets its own connection."""
    file_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'roadledger.db'}")
    event.listen(file_engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    await create_tables(file_engine)
    yield file_engine
    await file_engine.dispose()


@pytest.fixture
def sessions(shared_engine):
    return async_sessionmaker(shared_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def slow_predecessors(mocker):
    """Yield to the event loop right after every predecessor read."""
    latest_entry = cashbook_service.latest_cashbook_entry
    latest_balance = ledger_service.latest_scope_balance

    async def slow_latest_entry(db):
        entry = await latest_entry(db)
        await asyncio.sleep(0.05)
        return entry

    async def slow_latest_balance(db, scope_key):
        balance = await latest_balance(db, scope_key)
        await asyncio.sleep(0.05)
        return balance

    mocker.patch.object(cashbook_service, "latest_cashbook_entry", side_effect=slow_latest_entry)
    mocker.patch.object(ledger_service, "latest_scope_balance", side_effect=slow_latest_balance)


def cash(entry_type, amount, category=CashbookCategory.OFFICE_EXPENSE, **extra):
    return CashbookEntryCreate(
        type=entry_type,
        category=category,
        amount=amount,
        date="2024-01-10",
        narration=f"{entry_type.value} {amount}",
        **extra,
    )


async def _create(sessions, data):
    async with sessions() as db:
        return await cashbook_service.create_cashbook_entry(db, data)


async def _running_balances(sessions):
    async with sessions() as db:
        result = await db.execute(select(CashbookEntry).order_by(CashbookEntry.id))
        return [e.running_balance for e in result.scalars()]


async def test_concurrent_cashbook_inserts_are_serialized(sessions, slow_predecessors):
    first, second = await asyncio.gather(
        _create(sessions, cash(EntryType.CREDIT, 1000)),
        _create(sessions, cash(EntryType.DEBIT, 300)),
    )

    assert first.running_balance == 1000
    assert second.running_balance == 700
    assert await _running_balances(sessions) == [1000, 700]


async def test_unlocked_inserts_read_the_same_predecessor(sessions, slow_predecessors):
    async def insert_without_lock(data):
        async with sessions() as db:
            entry = await cashbook_service.insert_cashbook_entry(db, data)
            await db.commit()
            return entry

    first, second = await asyncio.gather(
        insert_without_lock(cash(EntryType.CREDIT, 1000)),
        insert_without_lock(cash(EntryType.DEBIT, 300)),
    )

    # Both started from an empty cashbook, so the second balance ignores the first
    assert first.running_balance == 1000
    assert second.running_balance == -300


async def test_concurrent_vehicle_expenses_keep_both_balances(sessions, slow_predecessors):
    await asyncio.gather(
        _create(sessions, cash(EntryType.DEBIT, 450, CashbookCategory.VEHICLE_EXPENSE, vehicle_no=VEHICLE)),
        _create(sessions, cash(EntryType.DEBIT, 300, CashbookCategory.VEHICLE_EXPENSE, vehicle_no=VEHICLE)),
    )

    assert await _running_balances(sessions) == [-450, -750]
    async with sessions() as db:
        result = await db.execute(
            select(LedgerEntry.balance).where(LedgerEntry.vehicle_no == VEHICLE).order_by(LedgerEntry.id)
        )
        assert list(result.scalars()) == [-450, -750]


async def test_cashbook_entry_not_kept_when_ledger_write_fails(db_session, session_factory, mocker):
    mocker.patch.object(ledger_service, "write_posting", side_effect=RuntimeError("ledger unavailable"))

    with pytest.raises(RuntimeError):
        await cashbook_service.create_cashbook_entry(
            db_session,
            cash(EntryType.DEBIT, 450, CashbookCategory.VEHICLE_EXPENSE, vehicle_no=VEHICLE),
        )
    await db_session.rollback()

    async with session_factory() as db:
        assert await db.scalar(select(func.count()).select_from(CashbookEntry)) == 0
        assert await db.scalar(select(func.count()).select_from(LedgerEntry)) == 0
    assert not scope_locks.is_locked("cashbook")


async def test_fuel_allocation_not_kept_when_ledger_write_fails(db_session, session_factory, mocker):
    db_session.add(FuelWallet(name="IOCL Card", balance=2000))
    await db_session.commit()
    mocker.patch.object(ledger_service, "write_posting", side_effect=RuntimeError("ledger unavailable"))

    with pytest.raises(RuntimeError):
        await fuel_service.allocate_fuel(db_session, FuelTransaction(
            wallet_name="IOCL Card",
            amount=200,
            date=date(2024, 1, 10),
            vehicle_no=VEHICLE,
            narration="Fuel allocated",
        ))
    await db_session.rollback()

    async with session_factory() as db:
        wallet = await fuel_service.get_wallet(db, "IOCL Card")
        assert wallet.balance == 2000
        assert await db.scalar(select(func.count()).select_from(FuelTransaction)) == 0


async def test_source_removal_commits_under_scope_lock(db_session, session_factory, mocker):
    entry = await cashbook_service.create_cashbook_entry(
        db_session,
        cash(EntryType.DEBIT, 450, CashbookCategory.VEHICLE_EXPENSE, vehicle_no=VEHICLE),
    )

    locked_at_commit = []
    commit = db_session.commit

    async def checking_commit():
        locked_at_commit.append(scope_locks.is_locked(f"vehicle:{VEHICLE}"))
        await commit()

    mocker.patch.object(db_session, "commit", side_effect=checking_commit)
    await cashbook_service.delete_cashbook_entry(db_session, entry)

    assert locked_at_commit == [True]
    async with session_factory() as db:
        assert await db.scalar(select(func.count()).select_from(CashbookEntry)) == 0
        assert await db.scalar(select(func.count()).select_from(LedgerEntry)) == 0
