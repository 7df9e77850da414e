"""
Running balance accumulation and the per-scope write lock.
"""

import asyncio

import pytest

from roadledger.app.domain.ledger.running_balance import (
    ScopeLockRegistry,
    accumulate,
    find_balance_breaks,
    next_balance,
    signed_amount,
)
from roadledger.app.models.enums import EntryType


def test_signed_amount():
    assert signed_amount(EntryType.CREDIT, 100) == 100
    assert signed_amount(EntryType.DEBIT, 100) == -100


def test_accumulate_credit_then_debit():
    assert accumulate([1000, -300]) == [1000, 700]


def test_accumulate_from_opening_balance():
    assert accumulate([50, -20.5], opening=100) == [150, 129.5]


def test_next_balance_without_predecessor():
    assert next_balance(None, -42.1) == -42.1


def test_consistent_rows_have_no_breaks():
    deltas = [1000, -300, 250.25, -0.25]
    rows = list(zip(deltas, accumulate(deltas)))
    assert find_balance_breaks(rows) == []


def test_break_reported_at_the_inconsistent_row():
    rows = [(1000, 1000), (-300, 700), (200, 1000), (-100, 900)]
    assert find_balance_breaks(rows) == [2]


async def _append(rows, amount, locks=None):
    """Read the predecessor, yield to other writers, then append."""
    async def write():
        previous = rows[-1][1] if rows else 0.0
        await asyncio.sleep(0)
        rows.append((amount, next_balance(previous, amount)))

    if locks is None:
        await write()
    else:
        async with locks.hold("cashbook"):
            await write()


async def test_unguarded_writers_read_the_same_predecessor():
    rows = []
    await asyncio.gather(_append(rows, 1000), _append(rows, -300))
    assert [balance for _, balance in rows] == [1000, -300]
    assert find_balance_breaks(rows) == [1]


async def test_scope_lock_serializes_writers():
    rows = []
    locks = ScopeLockRegistry()
    await asyncio.gather(*(_append(rows, amount, locks) for amount in (1000, -300, 50, -25)))
    assert find_balance_breaks(rows) == []
    assert rows[-1][1] == 725


async def test_hold_acquires_each_key_once_and_releases():
    locks = ScopeLockRegistry()
    async with locks.hold("party:1", "vehicle:MH12", "party:1"):
        assert locks.is_locked("party:1")
        assert locks.is_locked("vehicle:MH12")
    assert not locks.is_locked("party:1")
    assert not locks.is_locked("vehicle:MH12")


async def test_hold_releases_on_error():
    locks = ScopeLockRegistry()
    with pytest.raises(RuntimeError):
        async with locks.hold("general"):
            raise RuntimeError("boom")
    assert not locks.is_locked("general")


async def test_different_scopes_do_not_block_each_other():
    locks = ScopeLockRegistry()
    async with locks.hold("vehicle:A"):
        await asyncio.wait_for(_append([], 10, locks=None), timeout=1)
        async with locks.hold("vehicle:B"):
            assert locks.is_locked("vehicle:B")
