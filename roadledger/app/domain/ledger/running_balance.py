"""
Running-balance accumulation.

A running balance is the cumulative signed total (credits minus debits) of a
scope in chronological order. New rows take the balance of the latest row in
their scope and add their own signed amount. That read-then-write must not
interleave with another writer of the same scope, so writers hold the
scope's lock from the read until their transaction commits.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional, Sequence, Tuple

from roadledger.app.models.enums import EntryType

BALANCE_PLACES = 2
BALANCE_TOLERANCE = 0.005


def signed_amount(entry_type: EntryType, amount: float) -> float:
    """+amount for credits, -amount for debits."""
    if entry_type == EntryType.CREDIT:
        return amount
    return -amount


def next_balance(previous: Optional[float], delta: float) -> float:
    """Balance after applying delta to the predecessor's balance (0 when there is none)."""
    return round((previous or 0.0) + delta, BALANCE_PLACES)


def accumulate(deltas: Iterable[float], opening: float = 0.0) -> List[float]:
    """Running balances for an ordered sequence of signed amounts."""
    balances = []
    balance = opening
    for delta in deltas:
        balance = next_balance(balance, delta)
        balances.append(balance)
    return balances


def find_balance_breaks(rows: Sequence[Tuple[float, float]], opening: float = 0.0) -> List[int]:
    """
    Positions where a stored running balance does not follow from its predecessor.

    Args:
        rows: (signed_amount, stored_balance) pairs in chronological order
        opening: balance before the first row

    Returns:
        Indexes i where stored_balance[i] != stored_balance[i-1] + signed_amount[i]
    """
    breaks = []
    previous = opening
    for index, (delta, stored) in enumerate(rows):
        if abs(next_balance(previous, delta) - stored) > BALANCE_TOLERANCE:
            breaks.append(index)
        previous = stored
    return breaks


class ScopeLockRegistry:
    """
    One asyncio.Lock per balance scope.

    Locks are created lazily and live for the life of the process. Several
    scopes are always acquired in sorted order so two writers touching the
    same pair of scopes cannot deadlock.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock_for(self, scope_key: str) -> asyncio.Lock:
        lock = self._locks.get(scope_key)
        if lock is None:
            lock = self._locks[scope_key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, *scope_keys: str) -> AsyncIterator[None]:
        acquired = []
        try:
            for key in sorted(set(scope_keys)):
                lock = self.lock_for(key)
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def is_locked(self, scope_key: str) -> bool:
        lock = self._locks.get(scope_key)
        return lock is not None and lock.locked()

    def reset(self) -> None:
        """Forget every lock. Only safe while no writer holds one."""
        self._locks.clear()


# Process-wide registry shared by every balance writer
scope_locks = ScopeLockRegistry()
