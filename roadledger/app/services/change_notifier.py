"""
Change notification service.

After every successful mutation the affected collections are announced in
two ways:

1. An in-process broadcast to every open events stream subscriber.
2. A per-collection version counter in Redis (collection_version:<name>),
   which polling clients compare to decide whether to re-sync.

Neither step may fail the mutation that triggered it: Redis errors are
logged and swallowed, slow subscribers lose events rather than block.
"""

import asyncio
import enum
import logging
from typing import Dict, Iterable, List, Set

logger = logging.getLogger("roadledger.changes")

VERSION_KEY_PREFIX = "collection_version:"
SUBSCRIBER_QUEUE_SIZE = 100


class Collection(str, enum.Enum):
    """Synchronized collections, named as they appear in change events."""
    PARTIES = "parties"
    SUPPLIERS = "suppliers"
    VEHICLES = "vehicles"
    LOADING_SLIPS = "loading_slips"
    MEMOS = "memos"
    BILLS = "bills"
    BANKING_ENTRIES = "banking_entries"
    CASHBOOK_ENTRIES = "cashbook_entries"
    FUEL_WALLETS = "fuel_wallets"
    FUEL_TRANSACTIONS = "fuel_transactions"
    PARTY_COMMISSION_LEDGER = "party_commission_ledger"
    POD_FILES = "pod_files"
    LEDGER_ENTRIES = "ledger_entries"


def change_event(collection: Collection) -> Dict[str, str]:
    return {"type": "data_change", "collection": Collection(collection).value}


class ChangeBroadcaster:
    """Fan-out of change events to in-process subscriber queues."""

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE):
        self._queue_size = queue_size
        self._subscribers: Set[asyncio.Queue] = set()

    def subscribe(self) -> asyncio.Queue:
        queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(queue)
        logger.debug("Events subscriber added (%s open)", len(self._subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)
        logger.debug("Events subscriber removed (%s open)", len(self._subscribers))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: Dict[str, str]) -> int:
        """
        Queue an event for every subscriber.

        Returns:
            Number of subscribers the event was delivered to
        """
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Events subscriber queue full, dropping %s", event)
        return delivered


broadcaster = ChangeBroadcaster()


async def bump_collection_version(redis, collection: Collection) -> int | None:
    """
    Increment a collection's version counter.

    Returns:
        New counter value, or None when Redis is unavailable
    """
    key = f"{VERSION_KEY_PREFIX}{Collection(collection).value}"
    try:
        return int(await redis.incr(key))
    except Exception as e:
        logger.warning("Could not bump %s: %s", key, e)
        return None


async def get_collection_versions(redis, collections: Iterable[Collection] = Collection) -> Dict[str, int]:
    """Current counter of every collection; missing counters read as 0."""
    names: List[str] = [Collection(c).value for c in collections]
    keys = [f"{VERSION_KEY_PREFIX}{name}" for name in names]
    try:
        values = await redis.mget(keys)
    except Exception as e:
        logger.warning("Could not read collection versions: %s", e)
        values = [None] * len(names)
    return {name: int(value) if value is not None else 0 for name, value in zip(names, values)}


async def notify_change(redis, *collections: Collection) -> None:
    """Announce that the given collections changed."""
    for collection in dict.fromkeys(collections):
        await bump_collection_version(redis, collection)
        broadcaster.publish(change_event(collection))
