"""
Client sync manager.

Keeps a DataStore in step with the back-office API:

- full_sync() fetches every collection concurrently and swaps the cache only
  when all fetches succeeded; a partial failure keeps the previous snapshot
  and is retried after the reconnect delay.
- create/update/delete call the API, apply the result locally and request a
  resync. Failures are reported to error listeners and re-raised.
- poll_loop() watches /sync/versions, listen_changes() consumes /events.
  Both keep running through network errors, retrying after a fixed delay.

Full syncs and local mutations share one lock, so the cache is never
patched while a fetch is in flight.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

import httpx

from roadledger.app.core.config import settings
from roadledger.app.core.observability import configure_logging
from roadledger.app.services.change_notifier import Collection
from roadledger.app.sync.api_client import ApiClient, ApiError, COLLECTION_PATHS
from roadledger.app.sync.events import ServerEvent
from roadledger.app.sync.store import DataStore, collection_key

logger = logging.getLogger("roadledger.sync")

SYNC_ERRORS = (ApiError, httpx.HTTPError)


@dataclass(frozen=True)
class SyncError:
    """Event handed to error listeners when a mutation fails."""
    operation: str
    collection: str
    error: str


ErrorListener = Callable[[SyncError], None]


class SyncManager:
    def __init__(
        self,
        api: ApiClient,
        store: Optional[DataStore] = None,
        collections: Iterable[Collection] = tuple(COLLECTION_PATHS),
        poll_interval: Optional[float] = None,
        reconnect_delay: Optional[float] = None,
    ):
        self.api = api
        self.store = store or DataStore()
        self.collections: List[Collection] = [Collection(c) for c in collections]
        self.poll_interval = poll_interval if poll_interval is not None else settings.sync_poll_interval_seconds
        self.reconnect_delay = reconnect_delay if reconnect_delay is not None else settings.sync_reconnect_delay_seconds

        self._lock = asyncio.Lock()
        self._listeners: List[ErrorListener] = []
        self._versions: Optional[Dict[str, int]] = None
        self._resync_requested = asyncio.Event()
        self._stopping = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    # Error listeners

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _dispatch_error(self, operation: str, collection, error: Exception) -> SyncError:
        event = SyncError(operation=operation, collection=collection_key(collection), error=str(error))
        logger.error("Failed to %s %s: %s", operation, event.collection, event.error)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Sync error listener failed")
        return event

    # Full sync

    async def full_sync(self) -> bool:
        """
        Fetch every collection and replace the cache.

        Returns:
            True when the cache was replaced, False when any fetch failed
        """
        async with self._lock:
            results = await asyncio.gather(
                *(self.api.list_all(collection) for collection in self.collections),
                return_exceptions=True,
            )
            failures = {
                collection.value: result
                for collection, result in zip(self.collections, results)
                if isinstance(result, BaseException)
            }
            if failures:
                for name, error in failures.items():
                    logger.warning("Sync of %s failed: %s", name, error)
                logger.warning(
                    "Full sync incomplete (%s of %s collections failed), keeping generation %s",
                    len(failures), len(self.collections), self.store.generation,
                )
                return False

            snapshot = self.store.replace(dict(zip(self.collections, results)))
            logger.info(
                "Full sync complete: generation %s, %s rows",
                snapshot.generation, sum(len(rows) for rows in snapshot.collections.values()),
            )
            return True

    @property
    def resync_pending(self) -> bool:
        return self._resync_requested.is_set()

    def request_sync(self) -> None:
        self._resync_requested.set()

    def retry_sync(self) -> None:
        """Ask for another full sync, e.g. after a failed one."""
        self.request_sync()

    # Mutations

    async def create(self, collection: Collection, data: dict) -> dict:
        try:
            async with self._lock:
                record = await self.api.create(collection, data)
                self.store.apply_created(collection, record)
        except SYNC_ERRORS as e:
            self._dispatch_error("create", collection, e)
            raise
        self.request_sync()
        return record

    async def update(self, collection: Collection, record_id: int, data: dict) -> dict:
        try:
            async with self._lock:
                record = await self.api.update(collection, record_id, data)
                self.store.apply_updated(collection, record)
        except SYNC_ERRORS as e:
            self._dispatch_error("update", collection, e)
            raise
        self.request_sync()
        return record

    async def delete(self, collection: Collection, record_id: int) -> None:
        try:
            async with self._lock:
                await self.api.delete(collection, record_id)
                self.store.apply_deleted(collection, record_id)
        except SYNC_ERRORS as e:
            self._dispatch_error("delete", collection, e)
            raise
        self.request_sync()

    # Change detection

    async def poll_once(self) -> bool:
        """
        Compare version counters with the last synced ones.

        The counters are only remembered once a full sync succeeded, so a
        failed sync is retried on the next poll.

        Returns:
            True when a full sync ran and replaced the cache
        """
        versions = await self.api.get_versions()
        if versions == self._versions:
            return False
        if self._versions is not None:
            logger.info("Collection versions moved, resyncing")
        synced = await self.full_sync()
        if synced:
            self._versions = versions
        return synced

    def handle_event(self, event: ServerEvent) -> bool:
        """Mark the named collection stale and ask for a resync. Returns True for data_change events."""
        try:
            payload = event.json()
        except ValueError:
            logger.warning("Ignoring malformed event: %r", event.data)
            return False
        if not isinstance(payload, dict) or payload.get("type") != "data_change":
            return False
        collection = payload.get("collection")
        if collection:
            self.store.mark_stale(collection)
        self.request_sync()
        return True

    async def _sleep(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def poll_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.poll_once()
            except SYNC_ERRORS as e:
                logger.warning("Version poll failed: %s", e)
            await self._sleep(self.poll_interval)

    async def listen_changes(self) -> None:
        """Consume the events stream, reconnecting after a fixed delay."""
        while not self._stopping.is_set():
            try:
                async for event in self.api.stream_events():
                    self.handle_event(event)
                logger.info("Events stream closed by server")
            except SYNC_ERRORS as e:
                logger.warning("Events stream failed: %s", e)
            if self._stopping.is_set():
                break
            logger.info("Reconnecting to events stream in %ss", self.reconnect_delay)
            await self._sleep(self.reconnect_delay)

    async def resync_worker(self) -> None:
        while not self._stopping.is_set():
            await self._resync_requested.wait()
            self._resync_requested.clear()
            if self._stopping.is_set():
                break
            if not await self.full_sync():
                logger.info("Retrying sync in %ss", self.reconnect_delay)
                await self._sleep(self.reconnect_delay)
                self.request_sync()

    # Lifecycle

    async def run(self) -> None:
        """Initial sync, then background polling, event listening and resyncs."""
        self._stopping.clear()
        try:
            versions = await self.api.get_versions()
        except SYNC_ERRORS as e:
            logger.warning("Version read failed: %s", e)
            versions = None
        if await self.full_sync():
            self._versions = versions
        self._tasks = [
            asyncio.create_task(self.poll_loop()),
            asyncio.create_task(self.listen_changes()),
            asyncio.create_task(self.resync_worker()),
        ]

    async def stop(self) -> None:
        self._stopping.set()
        self._resync_requested.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []


async def main() -> None:
    """Run a sync manager against the configured API until interrupted."""
    configure_logging(settings.log_level)
    async with ApiClient() as api:
        manager = SyncManager(api)
        await manager.run()
        try:
            await asyncio.Event().wait()
        finally:
            await manager.stop()


if __name__ == "__main__":
    asyncio.run(main())
