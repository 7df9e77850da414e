"""
Client sync layer tests: SSE parsing, the cache, the API client and the manager.
"""

import asyncio
import json

import httpx
import pytest

from roadledger.app.services.change_notifier import Collection
from roadledger.app.sync.api_client import ApiClient, ApiError
from roadledger.app.sync.events import ServerEvent, parse_events
from roadledger.app.sync.manager import SyncManager
from roadledger.app.sync.store import DataStore


def test_parse_events():
    events = parse_events([
        ": connected",
        "",
        'data: {"type": "data_change", "collection": "bills"}',
        "",
        "event: notice",
        "id: 7",
        "data: line one",
        "data: line two",
        "",
        "data: unterminated",
    ])
    assert events == [
        ServerEvent(data='{"type": "data_change", "collection": "bills"}'),
        ServerEvent(data="line one\nline two", event="notice", id="7"),
    ]
    assert events[0].json()["collection"] == "bills"


def test_store_replace_and_local_changes():
    store = DataStore()
    store.mark_stale(Collection.PARTIES)
    snapshot = store.replace({Collection.PARTIES: [{"id": 1, "name": "Acme"}]})
    assert snapshot.generation == 1
    assert store.stale == set()
    assert snapshot.synced_at is not None

    store.apply_created("parties", {"id": 2, "name": "Bharat"})
    store.apply_updated(Collection.PARTIES, {"id": 1, "name": "Acme Traders"})
    assert store.generation == 3
    assert store.snapshot.find("parties", 1)["name"] == "Acme Traders"

    store.apply_deleted(Collection.PARTIES, 2)
    assert [r["id"] for r in store.snapshot.get(Collection.PARTIES)] == [1]
    # Earlier snapshots are untouched
    assert snapshot.find(Collection.PARTIES, 1)["name"] == "Acme"
    with pytest.raises(TypeError):
        store.snapshot.collections["parties"] = ()


def paging_handler(total):
    rows = [{"id": i} for i in range(1, total + 1)]
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        page = int(request.url.params["page"])
        size = int(request.url.params["page_size"])
        batch = rows[(page - 1) * size: page * size]
        return httpx.Response(200, json={"parties": batch, "total": total, "page": page, "page_size": size})

    return handler, calls


async def test_list_all_follows_pages():
    handler, calls = paging_handler(5)
    async with ApiClient(base_url="http://test/v1", page_size=2, transport=httpx.MockTransport(handler)) as api:
        rows = await api.list_all(Collection.PARTIES)
    assert [r["id"] for r in rows] == [1, 2, 3, 4, 5]
    assert len(calls) == 3
    assert calls[0].path == "/v1/parties"


async def test_error_response_becomes_api_error():
    def handler(request):
        return httpx.Response(400, json={
            "error_code": "ERR_DUPLICATE_001", "message": "Party already exists", "details": {"name": "Acme"},
        })

    async with ApiClient(base_url="http://test/v1", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.create(Collection.PARTIES, {"name": "Acme"})
    assert exc_info.value.status_code == 400
    assert exc_info.value.error_code == "ERR_DUPLICATE_001"
    assert exc_info.value.details == {"name": "Acme"}


async def test_stream_events_over_http():
    body = b': connected\n\ndata: {"type": "data_change", "collection": "memos"}\n\n'

    def handler(request):
        assert request.url.path == "/v1/events"
        return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

    async with ApiClient(base_url="http://test/v1", transport=httpx.MockTransport(handler)) as api:
        events = [event async for event in api.stream_events()]
    assert [e.json()["collection"] for e in events] == ["memos"]


class FakeApi:
    """In-memory stand-in for ApiClient."""

    def __init__(self, data=None, failing=()):
        self.data = data or {}
        self.failing = set(failing)
        self.versions = {}
        self.stream_calls = 0

    async def list_all(self, collection):
        if collection in self.failing:
            raise httpx.ConnectError("connection refused")
        return list(self.data.get(collection, []))

    async def create(self, collection, data):
        if collection in self.failing:
            raise ApiError(400, "Party already exists", "ERR_DUPLICATE_001")
        return {"id": 99, **data}

    async def update(self, collection, record_id, data):
        return {"id": record_id, **data}

    async def delete(self, collection, record_id):
        return {"id": record_id}

    async def get_versions(self):
        return dict(self.versions)

    async def stream_events(self):
        self.stream_calls += 1
        if self.stream_calls == 1:
            raise httpx.ConnectError("connection refused")
        yield ServerEvent(data=json.dumps({"type": "data_change", "collection": "bills"}))


COLLECTIONS = [Collection.PARTIES, Collection.BILLS]


async def test_full_sync_replaces_cache():
    api = FakeApi({Collection.PARTIES: [{"id": 1}], Collection.BILLS: [{"id": 5}, {"id": 6}]})
    manager = SyncManager(api, collections=COLLECTIONS)
    assert await manager.full_sync() is True
    assert manager.store.generation == 1
    assert len(manager.store.snapshot.get(Collection.BILLS)) == 2


async def test_partial_failure_keeps_previous_snapshot():
    api = FakeApi({Collection.PARTIES: [{"id": 1}]})
    manager = SyncManager(api, collections=COLLECTIONS)
    await manager.full_sync()

    api.data[Collection.PARTIES] = [{"id": 1}, {"id": 2}]
    api.failing.add(Collection.BILLS)
    assert await manager.full_sync() is False
    assert manager.store.generation == 1
    assert len(manager.store.snapshot.get(Collection.PARTIES)) == 1


async def test_mutation_applies_locally_and_requests_sync():
    manager = SyncManager(FakeApi(), collections=COLLECTIONS)
    record = await manager.create(Collection.PARTIES, {"name": "Acme"})
    assert manager.store.snapshot.find(Collection.PARTIES, record["id"])["name"] == "Acme"
    assert manager.resync_pending

    await manager.update(Collection.PARTIES, 99, {"name": "Acme Traders"})
    await manager.delete(Collection.PARTIES, 99)
    assert manager.store.snapshot.get(Collection.PARTIES) == ()


async def test_mutation_failure_reaches_listeners():
    manager = SyncManager(FakeApi(failing=[Collection.PARTIES]), collections=COLLECTIONS)
    errors = []
    manager.add_error_listener(errors.append)

    with pytest.raises(ApiError):
        await manager.create(Collection.PARTIES, {"name": "Acme"})

    assert len(errors) == 1
    assert errors[0].operation == "create"
    assert errors[0].collection == "parties"
    assert "ERR_DUPLICATE_001" in errors[0].error
    assert manager.store.generation == 0
    assert not manager.resync_pending


async def test_poll_once_syncs_when_versions_move():
    api = FakeApi()
    api.versions = {"parties": 1}
    manager = SyncManager(api, collections=COLLECTIONS)

    assert await manager.poll_once() is True
    assert await manager.poll_once() is False
    api.versions = {"parties": 2}
    assert await manager.poll_once() is True
    assert manager.store.generation == 2


def test_handle_event_marks_collection_stale():
    manager = SyncManager(FakeApi(), collections=COLLECTIONS)
    assert manager.handle_event(ServerEvent(data='{"type": "data_change", "collection": "bills"}')) is True
    assert manager.store.stale == {"bills"}
    assert manager.resync_pending

    assert manager.handle_event(ServerEvent(data="not json")) is False
    assert manager.handle_event(ServerEvent(data='{"type": "hello"}')) is False


async def test_listener_reconnects_after_failure():
    api = FakeApi()
    manager = SyncManager(api, collections=COLLECTIONS, reconnect_delay=0.01)
    task = asyncio.create_task(manager.listen_changes())

    for _ in range(100):
        if api.stream_calls >= 2:
            break
        await asyncio.sleep(0.01)

    await manager.stop()
    await asyncio.wait_for(task, timeout=1)
    assert api.stream_calls >= 2
    assert "bills" in manager.store.stale


async def test_run_and_stop():
    api = FakeApi({Collection.PARTIES: [{"id": 1}]})
    manager = SyncManager(api, collections=COLLECTIONS, poll_interval=0.01, reconnect_delay=0.01)
    await manager.run()
    assert manager.store.generation >= 1
    await asyncio.sleep(0.05)
    await manager.stop()
    assert manager.store.snapshot.find(Collection.PARTIES, 1) == {"id": 1}


async def test_poll_retries_failed_sync_until_cache_catches_up():
    api = FakeApi({Collection.PARTIES: [{"id": 1}]})
    api.versions = {"parties": 1}
    manager = SyncManager(api, collections=COLLECTIONS)
    assert await manager.poll_once() is True

    api.data[Collection.PARTIES] = [{"id": 1}, {"id": 2}]
    api.versions = {"parties": 2}
    api.failing.add(Collection.BILLS)
    assert await manager.poll_once() is False
    assert manager.store.generation == 1

    api.failing.clear()
    assert await manager.poll_once() is True
    assert manager.store.generation == 2
    assert len(manager.store.snapshot.get(Collection.PARTIES)) == 2
    assert await manager.poll_once() is False


async def test_resync_worker_retries_failed_sync():
    api = FakeApi({Collection.PARTIES: [{"id": 1}]}, failing=[Collection.BILLS])
    manager = SyncManager(api, collections=COLLECTIONS, reconnect_delay=0.01)
    task = asyncio.create_task(manager.resync_worker())
    manager.request_sync()

    await asyncio.sleep(0.03)
    assert manager.store.generation == 0
    api.failing.clear()

    for _ in range(100):
        if manager.store.generation:
            break
        await asyncio.sleep(0.01)

    await manager.stop()
    await asyncio.wait_for(task, timeout=1)
    assert manager.store.generation == 1
    assert manager.store.snapshot.find(Collection.PARTIES, 1) == {"id": 1}


async def test_first_poll_after_run_does_not_resync():
    api = FakeApi({Collection.PARTIES: [{"id": 1}]})
    api.versions = {"parties": 3}
    manager = SyncManager(api, collections=COLLECTIONS)
    await manager.run()
    await manager.stop()

    assert manager.store.generation == 1
    assert await manager.poll_once() is False
    assert manager.store.generation == 1
