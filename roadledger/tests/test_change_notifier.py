"""
Change notification tests: version counters, broadcast and the events stream.
"""

import asyncio

import pytest

from roadledger.app.api.v1.endpoints.events import KEEPALIVE, event_stream, format_sse
from roadledger.app.services.change_notifier import (
    ChangeBroadcaster,
    Collection,
    broadcaster,
    change_event,
    get_collection_versions,
    notify_change,
)


async def test_mutation_bumps_version(client, mock_redis):
    await client.post("/v1/parties", json={"name": "Acme Traders"})
    await client.post("/v1/parties", json={"name": "Bharat Cement"})

    versions = (await client.get("/v1/sync/versions")).json()["versions"]
    assert versions["parties"] == 2
    assert versions["bills"] == 0
    assert set(versions) == {c.value for c in Collection}


async def test_memo_bumps_memos_and_ledger(client, mock_redis):
    slip = (await client.post("/v1/loading-slips", json={
        "slip_number": "LS-001", "date": "2024-01-10", "party": "Acme Traders", "vehicle_no": "MH12AB1234",
        "from_location": "Pune", "to_location": "Chennai", "freight": 12000,
    })).json()
    await client.post("/v1/memos", json={
        "memo_number": "M-001", "loading_slip_id": slip["id"], "date": "2024-01-10",
        "supplier": "Sharma Roadlines", "freight": 10000,
    })
    assert mock_redis.store["collection_version:memos"] == 1
    assert mock_redis.store["collection_version:ledger_entries"] == 1


async def test_redis_failure_does_not_fail_mutation(client, mock_redis, mocker):
    mocker.patch.object(mock_redis, "incr", side_effect=ConnectionError("redis down"))
    response = await client.post("/v1/parties", json={"name": "Acme Traders"})
    assert response.status_code == 201


async def test_versions_read_as_zero_without_redis(mock_redis, mocker):
    mocker.patch.object(mock_redis, "mget", side_effect=ConnectionError("redis down"))
    versions = await get_collection_versions(mock_redis, [Collection.BILLS, Collection.MEMOS])
    assert versions == {"bills": 0, "memos": 0}


async def test_notify_publishes_each_collection_once(mock_redis):
    queue = broadcaster.subscribe()
    try:
        await notify_change(mock_redis, Collection.MEMOS, Collection.LEDGER_ENTRIES, Collection.MEMOS)
        events = [queue.get_nowait() for _ in range(queue.qsize())]
    finally:
        broadcaster.unsubscribe(queue)
    assert events == [change_event(Collection.MEMOS), change_event(Collection.LEDGER_ENTRIES)]


async def test_full_subscriber_drops_events():
    fanout = ChangeBroadcaster(queue_size=1)
    slow = fanout.subscribe()
    assert fanout.publish(change_event(Collection.BILLS)) == 1
    assert fanout.publish(change_event(Collection.MEMOS)) == 0
    assert slow.get_nowait()["collection"] == "bills"


def test_format_sse():
    assert format_sse({"type": "data_change", "collection": "bills"}) == (
        'data: {"type": "data_change", "collection": "bills"}\n\n'
    )


class StubRequest:
    def __init__(self):
        self.disconnected = False

    async def is_disconnected(self):
        return self.disconnected


async def test_event_stream_frames():
    request = StubRequest()
    queue = broadcaster.subscribe()
    subscribers = broadcaster.subscriber_count
    stream = event_stream(request, queue, keepalive_seconds=0.01)

    assert await stream.__anext__() == ": connected\n\n"
    queue.put_nowait(change_event(Collection.PARTIES))
    assert await stream.__anext__() == format_sse(change_event(Collection.PARTIES))
    assert await stream.__anext__() == KEEPALIVE

    request.disconnected = True
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert broadcaster.subscriber_count == subscribers - 1


async def test_health_reports_redis(client, mocker):
    mocker.patch("roadledger.app.main.ping_redis", return_value=False)
    body = (await client.get("/health")).json()
    assert body["status"] == "healthy"
    assert body["redis"] == "unavailable"
