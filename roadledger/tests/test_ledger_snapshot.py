"""
Ledger snapshot tests: the pure builder and the per-scope loaders.
"""

from datetime import date, datetime

import pytest

from roadledger.app.domain.ledger.snapshot import LedgerMovement, ScopeType, build_snapshot, sequence_key


def movement(day, credit=0.0, payment=0.0, advance=0.0, seq=(), reference=None):
    return LedgerMovement(
        date=day,
        reference=reference,
        description="movement",
        credit=credit,
        debit_payment=payment,
        debit_advance=advance,
        sequence=seq,
    )


def test_empty_snapshot_has_zero_totals():
    snapshot = build_snapshot(ScopeType.PARTY, "1", [])
    assert snapshot.is_empty
    assert snapshot.totals.current_balance == 0
    assert snapshot.title == "1"


def test_rows_are_sorted_and_accumulated():
    snapshot = build_snapshot(ScopeType.PARTY, "1", [
        movement(date(2024, 1, 20), payment=3000),
        movement(date(2024, 1, 10), credit=10000),
        movement(date(2024, 1, 12), advance=1000),
    ])
    assert [r.date.day for r in snapshot.rows] == [10, 12, 20]
    assert [r.running_balance for r in snapshot.rows] == [10000, 9000, 6000]
    totals = snapshot.totals
    assert totals.credit - totals.debit_payment - totals.debit_advance == totals.current_balance
    assert snapshot.rows[-1].running_balance == totals.current_balance


def test_date_range_is_inclusive():
    movements = [movement(date(2024, 1, d), credit=100) for d in (1, 5, 10, 15)]
    snapshot = build_snapshot(ScopeType.VEHICLE, "MH12AB1234", movements, date(2024, 1, 5), date(2024, 1, 10))
    assert [r.date.day for r in snapshot.rows] == [5, 10]
    assert snapshot.totals.credit == 200


def test_same_day_rows_follow_sequence():
    early = datetime(2024, 1, 10, 9, 0)
    late = datetime(2024, 1, 10, 17, 0)
    snapshot = build_snapshot(ScopeType.PARTY, "1", [
        movement(date(2024, 1, 10), payment=500, seq=sequence_key(late, 2, 7), reference="pay"),
        movement(date(2024, 1, 10), credit=800, seq=sequence_key(early, 0, 9), reference="bill"),
        movement(date(2024, 1, 10), advance=100, seq=sequence_key(early, 1, 3), reference="adv"),
    ])
    assert [r.reference for r in snapshot.rows] == ["bill", "adv", "pay"]
    assert [r.running_balance for r in snapshot.rows] == [800, 700, 200]


async def _party_with_bill(client):
    party = (await client.post("/v1/parties", json={"name": "Acme Traders"})).json()
    slip = (await client.post("/v1/loading-slips", json={
        "slip_number": "LS-001", "date": "2024-01-10", "party": "Acme Traders", "vehicle_no": "MH12AB1234",
        "from_location": "Pune", "to_location": "Chennai", "freight": 25000,
    })).json()
    bill = (await client.post("/v1/bills", json={
        "bill_number": "B-001", "loading_slip_id": slip["id"], "date": "2024-01-10", "party": "Acme Traders",
        "bill_amount": 10000, "detention": 500, "rto": 200, "mamool": 100, "penalties": 50,
        "advance_payments": [{"date": "2024-01-12", "amount": 1000, "mode": "cash"}],
    })).json()
    await client.post("/v1/banking", json={
        "type": "credit", "category": "bill_payment", "amount": 3000, "date": "2024-02-01",
        "reference_id": "B-001", "reference_name": "Acme Traders", "narration": "Part payment B-001",
    })
    return party, bill


async def test_party_snapshot(client):
    party, bill = await _party_with_bill(client)

    response = await client.get("/v1/ledgers/snapshot", params={"scope_type": "party", "scope_key": party["id"]})
    assert response.status_code == 200
    snapshot = response.json()
    assert snapshot["title"] == "Party Ledger - Acme Traders"
    assert [r["reference"] for r in snapshot["rows"]] == ["B-001", "B-001", "B-001"]
    assert snapshot["totals"] == {
        "credit": bill["net_amount"],
        "debit_payment": 3000,
        "debit_advance": 1000,
        "current_balance": 6550,
    }


async def test_party_snapshot_date_range(client):
    party, _ = await _party_with_bill(client)
    snapshot = (await client.get("/v1/ledgers/snapshot", params={
        "scope_type": "party", "scope_key": party["id"], "date_to": "2024-01-31",
    })).json()
    assert len(snapshot["rows"]) == 2
    assert snapshot["totals"]["current_balance"] == 9550


async def test_supplier_snapshot_counts_memo_and_payment(client):
    supplier = (await client.post("/v1/suppliers", json={"name": "Sharma Roadlines"})).json()
    slip = (await client.post("/v1/loading-slips", json={
        "slip_number": "LS-001", "date": "2024-01-10", "party": "Acme Traders", "vehicle_no": "GJ01XY9999",
        "from_location": "Pune", "to_location": "Chennai", "freight": 12000,
    })).json()
    await client.post("/v1/memos", json={
        "memo_number": "M-001", "loading_slip_id": slip["id"], "date": "2024-01-10",
        "supplier": "Sharma Roadlines", "supplier_id": supplier["id"], "freight": 10000, "commission": 500,
    })
    await client.post("/v1/banking", json={
        "type": "debit", "category": "memo_payment", "amount": 4000, "date": "2024-01-15",
        "reference_id": "M-001", "narration": "Memo payment",
    })

    snapshot = (await client.get(
        "/v1/ledgers/snapshot", params={"scope_type": "supplier", "scope_key": supplier["id"]}
    )).json()
    assert snapshot["totals"]["credit"] == 9500
    assert snapshot["totals"]["debit_payment"] == 4000
    assert snapshot["totals"]["current_balance"] == 5500


async def test_fuel_wallet_snapshot(client):
    await client.post("/v1/fuel/transactions", json={
        "type": "wallet_credit", "wallet_name": "IOCL Card", "amount": 5000, "date": "2024-03-01",
        "narration": "Top-up",
    })
    await client.post("/v1/fuel/allocate", json={
        "wallet_name": "IOCL Card", "vehicle_no": "MH12AB1234", "amount": 1200, "date": "2024-03-02",
    })
    snapshot = (await client.get(
        "/v1/ledgers/snapshot", params={"scope_type": "fuel_wallet", "scope_key": "IOCL Card"}
    )).json()
    assert [r["running_balance"] for r in snapshot["rows"]] == [5000, 3800]


async def test_unknown_party_snapshot(client):
    response = await client.get("/v1/ledgers/snapshot", params={"scope_type": "party", "scope_key": 404})
    assert response.status_code == 404


@pytest.mark.parametrize("params", [
    {"scope_type": "party", "scope_key": "abc"},
    {"scope_type": "vehicle"},
    {"scope_type": "general", "date_from": "2024-02-01", "date_to": "2024-01-01"},
])
async def test_bad_snapshot_requests(client, params):
    response = await client.get("/v1/ledgers/snapshot", params=params)
    assert response.status_code == 400
