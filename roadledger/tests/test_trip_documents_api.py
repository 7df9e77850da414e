"""
Integration tests for loading slips, memos and bills.
"""

SLIP = {
    "slip_number": "LS-001",
    "date": "2024-01-10",
    "party": "Acme Traders",
    "vehicle_no": "mh12ab1234",
    "from_location": "Pune",
    "to_location": "Chennai",
    "material": "Steel coils",
    "freight": 25000,
    "advance": 5000,
}

MEMO = {
    "memo_number": "M-001",
    "date": "2024-01-10",
    "supplier": "Sharma Roadlines",
    "freight": 10000,
    "commission": 500,
    "mamool": 200,
    "detention": 300,
    "extra": 100,
    "rto": 150,
}

BILL = {
    "bill_number": "B-001",
    "date": "2024-01-10",
    "party": "Acme Traders",
    "bill_amount": 10000,
    "detention": 500,
    "extra": 0,
    "rto": 200,
    "mamool": 100,
    "tds": 0,
    "penalties": 50,
    "party_commission_cut": 0,
}


async def create_slip(client, **overrides):
    response = await client.post("/v1/loading-slips", json={**SLIP, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


async def test_slip_balance_is_derived(client):
    slip = await create_slip(client)
    assert slip["vehicle_no"] == "MH12AB1234"
    assert slip["balance"] == 20000


async def test_duplicate_slip_number(client):
    await create_slip(client)
    response = await client.post("/v1/loading-slips", json=SLIP)
    assert response.status_code == 400


async def test_memo_net_amount_and_one_memo_per_slip(client):
    slip = await create_slip(client)
    response = await client.post("/v1/memos", json={**MEMO, "loading_slip_id": slip["id"]})
    assert response.status_code == 201
    assert response.json()["net_amount"] == 9700

    response = await client.post("/v1/memos", json={**MEMO, "memo_number": "M-002", "loading_slip_id": slip["id"]})
    assert response.status_code == 400
    assert response.json()["details"]["memo_number"] == "M-001"


async def test_memo_requires_existing_slip(client):
    response = await client.post("/v1/memos", json={**MEMO, "loading_slip_id": 404})
    assert response.status_code == 400


async def test_own_vehicle_memo_posts_vehicle_income(client):
    await client.post("/v1/vehicles", json={"vehicle_no": "MH12AB1234", "ownership_type": "own"})
    slip = await create_slip(client)
    await client.post("/v1/memos", json={**MEMO, "loading_slip_id": slip["id"]})

    entries = (await client.get("/v1/ledgers", params={"vehicle_no": "MH12AB1234"})).json()["entries"]
    assert [e["description"] for e in entries] == ["Freight after deductions", "Detention charges", "Extra charges"]
    assert [e["credit"] for e in entries] == [9300, 300, 100]
    assert [e["balance"] for e in entries] == [9300, 9600, 9700]
    assert {e["ledger_type"] for e in entries} == {"vehicle_income"}
    assert {e["memo_number"] for e in entries} == {"M-001"}


async def test_market_vehicle_memo_posts_supplier_payable(client):
    supplier = (await client.post("/v1/suppliers", json={"name": "Sharma Roadlines"})).json()
    slip = await create_slip(client)
    memo = (await client.post(
        "/v1/memos", json={**MEMO, "loading_slip_id": slip["id"], "supplier_id": supplier["id"]}
    )).json()

    entries = (await client.get("/v1/ledgers", params={"supplier_id": supplier["id"]})).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["ledger_type"] == "supplier"
    assert entries[0]["credit"] == memo["net_amount"]
    assert entries[0]["description"] == "Market vehicle memo M-001 - Amount payable"


async def test_memo_update_reposts_and_delete_withdraws(client):
    await client.post("/v1/vehicles", json={"vehicle_no": "MH12AB1234", "ownership_type": "own"})
    slip = await create_slip(client)
    memo = (await client.post("/v1/memos", json={**MEMO, "loading_slip_id": slip["id"]})).json()

    response = await client.put(f"/v1/memos/{memo['id']}", json={"detention": 0, "extra": 0})
    assert response.status_code == 200
    assert response.json()["net_amount"] == 9300

    entries = (await client.get("/v1/ledgers", params={"vehicle_no": "MH12AB1234"})).json()["entries"]
    assert [e["credit"] for e in entries] == [9300]

    assert (await client.delete(f"/v1/memos/{memo['id']}")).status_code == 200
    entries = (await client.get("/v1/ledgers", params={"vehicle_no": "MH12AB1234"})).json()["entries"]
    assert entries == []


async def test_memo_paid_and_advance(client):
    slip = await create_slip(client)
    memo = (await client.post("/v1/memos", json={**MEMO, "loading_slip_id": slip["id"]})).json()

    response = await client.post(
        f"/v1/memos/{memo['id']}/advance", json={"date": "2024-01-11", "amount": 2000, "mode": "bank"}
    )
    assert response.status_code == 200
    assert [a["amount"] for a in response.json()["advance_payments"]] == [2000]

    response = await client.patch(f"/v1/memos/{memo['id']}/paid", json={"paid_date": "2024-01-20"})
    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert response.json()["paid_amount"] == memo["net_amount"]


async def test_bill_derived_fields(client):
    slip = await create_slip(client)
    response = await client.post("/v1/bills", json={**BILL, "loading_slip_id": slip["id"]})
    assert response.status_code == 201
    bill = response.json()
    assert bill["total_freight"] == 10700
    assert bill["net_amount"] == 10550

    response = await client.put(f"/v1/bills/{bill['id']}", json={"tds": 100})
    assert response.json()["net_amount"] == 10450


async def test_bill_resolves_party_and_records_commission_cut(client):
    party = (await client.post("/v1/parties", json={"name": "Acme Traders"})).json()
    slip = await create_slip(client)
    bill = (await client.post(
        "/v1/bills", json={**BILL, "loading_slip_id": slip["id"], "party_commission_cut": 250}
    )).json()
    assert bill["party_id"] == party["id"]

    entries = (await client.get("/v1/party-commission-ledger", params={"party_id": party["id"]})).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["entry_type"] == "credit"
    assert entries[0]["amount"] == 250
    assert entries[0]["narration"] == "Commission Cut – Bill No. B-001"

    await client.put(f"/v1/bills/{bill['id']}", json={"party_commission_cut": 400})
    entries = (await client.get("/v1/party-commission-ledger", params={"party_id": party["id"]})).json()["entries"]
    assert [e["amount"] for e in entries] == [400]

    await client.delete(f"/v1/bills/{bill['id']}")
    summary = (await client.get("/v1/party-commission-ledger/summary", params={"party_id": party["id"]})).json()
    assert summary["total_entries"] == 0


async def test_referenced_slip_is_locked(client):
    slip = await create_slip(client)
    await client.post("/v1/bills", json={**BILL, "loading_slip_id": slip["id"]})

    response = await client.put(f"/v1/loading-slips/{slip['id']}", json={"freight": 30000})
    assert response.status_code == 400
    assert response.json()["details"]["bill_number"] == "B-001"

    response = await client.put(f"/v1/loading-slips/{slip['id']}", json={"material": "Pipes"})
    assert response.status_code == 200
    assert response.json()["material"] == "Pipes"

    response = await client.delete(f"/v1/loading-slips/{slip['id']}")
    assert response.status_code == 400


async def test_slip_listing_carries_document_numbers(client):
    slip = await create_slip(client)
    await create_slip(client, slip_number="LS-002")
    await client.post("/v1/memos", json={**MEMO, "loading_slip_id": slip["id"]})
    await client.post("/v1/bills", json={**BILL, "loading_slip_id": slip["id"]})

    listing = (await client.get("/v1/loading-slips")).json()
    numbers = {s["slip_number"]: (s["memo_number"], s["bill_number"]) for s in listing["loading_slips"]}
    assert numbers == {"LS-001": ("M-001", "B-001"), "LS-002": (None, None)}


async def test_unreferenced_slip_can_change_and_be_deleted(client):
    slip = await create_slip(client)
    response = await client.put(f"/v1/loading-slips/{slip['id']}", json={"advance": 10000})
    assert response.json()["balance"] == 15000
    assert (await client.delete(f"/v1/loading-slips/{slip['id']}")).status_code == 200
