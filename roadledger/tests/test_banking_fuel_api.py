"""
Banking side effects, party commission ledger and fuel wallets.
"""


def bank(entry_type, category, amount, **extra):
    return {
        "type": entry_type,
        "category": category,
        "amount": amount,
        "date": "2024-03-01",
        "narration": extra.pop("narration", f"{category} {amount}"),
        **extra,
    }


async def test_every_banking_entry_posts_one_ledger_entry(client):
    response = await client.post("/v1/banking", json=bank("debit", "expense", 750, narration="Office rent"))
    assert response.status_code == 201
    entry = response.json()

    entries = (await client.get("/v1/ledgers", params={"ledger_type": "general"})).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["debit"] == 750
    assert entries[0]["reference_id"] == f"BANK-{entry['id']}"
    assert entries[0]["transaction_kind"] == "expense"


async def test_on_account_payment_resolves_party_by_name(client):
    party = (await client.post("/v1/parties", json={"name": "Acme Traders"})).json()
    await client.post(
        "/v1/banking",
        json=bank("credit", "party_on_account", 5000, reference_name="acme traders"),
    )

    entries = (await client.get("/v1/ledgers", params={"party_id": party["id"]})).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["scope_key"] == f"party:{party['id']}"
    assert entries[0]["credit"] == 5000
    assert entries[0]["description"] == "On Account Payment – Bank Transfer"


async def test_banking_update_reposts_and_delete_withdraws(client):
    entry = (await client.post("/v1/banking", json=bank("debit", "expense", 750))).json()

    await client.put(f"/v1/banking/{entry['id']}", json={"amount": 900})
    entries = (await client.get("/v1/ledgers")).json()["entries"]
    assert [e["debit"] for e in entries] == [900]

    await client.delete(f"/v1/banking/{entry['id']}")
    assert (await client.get("/v1/ledgers")).json()["total"] == 0


async def test_commission_payment_debits_commission_ledger(client):
    party = (await client.post("/v1/parties", json={"name": "Acme Traders"})).json()
    await client.post("/v1/party-commission-ledger", json={
        "party_id": party["id"],
        "date": "2024-02-01",
        "entry_type": "credit",
        "amount": 1500,
        "narration": "Opening commission",
    })
    banking = (await client.post(
        "/v1/banking",
        json=bank("debit", "party_commission", 600, reference_name="Acme Traders", reference_id="B-9"),
    )).json()

    entries = (await client.get("/v1/party-commission-ledger", params={"party_id": party["id"]})).json()["entries"]
    debit = next(e for e in entries if e["entry_type"] == "debit")
    assert debit["amount"] == 600
    assert debit["narration"] == f"Commission Payment – Bank Ref #{banking['id']:06d}"

    summary = (await client.get("/v1/party-commission-ledger/summary", params={"party_id": party["id"]})).json()
    assert summary["total_credits"] == 1500
    assert summary["total_debits"] == 600
    assert summary["balance"] == 900
    assert summary["party_name"] == "Acme Traders"

    await client.delete(f"/v1/banking/{banking['id']}")
    summary = (await client.get("/v1/party-commission-ledger/summary", params={"party_id": party["id"]})).json()
    assert summary["total_debits"] == 0


async def test_commission_entry_for_unknown_party(client):
    response = await client.post("/v1/party-commission-ledger", json={
        "party_id": 42,
        "date": "2024-02-01",
        "entry_type": "credit",
        "amount": 100,
        "narration": "Manual entry",
    })
    assert response.status_code == 404


async def test_fuel_wallet_banking_debit_tops_up_wallet(client):
    banking = (await client.post(
        "/v1/banking",
        json=bank("debit", "fuel_wallet", 20000, reference_name="IOCL Card"),
    )).json()

    wallets = (await client.get("/v1/fuel/wallets")).json()["wallets"]
    assert [(w["name"], w["balance"]) for w in wallets] == [("IOCL Card", 20000)]

    transactions = (await client.get("/v1/fuel/transactions")).json()["transactions"]
    assert len(transactions) == 1
    assert transactions[0]["type"] == "wallet_credit"
    assert transactions[0]["banking_entry_id"] == banking["id"]


async def test_allocation_from_missing_wallet(client):
    response = await client.post("/v1/fuel/allocate", json={
        "wallet_name": "Nowhere", "vehicle_no": "MH12AB1234", "amount": 100, "date": "2024-03-02",
    })
    assert response.status_code == 404


async def test_allocation_exceeding_balance(client):
    await client.post("/v1/fuel/transactions", json={
        "type": "wallet_credit", "wallet_name": "IOCL Card", "amount": 1000, "date": "2024-03-01",
        "narration": "Top-up",
    })
    response = await client.post("/v1/fuel/allocate", json={
        "wallet_name": "IOCL Card", "vehicle_no": "MH12AB1234", "amount": 1500, "date": "2024-03-02",
    })
    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_RULE_002"
    assert body["details"]["balance"] == 1000

    wallets = (await client.get("/v1/fuel/wallets")).json()["wallets"]
    assert wallets[0]["balance"] == 1000


async def test_allocation_debits_wallet_and_posts_vehicle_expense(client):
    await client.post("/v1/fuel/transactions", json={
        "type": "wallet_credit", "wallet_name": "IOCL Card", "amount": 5000, "date": "2024-03-01",
        "narration": "Top-up",
    })
    response = await client.post("/v1/fuel/allocate", json={
        "wallet_name": "IOCL Card", "vehicle_no": "mh12ab1234", "amount": 3200, "date": "2024-03-02",
        "fuel_quantity": 35,
    })
    assert response.status_code == 201
    body = response.json()
    assert body["wallet"]["balance"] == 1800
    assert body["transaction"]["type"] == "fuel_allocation"
    assert body["transaction"]["narration"] == "Fuel allocated to MH12AB1234"

    entries = (await client.get("/v1/ledgers", params={"vehicle_no": "MH12AB1234"})).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["debit"] == 3200
    assert entries[0]["ledger_type"] == "vehicle_expense"
    assert entries[0]["description"] == "Fuel - IOCL Card: Fuel allocated to MH12AB1234"

    await client.delete(f"/v1/fuel/transactions/{body['transaction']['id']}")
    wallets = (await client.get("/v1/fuel/wallets")).json()["wallets"]
    assert wallets[0]["balance"] == 5000
    assert (await client.get("/v1/ledgers")).json()["total"] == 0


async def test_allocation_transaction_requires_vehicle(client):
    await client.post("/v1/fuel/wallets", json={"name": "IOCL Card", "balance": 500})
    response = await client.post("/v1/fuel/transactions", json={
        "type": "fuel_allocation", "wallet_name": "IOCL Card", "amount": 100, "date": "2024-03-01",
        "narration": "Loose fuel",
    })
    assert response.status_code == 400
