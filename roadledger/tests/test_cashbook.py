"""
Cashbook running balance tests.
"""

from sqlalchemy import select

from roadledger.app.models.cashbook_entry import CashbookEntry
from roadledger.app.models.enums import CashbookCategory, EntryType
from roadledger.app.schemas.cashbook import CashbookEntryCreate
from roadledger.app.services import cashbook_service


def cash(entry_type, amount, day="2024-01-10", category="office_expense", **extra):
    return {
        "type": entry_type,
        "category": category,
        "amount": amount,
        "date": day,
        "narration": f"{entry_type} {amount}",
        **extra,
    }


async def test_balance_accumulates_in_insert_order(client):
    first = (await client.post("/v1/cashbook", json=cash("credit", 1000))).json()
    second = (await client.post("/v1/cashbook", json=cash("debit", 300))).json()

    assert first["running_balance"] == 1000
    assert second["running_balance"] == 700


async def test_payment_mode_is_always_cash(client):
    response = await client.post("/v1/cashbook", json=cash("credit", 100, payment_mode="upi"))
    assert response.status_code == 201
    assert response.json()["payment_mode"] == "cash"


async def test_back_dated_entry_needs_explicit_recompute(client):
    await client.post("/v1/cashbook", json=cash("credit", 1000))
    await client.post("/v1/cashbook", json=cash("debit", 300))
    backdated = (await client.post("/v1/cashbook", json=cash("credit", 500, day="2024-01-05"))).json()

    # Takes the balance of the latest-dated entry, not its chronological predecessor
    assert backdated["running_balance"] == 1200

    response = await client.post("/v1/cashbook/recompute-balances")
    assert response.status_code == 200
    assert response.json() == {"scanned": 3, "updated": 3, "final_balance": 1200}

    listing = (await client.get("/v1/cashbook")).json()["entries"]
    assert [e["running_balance"] for e in listing] == [1200, 1500, 500]

    again = (await client.post("/v1/cashbook/recompute-balances")).json()
    assert again["updated"] == 0


async def test_delete_leaves_later_balances(client):
    first = (await client.post("/v1/cashbook", json=cash("credit", 1000))).json()
    second = (await client.post("/v1/cashbook", json=cash("debit", 300))).json()

    assert (await client.delete(f"/v1/cashbook/{first['id']}")).status_code == 200
    assert (await client.get(f"/v1/cashbook/{second['id']}")).json()["running_balance"] == 700


async def test_vehicle_expense_posts_to_vehicle_ledger(client):
    await client.post(
        "/v1/cashbook",
        json=cash("debit", 450, category="vehicle_expense", vehicle_no="mh12ab1234", narration="Tyre puncture"),
    )
    await client.post("/v1/cashbook", json=cash("debit", 200, narration="Stationery"))

    entries = (await client.get("/v1/ledgers", params={"vehicle_no": "MH12AB1234"})).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["ledger_type"] == "vehicle_expense"
    assert entries[0]["debit"] == 450
    assert entries[0]["balance"] == -450
    assert entries[0]["description"] == "Tyre puncture"
    assert (await client.get("/v1/ledgers")).json()["total"] == 1


async def test_service_balances_sequential_inserts(db_session):
    for entry_type, amount in [(EntryType.CREDIT, 5000), (EntryType.DEBIT, 1200), (EntryType.DEBIT, 800)]:
        await cashbook_service.create_cashbook_entry(db_session, CashbookEntryCreate(
            type=entry_type,
            category=CashbookCategory.SALARY,
            amount=amount,
            date="2024-02-01",
            narration="Payroll",
        ))

    result = await db_session.execute(select(CashbookEntry).order_by(CashbookEntry.id))
    assert [e.running_balance for e in result.scalars()] == [5000, 3800, 3000]
