"""
Pre-Deploy and Smoke Test Script.

Runs the application in-process against the configured database and Redis
and walks one booking through the books:
1. Health Check
2. Loading Slip -> Memo -> Bill
3. Payment -> Party Ledger Snapshot -> PDF / XLSX export
"""

import sys
import uuid
from datetime import date

from fastapi.testclient import TestClient

from roadledger.app.main import app


def print_step(step, msg):
    print(f"[{step}] {msg}")


def fail(msg):
    print(f"❌ FAILURE: {msg}")
    sys.exit(1)


def success(msg):
    print(f"✅ {msg}")


def expect(response, status_code, what):
    if response.status_code != status_code:
        fail(f"{what}: {response.status_code} {response.text}")
    return response.json() if "json" in response.headers.get("content-type", "") else response


def main():
    print("🚀 Starting Deployment Validation...")
    run_id = uuid.uuid4().hex[:6].upper()
    today = date.today().isoformat()

    with TestClient(app) as client:
        # 1. Health Check
        print_step("PRE-DEPLOY", "Checking /health...")
        health = expect(client.get("/health"), 200, "Health check")
        success(f"Healthy (redis: {health['redis']})")

        # 2. Booking
        print_step("SMOKE", "Creating party, loading slip, memo and bill...")
        party = expect(client.post("/v1/parties", json={"name": f"Smoke Party {run_id}"}), 201, "Party")
        slip = expect(client.post("/v1/loading-slips", json={
            "slip_number": f"LS-{run_id}", "date": today, "party": party["name"],
            "vehicle_no": "MH12SMOKE", "from_location": "Pune", "to_location": "Chennai",
            "freight": 25000, "advance": 5000,
        }), 201, "Loading slip")
        if slip["balance"] != 20000:
            fail(f"Slip balance {slip['balance']} != 20000")
        expect(client.post("/v1/memos", json={
            "memo_number": f"M-{run_id}", "loading_slip_id": slip["id"], "date": today,
            "supplier": f"Smoke Supplier {run_id}", "freight": 20000, "commission": 500,
        }), 201, "Memo")
        bill = expect(client.post("/v1/bills", json={
            "bill_number": f"B-{run_id}", "loading_slip_id": slip["id"], "date": today,
            "party": party["name"], "bill_amount": 25000,
        }), 201, "Bill")
        success(f"Bill {bill['bill_number']} net {bill['net_amount']}")

        # 3. Payment and ledger
        print_step("SMOKE", "Recording payment and checking the party ledger...")
        expect(client.post("/v1/banking", json={
            "type": "credit", "category": "bill_payment", "amount": 10000, "date": today,
            "reference_id": bill["bill_number"], "reference_name": party["name"], "narration": "Smoke payment",
        }), 201, "Banking entry")
        snapshot = expect(client.get("/v1/ledgers/snapshot", params={
            "scope_type": "party", "scope_key": party["id"],
        }), 200, "Party snapshot")
        expected = round(bill["net_amount"] - 10000, 2)
        if snapshot["totals"]["current_balance"] != expected:
            fail(f"Party balance {snapshot['totals']['current_balance']} != {expected}")
        success(f"Party balance {expected}")

        for fmt in ("pdf", "xlsx"):
            expect(client.get("/v1/documents/ledger", params={
                "scope_type": "party", "scope_key": party["id"], "format": fmt,
            }), 200, f"Ledger {fmt}")
        success("Ledger exports generated")

        breaks = expect(client.get("/v1/ledgers/balance-check"), 200, "Balance check")
        if breaks:
            print(f"⚠️  {len(breaks)} ledger balance breaks found, run scripts/recompute_balances.py")

    print("\n🎉 Deployment validation passed")


if __name__ == "__main__":
    main()
