import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"
PARTY_NAME = "Persistence Check Traders"


def start_server(env=None):
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "roadledger.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.TransportError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server({**os.environ, "DB_ECHO": "True"})  # Enable echo to see SQL

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise RuntimeError("Server start failed")

        # 2. Create a party and a cashbook entry
        print("\n--- [Step 2] Writing Records (Persistence Test) ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/parties", json={"name": PARTY_NAME})
        if resp.status_code == 400 and resp.json().get("error_code") == "ERR_DUPLICATE_001":
            print("⚠️ Party already exists (persistence working from previous run?)")
        elif resp.status_code == 201:
            print("✅ Party Created Successfully")
            print(resp.json())
        else:
            print(f"❌ Party Creation Failed: {resp.status_code} {resp.text}")
            raise RuntimeError("Party creation failed")

        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/cashbook", json={
            "type": "credit",
            "category": "other",
            "amount": 100,
            "date": time.strftime("%Y-%m-%d"),
            "narration": "Persistence check",
        })
        if resp.status_code != 201:
            raise RuntimeError(f"Cashbook entry failed: {resp.status_code} {resp.text}")
        balance_before = resp.json()["running_balance"]
        print(f"✅ Cashbook entry saved, running balance {balance_before}")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise RuntimeError("Server restart failed")

        # 4. Read back
        print("\n--- [Step 5] Reading Records (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/parties", params={"search": PARTY_NAME})
        parties = resp.json().get("parties", [])
        if any(p["name"] == PARTY_NAME for p in parties):
            print("✅ Party Persisted!")
        else:
            raise RuntimeError("Party missing after restart")

        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/cashbook", params={"page_size": 1})
        latest = resp.json()["entries"][0]
        if latest["running_balance"] == balance_before:
            print(f"✅ Cashbook balance persisted ({balance_before})")
        else:
            print(f"❌ Cashbook balance changed: {latest['running_balance']} != {balance_before}")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
