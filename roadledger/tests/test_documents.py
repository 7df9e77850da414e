"""
PDF and XLSX rendering tests.
"""

import io
from datetime import date, timedelta

from openpyxl import load_workbook

from roadledger.app.domain.ledger.snapshot import LedgerMovement, ScopeType, build_snapshot
from roadledger.app.services.documents import (
    PdfPage,
    format_amount,
    generated_filename,
    render_ledger_pdf,
    render_ledger_xlsx,
)


def _snapshot(rows=3):
    start = date(2024, 1, 1)
    movements = [
        LedgerMovement(date=start + timedelta(days=i), reference=f"R-{i}", description="Freight", credit=1000)
        for i in range(rows)
    ]
    return build_snapshot(ScopeType.VEHICLE, "MH12AB1234", movements, title="Vehicle Ledger - MH12AB1234")


def test_format_amount():
    assert format_amount(1234567.5) == "1,234,567.50"
    assert format_amount(None) == ""


def test_ledger_pdf():
    content = render_ledger_pdf(_snapshot())
    assert content.startswith(b"%PDF")


def test_empty_ledger_pdf():
    content = render_ledger_pdf(build_snapshot(ScopeType.GENERAL, "general", []))
    assert content.startswith(b"%PDF")


def test_pdf_page_breaks():
    page = PdfPage("Long ledger")
    for _ in range(200):
        page.ensure_space(20)
        page.text(20, "row")
        page.y -= 20
    page.finish()
    assert page.page_count > 1


def test_ledger_xlsx_layout():
    workbook = load_workbook(io.BytesIO(render_ledger_xlsx(_snapshot())))
    sheet = workbook["Ledger"]
    assert sheet["A2"].value == "Vehicle Ledger - MH12AB1234"
    assert sheet["A6"].value == "Date"
    assert sheet["C10"].value == "TOTAL"
    assert sheet["D10"].value == 3000
    assert sheet["G9"].value == 3000


def test_generated_filename():
    name = generated_filename("party_ledger_Acme Traders/2024", "pdf")
    assert name.startswith("party_ledger_Acme_Traders_2024_")
    assert name.endswith(".pdf")


async def test_ledger_download_formats(client):
    await client.post("/v1/ledgers", json={
        "reference_id": "R-1", "description": "Opening", "credit": 500, "date": "2024-01-01",
    })

    pdf = await client.get("/v1/documents/ledger", params={"scope_type": "general"})
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.headers["content-disposition"].startswith('attachment; filename="general_ledger_general_')
    assert pdf.content.startswith(b"%PDF")

    xlsx = await client.get("/v1/documents/ledger", params={"scope_type": "general", "format": "xlsx"})
    assert xlsx.status_code == 200
    assert xlsx.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert load_workbook(io.BytesIO(xlsx.content))["Ledger"]["D7"].value == 500


async def test_bill_memo_and_slip_pdfs(client):
    slip = (await client.post("/v1/loading-slips", json={
        "slip_number": "LS-001", "date": "2024-01-10", "party": "Acme Traders", "vehicle_no": "MH12AB1234",
        "from_location": "Pune", "to_location": "Chennai", "freight": 25000,
    })).json()
    bill = (await client.post("/v1/bills", json={
        "bill_number": "B-001", "loading_slip_id": slip["id"], "date": "2024-01-10",
        "party": "Acme Traders", "bill_amount": 10000,
    })).json()
    memo = (await client.post("/v1/memos", json={
        "memo_number": "M-001", "loading_slip_id": slip["id"], "date": "2024-01-10",
        "supplier": "Sharma Roadlines", "freight": 9000,
    })).json()

    for path in (f"/v1/documents/bills/{bill['id']}", f"/v1/documents/memos/{memo['id']}",
                 f"/v1/documents/loading-slips/{slip['id']}"):
        response = await client.get(path)
        assert response.status_code == 200, path
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    assert (await client.get("/v1/documents/bills/999")).status_code == 404
