"""
Document generation endpoints.

Ledgers download as PDF or XLSX; bills, memos and loading slips as PDF.
"""

import enum
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.db.session import get_db
from roadledger.app.domain.ledger.snapshot import ScopeType
from roadledger.app.models.bill import Bill
from roadledger.app.models.loading_slip import LoadingSlip
from roadledger.app.models.memo import Memo
from roadledger.app.services import documents
from roadledger.app.services.ledger_snapshot_service import build_ledger_snapshot
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/documents", tags=["Documents"])

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class DocumentFormat(str, enum.Enum):
    PDF = "pdf"
    XLSX = "xlsx"


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/ledger")
async def ledger_document(
    scope_type: ScopeType = Query(...),
    scope_key: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    document_format: DocumentFormat = Query(DocumentFormat.PDF, alias="format"),
    db: AsyncSession = Depends(get_db)
):
    """Render a scope's ledger snapshot for download."""
    snapshot = await build_ledger_snapshot(db, scope_type, scope_key, date_from, date_to)
    stem = f"{snapshot.scope_type.value}_ledger_{snapshot.scope_key or 'all'}"
    if document_format == DocumentFormat.XLSX:
        return _attachment(
            documents.render_ledger_xlsx(snapshot), XLSX_MEDIA_TYPE, documents.generated_filename(stem, "xlsx")
        )
    return _attachment(
        documents.render_ledger_pdf(snapshot), PDF_MEDIA_TYPE, documents.generated_filename(stem, "pdf")
    )


@router.get("/bills/{bill_id}")
async def bill_document(bill_id: int, db: AsyncSession = Depends(get_db)):
    bill = await get_or_404(db, Bill, bill_id, "Bill")
    slip = await db.get(LoadingSlip, bill.loading_slip_id)
    return _attachment(
        documents.render_bill_pdf(bill, slip),
        PDF_MEDIA_TYPE,
        documents.generated_filename(f"bill_{bill.bill_number}", "pdf"),
    )


@router.get("/memos/{memo_id}")
async def memo_document(memo_id: int, db: AsyncSession = Depends(get_db)):
    memo = await get_or_404(db, Memo, memo_id, "Memo")
    slip = await db.get(LoadingSlip, memo.loading_slip_id)
    return _attachment(
        documents.render_memo_pdf(memo, slip),
        PDF_MEDIA_TYPE,
        documents.generated_filename(f"memo_{memo.memo_number}", "pdf"),
    )


@router.get("/loading-slips/{slip_id}")
async def loading_slip_document(slip_id: int, db: AsyncSession = Depends(get_db)):
    slip = await get_or_404(db, LoadingSlip, slip_id, "Loading slip")
    return _attachment(
        documents.render_loading_slip_pdf(slip),
        PDF_MEDIA_TYPE,
        documents.generated_filename(f"loading_slip_{slip.slip_number}", "pdf"),
    )
