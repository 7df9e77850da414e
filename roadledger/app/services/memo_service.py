"""
Memo service.

Creating or updating a memo (re)posts its ledger entries: vehicle income for
own vehicles, an amount payable to the supplier for market vehicles.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import BusinessRuleError
from roadledger.app.domain.calculators import apply_memo_fields, CalculationError
from roadledger.app.domain.ledger.posting import LedgerPosting, memo_postings
from roadledger.app.models.advance_payment import AdvancePayment
from roadledger.app.models.enums import MemoStatus, OwnershipType, SourceType
from roadledger.app.models.loading_slip import LoadingSlip
from roadledger.app.models.memo import Memo
from roadledger.app.schemas.advance_payment import AdvancePaymentCreate
from roadledger.app.schemas.memo import MemoCreate
from roadledger.app.services import ledger_service
from roadledger.app.services.masters import ensure_unique, find_vehicle

logger = logging.getLogger("roadledger.memos")


def compute_memo_fields(memo: Memo) -> Memo:
    try:
        return apply_memo_fields(memo)
    except CalculationError as e:
        raise BusinessRuleError(str(e), {"field": e.field})


async def memo_ledger_postings(db: AsyncSession, memo: Memo) -> List[LedgerPosting]:
    slip = await db.get(LoadingSlip, memo.loading_slip_id)
    vehicle_no = slip.vehicle_no if slip else None
    vehicle = await find_vehicle(db, vehicle_no)
    own_vehicle = vehicle is not None and vehicle.ownership_type == OwnershipType.OWN
    logger.info(
        "Posting memo %s for vehicle %s (%s)",
        memo.memo_number, vehicle_no, "own" if own_vehicle else "market",
    )
    return memo_postings(memo, vehicle_no, own_vehicle)


async def create_memo(db: AsyncSession, data: MemoCreate) -> Memo:
    """
    Raises:
        BusinessRuleError: Unknown loading slip, or the slip already has a memo
        DuplicateResourceError: memo_number already used
    """
    slip = await db.get(LoadingSlip, data.loading_slip_id)
    if slip is None:
        raise BusinessRuleError("Loading slip not found", {"loading_slip_id": data.loading_slip_id})

    existing = await db.execute(select(Memo.memo_number).where(Memo.loading_slip_id == slip.id))
    existing_number = existing.scalar_one_or_none()
    if existing_number is not None:
        raise BusinessRuleError(
            "A memo already exists for this loading slip",
            {"loading_slip_id": slip.id, "memo_number": existing_number},
        )
    await ensure_unique(db, Memo.memo_number, data.memo_number, "Memo")

    fields = data.model_dump(exclude={"advance_payments"})
    memo = Memo(
        **fields,
        advance_payments=[AdvancePayment(**a.model_dump()) for a in data.advance_payments],
    )
    compute_memo_fields(memo)
    db.add(memo)
    await db.flush()

    await ledger_service.post_source_entries(
        db, SourceType.MEMO, memo.id, await memo_ledger_postings(db, memo), replace=False
    )
    await db.refresh(memo)
    return memo


async def update_memo(db: AsyncSession, memo: Memo, changes: dict) -> Memo:
    """Apply changes, recompute net_amount and re-post the memo's ledger entries."""
    if "memo_number" in changes:
        await ensure_unique(db, Memo.memo_number, changes["memo_number"], "Memo", exclude_id=memo.id)

    advances = changes.pop("advance_payments", None)
    for field, value in changes.items():
        setattr(memo, field, value)
    if advances is not None:
        memo.advance_payments = [AdvancePayment(**a) for a in advances]
    compute_memo_fields(memo)
    await db.flush()

    await ledger_service.post_source_entries(db, SourceType.MEMO, memo.id, await memo_ledger_postings(db, memo))
    await db.refresh(memo)
    return memo


async def delete_memo(db: AsyncSession, memo: Memo) -> None:
    await ledger_service.remove_source_entries(db, SourceType.MEMO, memo.id, source=memo)


async def mark_memo_paid(db: AsyncSession, memo: Memo, paid_date, paid_amount=None) -> Memo:
    memo.status = MemoStatus.PAID
    memo.paid_date = paid_date
    memo.paid_amount = paid_amount if paid_amount is not None else memo.net_amount
    await db.commit()
    await db.refresh(memo)
    return memo


async def add_memo_advance(db: AsyncSession, memo: Memo, advance: AdvancePaymentCreate) -> Memo:
    memo.advance_payments.append(AdvancePayment(**advance.model_dump()))
    await db.commit()
    await db.refresh(memo)
    return memo
