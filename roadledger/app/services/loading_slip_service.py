"""
Loading slip service.

A slip becomes immutable in its money fields once a memo or bill refers to it,
and cannot be deleted while referenced.
"""

from typing import Dict, Iterable, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import BusinessRuleError
from roadledger.app.domain.calculators import apply_loading_slip_fields, CalculationError
from roadledger.app.models.bill import Bill
from roadledger.app.models.loading_slip import LoadingSlip
from roadledger.app.models.memo import Memo
from roadledger.app.schemas.loading_slip import LoadingSlipCreate
from roadledger.app.services.masters import ensure_unique

MONEY_FIELDS = ("freight", "advance", "rto", "total_freight")


def compute_slip_fields(slip: LoadingSlip) -> LoadingSlip:
    try:
        return apply_loading_slip_fields(slip)
    except CalculationError as e:
        raise BusinessRuleError(str(e), {"field": e.field})


async def slip_references(db: AsyncSession, slip_ids: Iterable[int]) -> Dict[int, Tuple[str, str]]:
    """(memo_number, bill_number) attached to each slip id."""
    slip_ids = list(slip_ids)
    refs = {slip_id: (None, None) for slip_id in slip_ids}
    if not slip_ids:
        return refs
    memos = await db.execute(select(Memo.loading_slip_id, Memo.memo_number).where(Memo.loading_slip_id.in_(slip_ids)))
    for slip_id, memo_number in memos.all():
        refs[slip_id] = (memo_number, refs[slip_id][1])
    bills = await db.execute(select(Bill.loading_slip_id, Bill.bill_number).where(Bill.loading_slip_id.in_(slip_ids)))
    for slip_id, bill_number in bills.all():
        refs[slip_id] = (refs[slip_id][0], bill_number)
    return refs


async def create_loading_slip(db: AsyncSession, data: LoadingSlipCreate) -> LoadingSlip:
    await ensure_unique(db, LoadingSlip.slip_number, data.slip_number, "Loading slip")
    slip = compute_slip_fields(LoadingSlip(**data.model_dump()))
    db.add(slip)
    await db.commit()
    await db.refresh(slip)
    return slip


async def update_loading_slip(db: AsyncSession, slip: LoadingSlip, changes: dict) -> LoadingSlip:
    if "slip_number" in changes:
        await ensure_unique(db, LoadingSlip.slip_number, changes["slip_number"], "Loading slip", exclude_id=slip.id)

    touched = [f for f in MONEY_FIELDS if f in changes and changes[f] != getattr(slip, f)]
    if touched:
        memo_number, bill_number = (await slip_references(db, [slip.id]))[slip.id]
        if memo_number or bill_number:
            raise BusinessRuleError(
                "Loading slip amounts cannot change once a memo or bill refers to it",
                {"fields": touched, "memo_number": memo_number, "bill_number": bill_number},
            )

    for field, value in changes.items():
        setattr(slip, field, value)
    compute_slip_fields(slip)
    await db.commit()
    await db.refresh(slip)
    return slip


async def delete_loading_slip(db: AsyncSession, slip: LoadingSlip) -> None:
    memo_number, bill_number = (await slip_references(db, [slip.id]))[slip.id]
    if memo_number or bill_number:
        raise BusinessRuleError(
            "Loading slip is referenced and cannot be deleted",
            {"memo_number": memo_number, "bill_number": bill_number},
        )
    await db.delete(slip)
    await db.commit()
