"""
Bill service.

Bills post no ledger entries of their own; their receivable is read by the
party ledger snapshot. A positive party_commission_cut is mirrored as a
credit in the party commission ledger.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import BusinessRuleError
from roadledger.app.domain.calculators import apply_bill_fields, CalculationError
from roadledger.app.models.advance_payment import AdvancePayment
from roadledger.app.models.bill import Bill
from roadledger.app.models.enums import BillStatus
from roadledger.app.models.loading_slip import LoadingSlip
from roadledger.app.schemas.advance_payment import AdvancePaymentCreate
from roadledger.app.schemas.bill import BillCreate
from roadledger.app.services import commission_service
from roadledger.app.services.masters import ensure_unique, find_party_by_name


def compute_bill_fields(bill: Bill) -> Bill:
    try:
        return apply_bill_fields(bill)
    except CalculationError as e:
        raise BusinessRuleError(str(e), {"field": e.field})


async def _resolve_party(db: AsyncSession, bill: Bill) -> None:
    if bill.party_id is None:
        party = await find_party_by_name(db, bill.party)
        if party is not None:
            bill.party_id = party.id
            bill.party_name = bill.party_name or party.name


async def create_bill(db: AsyncSession, data: BillCreate) -> Bill:
    """
    Raises:
        BusinessRuleError: Unknown loading slip, or the slip already has a bill
        DuplicateResourceError: bill_number already used
    """
    slip = await db.get(LoadingSlip, data.loading_slip_id)
    if slip is None:
        raise BusinessRuleError("Loading slip not found", {"loading_slip_id": data.loading_slip_id})

    existing = await db.execute(select(Bill.bill_number).where(Bill.loading_slip_id == slip.id))
    existing_number = existing.scalar_one_or_none()
    if existing_number is not None:
        raise BusinessRuleError(
            "A bill already exists for this loading slip",
            {"loading_slip_id": slip.id, "bill_number": existing_number},
        )
    await ensure_unique(db, Bill.bill_number, data.bill_number, "Bill")

    bill = Bill(
        **data.model_dump(exclude={"advance_payments"}),
        advance_payments=[AdvancePayment(**a.model_dump()) for a in data.advance_payments],
    )
    await _resolve_party(db, bill)
    compute_bill_fields(bill)
    db.add(bill)
    await db.flush()

    await commission_service.sync_bill_commission_cut(db, bill)
    await db.commit()
    await db.refresh(bill)
    return bill


async def update_bill(db: AsyncSession, bill: Bill, changes: dict) -> Bill:
    if "bill_number" in changes:
        await ensure_unique(db, Bill.bill_number, changes["bill_number"], "Bill", exclude_id=bill.id)

    advances = changes.pop("advance_payments", None)
    for field, value in changes.items():
        setattr(bill, field, value)
    if advances is not None:
        bill.advance_payments = [AdvancePayment(**a) for a in advances]
    await _resolve_party(db, bill)
    compute_bill_fields(bill)
    await db.flush()

    await commission_service.sync_bill_commission_cut(db, bill)
    await db.commit()
    await db.refresh(bill)
    return bill


async def delete_bill(db: AsyncSession, bill: Bill) -> None:
    await commission_service.remove_bill_commission(db, bill.id)
    await db.delete(bill)
    await db.commit()


async def mark_bill_received(db: AsyncSession, bill: Bill, received_date, received_amount=None) -> Bill:
    bill.status = BillStatus.RECEIVED
    bill.received_date = received_date
    bill.received_amount = received_amount if received_amount is not None else bill.net_amount
    await db.commit()
    await db.refresh(bill)
    return bill


async def add_bill_advance(db: AsyncSession, bill: Bill, advance: AdvancePaymentCreate) -> Bill:
    bill.advance_payments.append(AdvancePayment(**advance.model_dump()))
    await db.commit()
    await db.refresh(bill)
    return bill
