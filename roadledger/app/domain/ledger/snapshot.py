"""
Ledger snapshot builder.

Turns the movements of one ledger scope into report-ready rows with a
running balance and totals. Pure: loading the movements is the caller's job.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

from roadledger.app.domain.ledger.running_balance import next_balance, BALANCE_PLACES


class ScopeType(str, enum.Enum):
    PARTY = "party"
    SUPPLIER = "supplier"
    VEHICLE = "vehicle"
    GENERAL = "general"
    FUEL_WALLET = "fuel_wallet"
    COMMISSION = "commission"


def sequence_key(created_at: Optional[datetime], rank: int = 0, row_id: Optional[int] = None) -> Tuple:
    """
    Tie-break key for movements sharing a date: creation time, then source
    rank, then row id. Rows without a timestamp sort first.
    """
    stamp = created_at.timestamp() if created_at is not None else 0.0
    return (stamp, rank, row_id or 0)


@dataclass(frozen=True)
class LedgerMovement:
    """
    One credit or debit affecting a scope.

    sequence breaks ties between movements of the same date; it is normally
    (created_at, source rank, id) so the order is stable across runs.
    """
    date: date
    reference: Optional[str]
    description: str
    credit: float = 0.0
    debit_payment: float = 0.0
    debit_advance: float = 0.0
    sequence: Tuple = field(default=(), compare=False)
    remarks: Optional[str] = None

    @property
    def delta(self) -> float:
        return self.credit - self.debit_payment - self.debit_advance


@dataclass(frozen=True)
class LedgerRow:
    date: date
    reference: Optional[str]
    description: str
    credit: float
    debit_payment: float
    debit_advance: float
    running_balance: float
    remarks: Optional[str] = None


@dataclass(frozen=True)
class LedgerTotals:
    credit: float = 0.0
    debit_payment: float = 0.0
    debit_advance: float = 0.0
    current_balance: float = 0.0


@dataclass(frozen=True)
class LedgerSnapshot:
    scope_type: ScopeType
    scope_key: str
    title: str
    rows: Tuple[LedgerRow, ...]
    totals: LedgerTotals
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return not self.rows


def movement_sort_key(movement: LedgerMovement) -> Tuple:
    return (movement.date, movement.sequence)


def in_range(day: date, date_from: Optional[date], date_to: Optional[date]) -> bool:
    """Inclusive on both ends; a missing bound is open."""
    if date_from is not None and day < date_from:
        return False
    if date_to is not None and day > date_to:
        return False
    return True


def build_snapshot(
    scope_type: ScopeType,
    scope_key: str,
    movements: Iterable[LedgerMovement],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    title: Optional[str] = None,
) -> LedgerSnapshot:
    """
    Build the ledger snapshot of one scope.

    Movements outside [date_from, date_to] are dropped, the rest are sorted
    ascending by (date, sequence) with a stable sort and accumulated from a
    zero opening balance. The totals always satisfy
    credit - debit_payment - debit_advance == current_balance.

    Args:
        scope_type: Kind of scope (party, supplier, vehicle, ...)
        scope_key: Identifier inside the scope type (party id, vehicle no, ...)
        movements: Movements of the scope in any order
        date_from: Optional inclusive lower bound
        date_to: Optional inclusive upper bound
        title: Display title, defaults to the scope key

    Returns:
        LedgerSnapshot with rows in chronological order
    """
    selected = sorted(
        (m for m in movements if in_range(m.date, date_from, date_to)),
        key=movement_sort_key,
    )

    rows = []
    balance = 0.0
    credit = debit_payment = debit_advance = 0.0
    for movement in selected:
        balance = next_balance(balance, movement.delta)
        credit += movement.credit
        debit_payment += movement.debit_payment
        debit_advance += movement.debit_advance
        rows.append(LedgerRow(
            date=movement.date,
            reference=movement.reference,
            description=movement.description,
            credit=movement.credit,
            debit_payment=movement.debit_payment,
            debit_advance=movement.debit_advance,
            running_balance=balance,
            remarks=movement.remarks,
        ))

    credit = round(credit, BALANCE_PLACES)
    debit_payment = round(debit_payment, BALANCE_PLACES)
    debit_advance = round(debit_advance, BALANCE_PLACES)
    totals = LedgerTotals(
        credit=credit,
        debit_payment=debit_payment,
        debit_advance=debit_advance,
        current_balance=round(credit - debit_payment - debit_advance, BALANCE_PLACES),
    )

    return LedgerSnapshot(
        scope_type=scope_type,
        scope_key=scope_key,
        title=title or scope_key,
        rows=tuple(rows),
        totals=totals,
        date_from=date_from,
        date_to=date_to,
    )
