"""
Derived-field calculators.

Pure functions that compute the dependent monetary fields of loading slips,
memos and bills from their base fields. Services call the apply_* helpers
explicitly before every write; stored values are never recomputed on read.
"""

from typing import Any, Optional

MONEY_PLACES = 2


class CalculationError(ValueError):
    """Raised when a base field is missing or negative."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


def _amount(field: str, value: Optional[float], required: bool = False) -> float:
    if value is None:
        if required:
            raise CalculationError(field, "is required")
        return 0.0
    if value < 0:
        raise CalculationError(field, "must not be negative")
    return float(value)


def _money(value: float) -> float:
    return round(value, MONEY_PLACES)


def loading_slip_balance(freight: float, advance: Optional[float] = 0) -> float:
    """balance = freight - advance."""
    return _money(_amount("freight", freight, required=True) - _amount("advance", advance))


def memo_net_amount(
    freight: float,
    commission: Optional[float] = 0,
    mamool: Optional[float] = 0,
    detention: Optional[float] = 0,
    extra: Optional[float] = 0,
) -> float:
    """
    Net amount payable on a memo.

    net_amount = freight - commission - mamool + detention + extra.
    rto is collected on the memo but not part of the net amount.
    """
    return _money(
        _amount("freight", freight, required=True)
        - _amount("commission", commission)
        - _amount("mamool", mamool)
        + _amount("detention", detention)
        + _amount("extra", extra)
    )


def memo_freight_after_deductions(freight: float, commission: Optional[float] = 0, mamool: Optional[float] = 0) -> float:
    """Freight income of an own vehicle, before detention and extra."""
    return _money(
        _amount("freight", freight, required=True)
        - _amount("commission", commission)
        - _amount("mamool", mamool)
    )


def bill_total_freight(
    bill_amount: float,
    detention: Optional[float] = 0,
    extra: Optional[float] = 0,
    rto: Optional[float] = 0,
) -> float:
    """Gross freight billed, before any deduction."""
    return _money(
        _amount("bill_amount", bill_amount, required=True)
        + _amount("detention", detention)
        + _amount("extra", extra)
        + _amount("rto", rto)
    )


def bill_party_receivable(
    bill_amount: float,
    detention: Optional[float] = 0,
    extra: Optional[float] = 0,
    rto: Optional[float] = 0,
    mamool: Optional[float] = 0,
    penalties: Optional[float] = 0,
    tds: Optional[float] = 0,
) -> float:
    """
    Amount the party owes on a bill, as shown in the party ledger.

    The party commission cut is tracked in the commission ledger instead.
    """
    return _money(
        bill_total_freight(bill_amount, detention, extra, rto)
        - _amount("mamool", mamool)
        - _amount("penalties", penalties)
        - _amount("tds", tds)
    )


def bill_net_amount(
    bill_amount: float,
    detention: Optional[float] = 0,
    extra: Optional[float] = 0,
    rto: Optional[float] = 0,
    mamool: Optional[float] = 0,
    penalties: Optional[float] = 0,
    tds: Optional[float] = 0,
    party_commission_cut: Optional[float] = 0,
) -> float:
    """
    net_amount = bill_amount + detention + extra + rto
                 - mamool - penalties - tds - party_commission_cut
    """
    return _money(
        bill_party_receivable(bill_amount, detention, extra, rto, mamool, penalties, tds)
        - _amount("party_commission_cut", party_commission_cut)
    )


def apply_loading_slip_fields(slip: Any) -> Any:
    """Set slip.balance from its freight and advance."""
    slip.balance = loading_slip_balance(slip.freight, slip.advance)
    return slip


def apply_memo_fields(memo: Any) -> Any:
    """Set memo.net_amount from its base fields."""
    memo.net_amount = memo_net_amount(
        memo.freight, memo.commission, memo.mamool, memo.detention, memo.extra
    )
    return memo


def apply_bill_fields(bill: Any) -> Any:
    """Set bill.net_amount and bill.total_freight from their base fields."""
    bill.total_freight = bill_total_freight(bill.bill_amount, bill.detention, bill.extra, bill.rto)
    bill.net_amount = bill_net_amount(
        bill.bill_amount,
        bill.detention,
        bill.extra,
        bill.rto,
        bill.mamool,
        bill.penalties,
        bill.tds,
        bill.party_commission_cut,
    )
    return bill
