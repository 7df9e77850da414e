"""
Unit tests for the derived-field calculators.
"""

from types import SimpleNamespace

import pytest

from roadledger.app.domain.calculators import (
    CalculationError,
    apply_bill_fields,
    apply_loading_slip_fields,
    apply_memo_fields,
    bill_net_amount,
    bill_party_receivable,
    bill_total_freight,
    loading_slip_balance,
    memo_freight_after_deductions,
    memo_net_amount,
)


def test_loading_slip_balance():
    assert loading_slip_balance(25000, 5000) == 20000
    assert loading_slip_balance(25000, None) == 25000


def test_loading_slip_balance_can_go_negative_when_overpaid():
    assert loading_slip_balance(1000, 1500) == -500


def test_memo_net_amount_ignores_rto():
    memo = SimpleNamespace(freight=10000, commission=500, mamool=200, detention=300, extra=100, rto=999)
    apply_memo_fields(memo)
    assert memo.net_amount == 9700
    assert memo_freight_after_deductions(10000, 500, 200) == 9300


def test_bill_fields():
    bill = SimpleNamespace(
        bill_amount=10000, detention=500, extra=0, rto=200,
        mamool=100, tds=0, penalties=50, party_commission_cut=0,
    )
    apply_bill_fields(bill)
    assert bill.total_freight == 10700
    assert bill.net_amount == 10550


def test_bill_commission_cut_only_reduces_net_amount():
    args = dict(bill_amount=10000, detention=0, extra=0, rto=0, mamool=0, penalties=0, tds=0)
    assert bill_party_receivable(**args) == 10000
    assert bill_net_amount(**args, party_commission_cut=750) == 9250
    assert bill_total_freight(10000) == 10000


def test_missing_optional_fields_count_as_zero():
    assert memo_net_amount(5000, None, None, None, None) == 5000
    assert bill_net_amount(5000, None, None, None, None, None, None, None) == 5000


def test_amounts_are_rounded_to_paise():
    assert memo_net_amount(100.005, 0.001) == pytest.approx(100.0, abs=0.01)
    assert bill_total_freight(0.1, 0.2) == 0.3


@pytest.mark.parametrize("call, field", [
    (lambda: loading_slip_balance(None), "freight"),
    (lambda: loading_slip_balance(100, -1), "advance"),
    (lambda: memo_net_amount(100, commission=-5), "commission"),
    (lambda: bill_net_amount(100, tds=-1), "tds"),
])
def test_invalid_inputs_name_the_field(call, field):
    with pytest.raises(CalculationError) as exc:
        call()
    assert exc.value.field == field


def test_apply_slip_fields_sets_balance():
    slip = SimpleNamespace(freight=18000, advance=3000)
    assert apply_loading_slip_fields(slip).balance == 15000
