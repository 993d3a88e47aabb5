"""Unit tests for down-payment reconciliation and document totals"""

from decimal import Decimal

from rjr_ledger.domain.models import BalanceState
from rjr_ledger.domain.reconciliation import (
    balance_state,
    compute_net_total,
    reconcile_installments_number,
)


def test_paid_in_full_forces_zero_installments():
    """Test down payment equal to the total clears the installment count"""
    assert reconcile_installments_number(Decimal("100.00"), Decimal("100.00"), 3) == 0


def test_sub_cent_difference_counts_as_paid_in_full():
    """Test values that round to the same cent are settled"""
    assert reconcile_installments_number(Decimal("100.00"), Decimal("99.996"), 2) == 0


def test_balance_with_no_installments_suggests_one():
    """Test a balance appearing with count 0 suggests a single installment"""
    assert reconcile_installments_number(Decimal("100.00"), Decimal("50.00"), 0) == 1
    assert reconcile_installments_number(Decimal("100.00"), Decimal("50.00"), -2) == 1


def test_balance_keeps_user_count():
    """Test an existing count is left alone while a balance remains"""
    assert reconcile_installments_number(Decimal("100.00"), Decimal("50.00"), 4) == 4


def test_one_cent_balance_keeps_count():
    """Test a balance of exactly R$ 0,01 neither clears nor suggests installments"""
    assert reconcile_installments_number(Decimal("100.00"), Decimal("99.99"), 0) == 0
    assert reconcile_installments_number(Decimal("100.00"), Decimal("99.99"), 2) == 2


def test_previous_count_is_not_restored():
    """Test paying in full then lowering the down payment suggests 1, not the old count"""
    count = 5
    count = reconcile_installments_number(Decimal("300.00"), Decimal("300.00"), count)
    assert count == 0

    count = reconcile_installments_number(Decimal("300.00"), Decimal("100.00"), count)
    assert count == 1


def test_balance_state():
    """Test NO_BALANCE only when the down payment settles the document"""
    assert balance_state(Decimal("10.00"), Decimal("10.00")) == BalanceState.NO_BALANCE
    assert balance_state(Decimal("10.00"), Decimal("9.00")) == BalanceState.HAS_BALANCE


def test_net_total():
    """Test total = document value - discount + interest"""
    total, discount = compute_net_total(Decimal("1100.00"), Decimal("100.00"), Decimal("25.50"))

    assert total == Decimal("1025.50")
    assert discount == Decimal("100.00")


def test_net_total_clamps_discount():
    """Test a discount above the document value is clamped to it"""
    total, discount = compute_net_total(Decimal("150.00"), Decimal("200.00"), Decimal("0"))

    assert total == Decimal("0.00")
    assert discount == Decimal("150.00")


def test_net_total_clamped_discount_keeps_interest():
    """Test interest still applies after the discount is clamped"""
    total, _ = compute_net_total(Decimal("150.00"), Decimal("200.00"), Decimal("10.00"))

    assert total == Decimal("10.00")


def test_reconciliation_is_idempotent():
    """Test applying the rule to its own output changes nothing"""
    cases = [("100.00", "100.00", 3), ("100.00", "50.00", 0), ("100.00", "50.00", 6), ("100.00", "99.99", 0)]
    for total, down, current in cases:
        once = reconcile_installments_number(Decimal(total), Decimal(down), current)
        assert reconcile_installments_number(Decimal(total), Decimal(down), once) == once
