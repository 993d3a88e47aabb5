"""Unit tests for installment schedule generation and manual edits"""

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal

from rjr_ledger.domain.installments import (
    check_balance,
    edit_installment_amount,
    edit_installment_due_date,
    rebalance_following,
    split_installments,
)
from rjr_ledger.domain.models import AmortizationInput, EntryStatus, Installment, InstallmentOrigin


def make_input(total, down="0.00", count=3, issue=date(2024, 1, 15)) -> AmortizationInput:
    return AmortizationInput(
        total_value=Decimal(total),
        down_payment=Decimal(down),
        installments_number=count,
        issue_date=issue,
    )


def test_split_exact_division(three_way_split):
    """Test R$ 300,00 in 3 installments -> 100,00 each, monthly from the issue date"""
    result = split_installments(three_way_split)

    assert result.ok
    assert [inst.amount for inst in result.installments] == [Decimal("100.00")] * 3
    assert [inst.due_date for inst in result.installments] == [
        date(2024, 2, 15),
        date(2024, 3, 15),
        date(2024, 4, 15),
    ]
    assert [inst.sequence_number for inst in result.installments] == [1, 2, 3]
    assert result.discrepancy is None


def test_split_rounding_remainder():
    """Test last installment absorbs the rounding remainder"""
    result = split_installments(make_input("100.00"))

    amounts = [inst.amount for inst in result.installments]
    assert amounts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(amounts) == Decimal("100.00")


def test_split_logs_rounding_drift(caplog):
    """Test uneven split is logged at debug level and not reported to the caller"""
    with caplog.at_level(logging.DEBUG, logger="rjr_ledger.domain.installments"):
        result = split_installments(make_input("100.00"))

    assert "Rounding drift absorbed by last installment" in caplog.text
    assert result.warnings == []
    assert result.discrepancy is None


def test_split_month_end_clamping():
    """Test Jan 31 + 1 month -> Feb 29 (leap year), + 2 months -> Mar 31"""
    result = split_installments(make_input("200.00", count=2, issue=date(2024, 1, 31)))

    assert [inst.due_date for inst in result.installments] == [date(2024, 2, 29), date(2024, 3, 31)]


def test_split_due_dates_strictly_increasing():
    """Test due dates never repeat across a year of month-end dates"""
    result = split_installments(make_input("1200.00", count=12, issue=date(2023, 8, 31)))

    dates = [inst.due_date for inst in result.installments]
    assert all(a < b for a, b in zip(dates, dates[1:]))
    assert dates[0] == date(2023, 9, 30)
    assert dates[5] == date(2024, 2, 29)


def test_split_amounts_add_up_to_total():
    """Test down payment + installments always equals the total"""
    cases = [
        ("0.01", "0.00", 1),
        ("0.10", "0.00", 15),
        ("99.99", "10.00", 7),
        ("1234.57", "234.56", 11),
        ("1000000.00", "0.03", 12),
    ]
    for total, down, count in cases:
        result = split_installments(make_input(total, down, count))

        assert result.ok
        assert len(result.installments) == count
        assert all(inst.amount >= 0 for inst in result.installments)
        assert Decimal(down) + sum(inst.amount for inst in result.installments) == Decimal(total)


def test_split_with_down_payment():
    """Test only the balance after the down payment is split"""
    result = split_installments(make_input("1000.00", down="400.00", count=4))

    assert [inst.amount for inst in result.installments] == [Decimal("150.00")] * 4


def test_split_down_payment_above_total():
    """Test down payment larger than total returns a validation error and no installments"""
    result = split_installments(make_input("100.00", down="150.00"))

    assert not result.ok
    assert result.installments == []
    assert [e.field for e in result.errors] == ["down_payment"]


def test_split_negative_inputs():
    """Test every negative field is reported"""
    result = split_installments(
        AmortizationInput(
            total_value=Decimal("-1.00"),
            down_payment=Decimal("-1.00"),
            installments_number=-1,
            issue_date=date(2024, 1, 15),
        )
    )

    assert result.installments == []
    assert {e.field for e in result.errors} == {"total_value", "down_payment", "installments_number"}


def test_split_zero_installments_paid_in_full():
    """Test paid-in-full document has an empty schedule"""
    result = split_installments(make_input("100.00", down="100.00", count=0))

    assert result.ok
    assert result.installments == []
    assert result.discrepancy is None


def test_split_zero_installments_with_balance():
    """Test zero installments while a balance remains is a caller error"""
    result = split_installments(make_input("100.00", down="40.00", count=0))

    assert not result.ok
    assert result.errors[0].field == "installments_number"


def test_split_preserves_user_edits_when_count_grows(three_way_split):
    """Test a user-edited installment survives regeneration; new slots share the rest"""
    schedule = split_installments(three_way_split).installments
    edited = edit_installment_amount(schedule, 1, Decimal("150.00"), three_way_split).installments
    edited = edit_installment_due_date(edited, 1, date(2024, 2, 20), three_way_split.issue_date).installments

    result = split_installments(replace(three_way_split, installments_number=4), existing=edited)

    first = result.installments[0]
    assert first.amount == Decimal("150.00")
    assert first.due_date == date(2024, 2, 20)
    assert first.origin == InstallmentOrigin.USER_EDITED
    assert [inst.amount for inst in result.installments[1:]] == [Decimal("50.00")] * 3
    assert result.installments[3].due_date == date(2024, 5, 15)
    assert result.discrepancy is None


def test_split_keeps_bookkeeping_of_regenerated_slots():
    """Test regenerated installments keep id, paid amount and status of the persisted ones"""
    data = make_input("300.00", count=4)
    persisted = split_installments(data).installments
    entry_id = uuid.uuid4()
    persisted[0] = replace(persisted[0], id=entry_id, paid_amount=Decimal("75.00"), status=EntryStatus.PAID)

    result = split_installments(replace(data, installments_number=2), existing=persisted)

    assert len(result.installments) == 2
    assert [inst.amount for inst in result.installments] == [Decimal("150.00"), Decimal("150.00")]
    assert result.installments[0].id == entry_id
    assert result.installments[0].paid_amount == Decimal("75.00")
    assert result.installments[0].status == EntryStatus.PAID


def test_split_drops_user_edits_out_of_range(three_way_split):
    """Test edits beyond the new count are discarded"""
    schedule = split_installments(three_way_split).installments
    edited = edit_installment_amount(schedule, 3, Decimal("10.00"), three_way_split).installments

    result = split_installments(replace(three_way_split, installments_number=2), existing=edited)

    assert [inst.amount for inst in result.installments] == [Decimal("150.00"), Decimal("150.00")]
    assert all(not inst.user_edited for inst in result.installments)


def test_split_preserved_edits_exceeding_balance():
    """Test preserved edits above the balance are kept and reported, not corrected"""
    data = make_input("300.00", count=2)
    schedule = split_installments(data).installments
    edited = edit_installment_amount(schedule, 1, Decimal("400.00"), data).installments

    result = split_installments(data, existing=edited)

    assert [inst.amount for inst in result.installments] == [Decimal("400.00"), Decimal("0.00")]
    assert result.discrepancy is not None
    assert result.discrepancy.kind == "excess"
    assert result.discrepancy.difference == Decimal("-100.00")


def test_edit_amount_reports_discrepancy():
    """Test manual amount edit is accepted as typed and the mismatch is reported"""
    data = make_input("100.00")
    schedule = split_installments(data).installments

    result = edit_installment_amount(schedule, 2, Decimal("40.00"), data)

    assert result.ok
    assert [inst.amount for inst in result.installments] == [
        Decimal("33.33"),
        Decimal("40.00"),
        Decimal("33.34"),
    ]
    assert result.installments[1].origin == InstallmentOrigin.USER_EDITED
    assert result.discrepancy.expected == Decimal("100.00")
    assert result.discrepancy.actual == Decimal("106.67")
    assert result.discrepancy.difference == Decimal("-6.67")
    assert result.discrepancy.kind == "excess"


def test_edit_amount_short_of_balance(three_way_split):
    """Test lowering an installment reports a short balance"""
    schedule = split_installments(three_way_split).installments

    result = edit_installment_amount(schedule, 3, Decimal("90.00"), three_way_split)

    assert result.discrepancy.kind == "short"
    assert result.discrepancy.difference == Decimal("10.00")


def test_edit_amount_rejects_negative(three_way_split):
    """Test negative installment amount is a validation error; nothing changes"""
    schedule = split_installments(three_way_split).installments

    result = edit_installment_amount(schedule, 1, Decimal("-1.00"), three_way_split)

    assert not result.ok
    assert result.errors[0].field == "amount"
    assert result.installments == schedule


def test_edit_amount_unknown_installment(three_way_split):
    """Test editing a sequence number outside the schedule"""
    schedule = split_installments(three_way_split).installments

    result = edit_installment_amount(schedule, 9, Decimal("1.00"), three_way_split)

    assert result.errors[0].field == "sequence_number"


def test_edit_due_date_before_issue_date(three_way_split):
    """Test due date before the issue date is accepted with a warning"""
    schedule = split_installments(three_way_split).installments

    result = edit_installment_due_date(schedule, 1, date(2024, 1, 10), three_way_split.issue_date)

    assert result.ok
    assert result.installments[0].due_date == date(2024, 1, 10)
    assert result.installments[0].origin == InstallmentOrigin.USER_EDITED
    assert result.warnings == ["Installment 1 is due on 10/01/2024, before the issue date 15/01/2024"]


def test_rebalance_spreads_the_rest(three_way_split):
    """Test explicit rebalance splits what is left over the following installments"""
    schedule = split_installments(three_way_split).installments
    edited = edit_installment_amount(schedule, 1, Decimal("150.00"), three_way_split).installments

    result = rebalance_following(edited, 1, three_way_split)

    assert [inst.amount for inst in result.installments] == [
        Decimal("150.00"),
        Decimal("75.00"),
        Decimal("75.00"),
    ]
    assert result.installments[0].origin == InstallmentOrigin.USER_EDITED
    assert result.installments[1].origin == InstallmentOrigin.GENERATED
    assert result.discrepancy is None


def test_rebalance_removes_installments_after_settlement(three_way_split):
    """Test following installments are dropped when the edited ones settle the balance"""
    schedule = split_installments(three_way_split).installments
    edited = edit_installment_amount(schedule, 1, Decimal("300.00"), three_way_split).installments

    result = rebalance_following(edited, 1, three_way_split)

    assert len(result.installments) == 1
    assert result.discrepancy is None


def test_rebalance_rejects_excess(three_way_split):
    """Test installments above the balance cannot be rebalanced"""
    schedule = split_installments(three_way_split).installments
    edited = edit_installment_amount(schedule, 1, Decimal("350.00"), three_way_split).installments

    result = rebalance_following(edited, 1, three_way_split)

    assert not result.ok
    assert result.installments == edited


def test_check_balance_empty_and_settled():
    """Test no installments and no balance is consistent"""
    assert check_balance(Decimal("50.00"), Decimal("50.00"), []) is None


def test_check_balance_empty_with_balance():
    """Test missing installments are reported as short"""
    discrepancy = check_balance(Decimal("50.00"), Decimal("20.00"), [])

    assert discrepancy.kind == "short"
    assert discrepancy.difference == Decimal("30.00")


def test_split_count_past_last_representable_date():
    """Test a count whose last due date would pass the year 9999 is a validation error"""
    result = split_installments(make_input("100.00", count=100000))

    assert not result.ok
    assert result.installments == []
    assert result.errors[0].field == "installments_number"


def test_split_count_up_to_last_representable_year():
    """Test due dates may reach December 9999 but not January 10000"""
    assert split_installments(make_input("12.00", count=12, issue=date(9998, 12, 15))).ok
    assert not split_installments(make_input("13.00", count=13, issue=date(9998, 12, 15))).ok


def test_split_rounds_preserved_amounts_to_cents(three_way_split):
    """Test sub-cent user amounts are kept at cent precision and the rest stays cent-exact"""
    schedule = split_installments(three_way_split).installments
    edited = [replace(schedule[0], amount=Decimal("150.004"), origin=InstallmentOrigin.USER_EDITED)] + schedule[1:]

    result = split_installments(replace(three_way_split, installments_number=4), existing=edited)

    assert [inst.amount for inst in result.installments] == [Decimal("150.00")] + [Decimal("50.00")] * 3
    assert result.discrepancy is None


def test_check_balance_uses_cent_amounts():
    """Test amounts that only add up before rounding are reported"""
    installments = [
        Installment(sequence_number=seq, due_date=date(2024, 2, 15), amount=Decimal("10.004"))
        for seq in range(1, 10)
    ]
    installments.append(Installment(sequence_number=10, due_date=date(2024, 2, 15), amount=Decimal("9.964")))

    discrepancy = check_balance(Decimal("100.00"), Decimal("0.00"), installments)

    assert discrepancy.actual == Decimal("99.96")
    assert discrepancy.difference == Decimal("0.04")


def test_rebalance_follows_sequence_order(three_way_split):
    """Test installments sent out of order are rebalanced by sequence number"""
    schedule = split_installments(three_way_split).installments
    edited = edit_installment_amount(schedule, 1, Decimal("150.00"), three_way_split).installments
    shuffled = [edited[2], edited[0], edited[1]]

    result = rebalance_following(shuffled, 1, three_way_split)

    assert [inst.sequence_number for inst in result.installments] == [1, 2, 3]
    assert [inst.amount for inst in result.installments] == [
        Decimal("150.00"),
        Decimal("75.00"),
        Decimal("75.00"),
    ]
