"""Installment schedule generation, manual edits and balance checks"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from rjr_ledger.domain.models import (
    AmortizationInput,
    BalanceDiscrepancy,
    Installment,
    InstallmentOrigin,
    ScheduleResult,
    ValidationError,
)
from rjr_ledger.domain.money import ZERO, floor_to_cent, is_settled, to_money
from rjr_ledger.utils.date_utils import add_months, format_br_date

logger = logging.getLogger(__name__)


def validate_amortization_input(data: AmortizationInput) -> List[ValidationError]:
    """Collect every input problem; an empty list means the input is usable"""
    errors = []
    if data.total_value < 0:
        errors.append(ValidationError("total_value", "Total value cannot be negative"))
    if data.down_payment < 0:
        errors.append(ValidationError("down_payment", "Down payment cannot be negative"))
    if data.down_payment > data.total_value >= 0:
        errors.append(ValidationError("down_payment", "Down payment cannot exceed the total value"))
    if data.installments_number < 0:
        errors.append(ValidationError("installments_number", "Installment count cannot be negative"))
    elif data.installments_number > 0:
        try:
            add_months(data.issue_date, data.installments_number)
        except (ValueError, OverflowError):
            errors.append(ValidationError("installments_number", "Last installment would fall after the year 9999"))
    return errors


def _split_evenly(amount: Decimal, count: int) -> List[Decimal]:
    """
    Split amount into count cent-exact parts.

    Every part but the last gets the share floored to the cent; the last
    one absorbs the remainder so the parts always add up to amount.

    Example:
        100.00 / 3 -> [33.33, 33.33, 33.34]
    """
    if count <= 0:
        return []
    share = floor_to_cent(amount / count)
    parts = [share] * (count - 1)
    parts.append(amount - share * (count - 1))

    if parts[-1] != share:
        # Rounding drift, absorbed by the last installment
        logger.debug(
            "Rounding drift absorbed by last installment",
            extra={"amount": str(amount), "count": count, "share": str(share), "last": str(parts[-1])},
        )
    return parts


def check_balance(
    total_value: Decimal,
    down_payment: Decimal,
    installments: Sequence[Installment],
) -> Optional[BalanceDiscrepancy]:
    """
    Compare the installments against the balance left after the down payment.

    Returns None when they add up, otherwise a BalanceDiscrepancy the caller
    should show to the user (manual edits are never auto-corrected).
    """
    expected = to_money(total_value) - to_money(down_payment)
    actual = sum((to_money(inst.amount) for inst in installments), ZERO)
    difference = expected - actual
    if not installments and is_settled(expected, ZERO):
        return None
    if difference == 0:
        return None
    return BalanceDiscrepancy(expected=expected, actual=actual, difference=difference)


def split_installments(
    data: AmortizationInput,
    existing: Optional[Sequence[Installment]] = None,
) -> ScheduleResult:
    """
    Generate the installment schedule for the remaining balance.

    Requirements:
    - Invalid input returns errors and no installments
    - installments_number == 0 returns an empty schedule (the balance must be settled)
    - Share is floored to the cent, last installment absorbs the remainder
    - Installment i is due issue_date + i calendar months (clamped to month end)

    Edit mode (existing given):
    - USER_EDITED installments whose sequence is still in range keep amount and date
    - Remaining slots are regenerated and share what the preserved ones leave
    - Regenerated slots keep id/paid_amount/status of the persisted installment
    - Installments beyond installments_number are dropped
    """
    errors = validate_amortization_input(data)
    if errors:
        return ScheduleResult(errors=errors)

    total = to_money(data.total_value)
    down = to_money(data.down_payment)
    remaining = total - down
    count = data.installments_number

    if count == 0:
        if not is_settled(total, down):
            return ScheduleResult(
                errors=[
                    ValidationError(
                        "installments_number",
                        "At least one installment is required while a balance remains",
                    )
                ]
            )
        return ScheduleResult()

    by_sequence: Dict[int, Installment] = {inst.sequence_number: inst for inst in (existing or [])}
    preserved = {
        seq: replace(inst, amount=to_money(inst.amount))
        for seq, inst in by_sequence.items()
        if inst.user_edited and 1 <= seq <= count
    }
    open_slots = [seq for seq in range(1, count + 1) if seq not in preserved]

    left_for_generated = remaining - sum((inst.amount for inst in preserved.values()), ZERO)
    if left_for_generated < 0:
        amounts = [ZERO] * len(open_slots)
    else:
        amounts = _split_evenly(left_for_generated, len(open_slots))
    generated_amount = dict(zip(open_slots, amounts))

    installments = []
    for seq in range(1, count + 1):
        if seq in preserved:
            installments.append(preserved[seq])
            continue
        previous = by_sequence.get(seq)
        generated = Installment(
            sequence_number=seq,
            due_date=add_months(data.issue_date, seq),
            amount=generated_amount[seq],
        )
        if previous is not None:
            generated = replace(
                generated,
                id=previous.id,
                paid_amount=previous.paid_amount,
                status=previous.status,
            )
        installments.append(generated)

    return ScheduleResult(
        installments=installments,
        discrepancy=check_balance(total, down, installments),
    )


def _find(installments: Sequence[Installment], sequence_number: int) -> Optional[int]:
    for index, inst in enumerate(installments):
        if inst.sequence_number == sequence_number:
            return index
    return None


def edit_installment_amount(
    installments: Sequence[Installment],
    sequence_number: int,
    amount: Decimal,
    data: AmortizationInput,
) -> ScheduleResult:
    """Apply a manual amount override and report (not fix) any resulting mismatch"""
    index = _find(installments, sequence_number)
    if index is None:
        return ScheduleResult(
            installments=list(installments),
            errors=[ValidationError("sequence_number", f"Installment {sequence_number} does not exist")],
        )
    if amount < 0:
        return ScheduleResult(
            installments=list(installments),
            errors=[ValidationError("amount", "Installment amount cannot be negative")],
        )

    updated = list(installments)
    updated[index] = replace(
        updated[index],
        amount=to_money(amount),
        origin=InstallmentOrigin.USER_EDITED,
    )
    return ScheduleResult(
        installments=updated,
        discrepancy=check_balance(data.total_value, data.down_payment, updated),
    )


def edit_installment_due_date(
    installments: Sequence[Installment],
    sequence_number: int,
    due_date: date,
    issue_date: date,
) -> ScheduleResult:
    """Apply a manual due date; dates before the issue date are accepted with a warning"""
    index = _find(installments, sequence_number)
    if index is None:
        return ScheduleResult(
            installments=list(installments),
            errors=[ValidationError("sequence_number", f"Installment {sequence_number} does not exist")],
        )

    updated = list(installments)
    updated[index] = replace(updated[index], due_date=due_date, origin=InstallmentOrigin.USER_EDITED)

    warnings = []
    if due_date < issue_date:
        warnings.append(
            f"Installment {sequence_number} is due on {format_br_date(due_date)}, "
            f"before the issue date {format_br_date(issue_date)}"
        )
    return ScheduleResult(installments=updated, warnings=warnings)


def rebalance_following(
    installments: Sequence[Installment],
    sequence_number: int,
    data: AmortizationInput,
) -> ScheduleResult:
    """
    Spread what installments 1..k leave of the balance over k+1..n.

    Installments are taken in sequence order whatever order they arrive in.

    Explicit user action (the "distribute the rest" button), unlike manual
    edits which are only reported:
    - 1..k exceed the balance -> error, nothing changes
    - 1..k settle the balance -> installments after k are removed
    - otherwise the rest is split evenly, last one absorbing the remainder
    """
    ordered = sorted(installments, key=lambda inst: inst.sequence_number)
    index = _find(ordered, sequence_number)
    if index is None:
        return ScheduleResult(
            installments=list(installments),
            errors=[ValidationError("sequence_number", f"Installment {sequence_number} does not exist")],
        )

    remaining = to_money(data.total_value) - to_money(data.down_payment)
    head = ordered[: index + 1]
    tail = ordered[index + 1:]
    left = remaining - sum((to_money(inst.amount) for inst in head), ZERO)

    if left < 0 and not is_settled(left, ZERO):
        return ScheduleResult(
            installments=list(installments),
            errors=[ValidationError("amount", "Down payment plus installments exceed the document total")],
        )

    if is_settled(left, ZERO) or not tail:
        return ScheduleResult(
            installments=head,
            discrepancy=check_balance(data.total_value, data.down_payment, head),
        )

    amounts = _split_evenly(left, len(tail))
    rebalanced = head + [
        replace(inst, amount=amount, origin=InstallmentOrigin.GENERATED)
        for inst, amount in zip(tail, amounts)
    ]
    return ScheduleResult(
        installments=rebalanced,
        discrepancy=check_balance(data.total_value, data.down_payment, rebalanced),
    )
