"""Ledger entry building, payment application and deletion integrity rules"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from rjr_ledger.domain.exceptions import (
    BalanceMismatchError,
    IntegrityViolationError,
    InvalidAmountError,
    InvalidPaymentError,
)
from rjr_ledger.domain.installments import check_balance
from rjr_ledger.domain.models import EntryStatus, Installment, LedgerEntry
from rjr_ledger.domain.money import MAX_AMOUNT, TOLERANCE, ZERO, is_settled, to_money
from rjr_ledger.utils.currency import format_currency


def build_document_entries(
    total_value: Decimal,
    down_payment: Decimal,
    installments: Sequence[Installment],
    issue_date: date,
    single_due_date: Optional[date] = None,
) -> List[LedgerEntry]:
    """
    Turn a submitted form into ledger rows.

    - Down payment (if any) becomes entry 0, due on the issue date
    - Installments become entries 1..n
    - No down payment and no installments: one 1/1 entry for the whole
      total, due on single_due_date (defaults to the issue date)

    Raises:
        InvalidAmountError: total is not positive or above MAX_AMOUNT, or down payment exceeds it
        BalanceMismatchError: installments do not add up to the balance
    """
    total = to_money(total_value)
    down = to_money(down_payment)

    if total <= 0:
        raise InvalidAmountError("Document total must be greater than zero")
    if total > MAX_AMOUNT:
        raise InvalidAmountError(f"Document total cannot exceed {format_currency(MAX_AMOUNT)}")
    if down < 0 or down > total:
        raise InvalidAmountError("Down payment must be between zero and the document total")

    installments = [replace(inst, amount=to_money(inst.amount)) for inst in installments]

    if down == 0 and not installments:
        return [
            LedgerEntry(
                installment_number=1,
                total_installments=1,
                due_date=single_due_date or issue_date,
                expected_amount=total,
            )
        ]

    discrepancy = check_balance(total, down, installments)
    if discrepancy is not None and abs(discrepancy.difference) >= TOLERANCE:
        raise BalanceMismatchError(
            f"Installments sum to {format_currency(discrepancy.actual)} "
            f"but the balance is {format_currency(discrepancy.expected)}",
            difference=discrepancy.difference,
        )

    total_installments = (1 if down > 0 else 0) + len(installments)
    entries = []
    if down > 0:
        entries.append(
            LedgerEntry(
                installment_number=0,
                total_installments=total_installments,
                due_date=issue_date,
                expected_amount=down,
            )
        )
    for inst in sorted(installments, key=lambda i: i.sequence_number):
        entries.append(
            LedgerEntry(
                installment_number=inst.sequence_number,
                total_installments=total_installments,
                due_date=inst.due_date,
                expected_amount=inst.amount,
            )
        )
    return entries


def entry_status(expected_amount: Decimal, paid_amount: Decimal) -> EntryStatus:
    """pending -> partial -> paid as payments accumulate"""
    if paid_amount <= 0:
        return EntryStatus.PENDING
    if is_settled(expected_amount, paid_amount) or paid_amount > expected_amount:
        return EntryStatus.PAID
    return EntryStatus.PARTIAL


def apply_payment(entry: LedgerEntry, amount: Decimal) -> LedgerEntry:
    """
    Register a payment against an entry.

    Raises:
        InvalidPaymentError: amount <= 0, entry already paid, or amount above the balance
    """
    paid = to_money(amount)
    if paid <= 0:
        raise InvalidPaymentError("Payment amount must be greater than zero")
    if entry.status == EntryStatus.PAID:
        raise InvalidPaymentError("Entry is already paid")
    if paid - entry.amount_balance >= TOLERANCE:
        raise InvalidPaymentError(
            f"Payment of {format_currency(paid)} exceeds the balance of {format_currency(entry.amount_balance)}"
        )

    new_paid = entry.paid_amount + paid
    return replace(entry, paid_amount=new_paid, status=entry_status(entry.expected_amount, new_paid))


def ensure_can_delete(entry: LedgerEntry, document_paid_total: Decimal) -> None:
    """
    Only the down payment (0) or a single 1/1 installment may delete a document,
    and only while no entry of that document has payments.

    Raises:
        IntegrityViolationError: deletion is not allowed
    """
    is_single = entry.installment_number == 1 and entry.total_installments == 1
    if not entry.is_down_payment and not is_single:
        raise IntegrityViolationError(
            "Individual installments cannot be deleted; delete the down payment or the 1/1 entry instead"
        )
    if document_paid_total > ZERO:
        raise IntegrityViolationError(
            "Document has registered payments; remove the payments before deleting it"
        )
