"""Down-payment reconciliation and document total rules"""

from decimal import Decimal
from typing import Tuple

from rjr_ledger.domain.models import BalanceState
from rjr_ledger.domain.money import TOLERANCE, ZERO, is_settled, to_money


def balance_state(total_value: Decimal, down_payment: Decimal) -> BalanceState:
    """NO_BALANCE when the down payment settles the document"""
    if is_settled(to_money(total_value), to_money(down_payment)):
        return BalanceState.NO_BALANCE
    return BalanceState.HAS_BALANCE


def reconcile_installments_number(
    total_value: Decimal,
    down_payment: Decimal,
    current_installments_number: int,
) -> int:
    """
    Adjust the installment count once the down payment is finalized.

    Rules:
    - Paid in full (|total - down| < 0.01): force 0 installments
    - Balance above 0.01 and count <= 0: suggest 1 installment
    - Otherwise keep the current count

    Going from NO_BALANCE back to HAS_BALANCE only suggests 1 installment;
    the count the user had before paying in full is not restored.
    """
    total = to_money(total_value)
    down = to_money(down_payment)
    remaining = total - down

    if is_settled(total, down):
        return 0
    if remaining > TOLERANCE and current_installments_number <= 0:
        return 1
    return current_installments_number


def compute_net_total(
    document_value: Decimal,
    discount: Decimal,
    interest: Decimal,
) -> Tuple[Decimal, Decimal]:
    """
    Effective document total = document value - discount + interest (never negative).

    A discount larger than the document value is clamped to it.

    Returns: (total_value, applied_discount)
    """
    document = to_money(document_value)
    applied_discount = min(to_money(discount), document)
    total = max(ZERO, document - applied_discount + to_money(interest))
    return total, applied_discount
