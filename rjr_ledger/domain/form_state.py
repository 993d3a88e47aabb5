"""Serializable state of the financial document form (what gets auto-saved as a draft)"""

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from rjr_ledger.domain.models import (
    AmortizationInput,
    EntryStatus,
    Installment,
    InstallmentOrigin,
)
from rjr_ledger.domain.money import TOLERANCE, ZERO
from rjr_ledger.domain.reconciliation import compute_net_total, reconcile_installments_number


def _amount(value: Any) -> Decimal:
    number = Decimal(value)
    if not number.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return number


@dataclass
class FinancialFormState:
    """Everything the user has typed so far; passed by value between pure functions"""

    type: str = "credito"  # "credito" (receivable) or "debito" (payable)
    issue_date: date = field(default_factory=date.today)
    document_number: str = ""
    counterparty_name: str = ""
    description: str = ""
    payment_method: str = "pix"
    notes: str = ""
    document_value: Decimal = ZERO
    discount: Decimal = ZERO
    interest: Decimal = ZERO
    total_value: Decimal = ZERO
    down_payment: Decimal = ZERO
    installments_number: int = 0
    single_due_date: Optional[date] = None
    installments: List[Installment] = field(default_factory=list)

    def amortization_input(self) -> AmortizationInput:
        return AmortizationInput(
            total_value=self.total_value,
            down_payment=self.down_payment,
            installments_number=self.installments_number,
            issue_date=self.issue_date,
        )

    def with_changes(self, **changes: Any) -> "FinancialFormState":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict: Decimals as strings, dates as ISO, enums as values"""
        data = asdict(self)
        for key in ("document_value", "discount", "interest", "total_value", "down_payment"):
            data[key] = str(data[key])
        data["issue_date"] = self.issue_date.isoformat()
        data["single_due_date"] = self.single_due_date.isoformat() if self.single_due_date else None
        data["installments"] = [
            {
                "sequence_number": inst.sequence_number,
                "due_date": inst.due_date.isoformat(),
                "amount": str(inst.amount),
                "origin": inst.origin.value,
                "id": str(inst.id) if inst.id else None,
                "paid_amount": str(inst.paid_amount),
                "status": inst.status.value,
            }
            for inst in self.installments
        ]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FinancialFormState":
        """
        Rebuild state from to_dict() output.

        Raises:
            ValueError, KeyError, TypeError, ArithmeticError: payload is malformed or not finite
        """
        single_due_date = data.get("single_due_date")
        installments = [
            Installment(
                sequence_number=int(item["sequence_number"]),
                due_date=date.fromisoformat(item["due_date"]),
                amount=_amount(item["amount"]),
                origin=InstallmentOrigin(item.get("origin", InstallmentOrigin.GENERATED.value)),
                id=UUID(item["id"]) if item.get("id") else None,
                paid_amount=_amount(item.get("paid_amount", "0.00")),
                status=EntryStatus(item.get("status", EntryStatus.PENDING.value)),
            )
            for item in data.get("installments", [])
        ]
        return cls(
            type=data.get("type", "credito"),
            issue_date=date.fromisoformat(data["issue_date"]),
            document_number=data.get("document_number", ""),
            counterparty_name=data.get("counterparty_name", ""),
            description=data.get("description", ""),
            payment_method=data.get("payment_method", "pix"),
            notes=data.get("notes", ""),
            document_value=_amount(data.get("document_value", "0.00")),
            discount=_amount(data.get("discount", "0.00")),
            interest=_amount(data.get("interest", "0.00")),
            total_value=_amount(data.get("total_value", "0.00")),
            down_payment=_amount(data.get("down_payment", "0.00")),
            installments_number=int(data.get("installments_number", 0)),
            single_due_date=date.fromisoformat(single_due_date) if single_due_date else None,
            installments=installments,
        )


def apply_value_change(
    state: FinancialFormState,
    document_value: Optional[Decimal] = None,
    discount: Optional[Decimal] = None,
    interest: Optional[Decimal] = None,
) -> FinancialFormState:
    """
    Recompute the total after document value, discount or interest change.

    When a balance appears while the count is 0, one installment is suggested.
    """
    document_value = state.document_value if document_value is None else document_value
    discount = state.discount if discount is None else discount
    interest = state.interest if interest is None else interest

    total, applied_discount = compute_net_total(document_value, discount, interest)
    installments_number = state.installments_number
    if total > state.down_payment + TOLERANCE and installments_number == 0:
        installments_number = 1

    return state.with_changes(
        document_value=document_value,
        discount=applied_discount,
        interest=interest,
        total_value=total,
        installments_number=installments_number,
    )


def apply_down_payment_blur(state: FinancialFormState) -> FinancialFormState:
    """Run the reconciliation rule when the down payment field is finalized"""
    count = reconcile_installments_number(state.total_value, state.down_payment, state.installments_number)
    if count == state.installments_number:
        return state
    installments = state.installments if count > 0 else []
    return state.with_changes(installments_number=count, installments=installments)
