"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field

from rjr_ledger.domain.models import (
    AmortizationInput,
    BalanceDiscrepancy,
    BalanceState,
    EntryStatus,
    Installment,
    InstallmentOrigin,
    ValidationError,
)
from rjr_ledger.domain.money import MAX_AMOUNT, to_money
from rjr_ledger.utils.currency import format_currency, parse_currency


def _parse_money(value: Any) -> Any:
    """Accept "1.234,56" / "R$ 1.234,56" as well as plain numbers"""
    if isinstance(value, str):
        return parse_currency(value)
    return value


# Amounts are rounded to the cent as soon as they enter the API
Money = Annotated[Decimal, BeforeValidator(_parse_money), AfterValidator(to_money)]

PaymentMethod = Literal["pix", "cash", "bank_transfer", "credit_card", "debit_card"]


class InstallmentSchema(BaseModel):
    """Single installment of a schedule"""

    sequence_number: int = Field(..., ge=1)
    due_date: date
    amount: Money
    origin: InstallmentOrigin = InstallmentOrigin.GENERATED
    id: Optional[UUID] = None
    paid_amount: Money = Decimal("0.00")
    status: EntryStatus = EntryStatus.PENDING
    amount_formatted: Optional[str] = None

    def to_domain(self) -> Installment:
        return Installment(
            sequence_number=self.sequence_number,
            due_date=self.due_date,
            amount=self.amount,
            origin=self.origin,
            id=self.id,
            paid_amount=self.paid_amount,
            status=self.status,
        )

    @classmethod
    def from_domain(cls, inst: Installment) -> "InstallmentSchema":
        return cls(
            sequence_number=inst.sequence_number,
            due_date=inst.due_date,
            amount=inst.amount,
            origin=inst.origin,
            id=inst.id,
            paid_amount=inst.paid_amount,
            status=inst.status,
            amount_formatted=format_currency(inst.amount),
        )


class ValidationErrorSchema(BaseModel):
    """Field-level input problem"""

    field: str
    message: str

    @classmethod
    def from_domain(cls, error: ValidationError) -> "ValidationErrorSchema":
        return cls(field=error.field, message=error.message)


class DiscrepancySchema(BaseModel):
    """Installments vs. balance mismatch shown to the user"""

    expected: Decimal
    actual: Decimal
    difference: Decimal
    kind: Literal["short", "excess"]
    message: str

    @classmethod
    def from_domain(cls, discrepancy: Optional[BalanceDiscrepancy]) -> Optional["DiscrepancySchema"]:
        if discrepancy is None:
            return None
        if discrepancy.kind == "short":
            message = f"Installments are below the balance by {format_currency(discrepancy.difference)}"
        else:
            message = f"Installments exceed the balance by {format_currency(abs(discrepancy.difference))}"
        return cls(
            expected=discrepancy.expected,
            actual=discrepancy.actual,
            difference=discrepancy.difference,
            kind=discrepancy.kind,
            message=message,
        )


class AmortizationRequest(BaseModel):
    """Request body for POST /v1/installments/schedule"""

    total_value: Money
    down_payment: Money = Decimal("0.00")
    installments_number: int
    issue_date: date
    existing: List[InstallmentSchema] = Field(default_factory=list, description="Persisted installments (edit mode)")

    def to_domain(self) -> AmortizationInput:
        return AmortizationInput(
            total_value=self.total_value,
            down_payment=self.down_payment,
            installments_number=self.installments_number,
            issue_date=self.issue_date,
        )


class ScheduleResponse(BaseModel):
    """Response for schedule computations and edits"""

    balance: Decimal
    balance_formatted: str
    installments: List[InstallmentSchema]
    discrepancy: Optional[DiscrepancySchema] = None
    warnings: List[str] = Field(default_factory=list)


class ReconcileRequest(BaseModel):
    """Request body for POST /v1/installments/reconcile"""

    total_value: Money
    down_payment: Money = Decimal("0.00")
    installments_number: int = 0


class ReconcileResponse(BaseModel):
    installments_number: int
    balance_state: BalanceState


class BalanceCheckRequest(BaseModel):
    """Request body for POST /v1/installments/check"""

    total_value: Money
    down_payment: Money = Decimal("0.00")
    installments: List[InstallmentSchema]


class BalanceCheckResponse(BaseModel):
    balanced: bool
    discrepancy: Optional[DiscrepancySchema] = None


class RebalanceRequest(BaseModel):
    """Request body for POST /v1/installments/rebalance"""

    total_value: Money
    down_payment: Money = Decimal("0.00")
    issue_date: date
    sequence_number: int = Field(..., ge=1, description="Last installment kept as typed")
    installments: List[InstallmentSchema]


class InstallmentEditRequest(BaseModel):
    """Request body for POST /v1/installments/edit"""

    total_value: Money
    down_payment: Money = Decimal("0.00")
    issue_date: date
    sequence_number: int = Field(..., ge=1)
    amount: Optional[Money] = None
    due_date: Optional[date] = None
    installments: List[InstallmentSchema]


class DocumentCreateRequest(BaseModel):
    """Request body for POST /v1/documents"""

    type: Literal["credito", "debito"]
    document_number: Optional[str] = None
    counterparty_name: str = Field(..., min_length=1)
    description: str = ""
    payment_method: PaymentMethod = "pix"
    notes: str = ""
    issue_date: date
    document_value: Money = Field(..., gt=0, le=MAX_AMOUNT)
    discount: Money = Field(Decimal("0.00"), le=MAX_AMOUNT)
    interest: Money = Field(Decimal("0.00"), le=MAX_AMOUNT)
    down_payment: Money = Field(Decimal("0.00"), le=MAX_AMOUNT)
    single_due_date: Optional[date] = None
    installments: List[InstallmentSchema] = Field(default_factory=list)


class EntrySchema(BaseModel):
    """Ledger row of a document"""

    entry_id: str
    installment_number: int
    total_installments: int
    due_date: date
    expected_amount: Decimal
    paid_amount: Decimal
    amount_balance: Decimal
    status: EntryStatus


class DocumentResponse(BaseModel):
    """Response for document endpoints"""

    document_id: str
    type: str
    document_number: Optional[str] = None
    counterparty_name: str
    description: str
    issue_date: date
    document_value: Decimal
    discount: Decimal
    interest: Decimal
    total_value: Decimal
    total_value_formatted: str
    total_value_in_words: str
    entries: List[EntrySchema]
    created_at: str


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]


class PaymentRequest(BaseModel):
    """Request body for POST /v1/entries/{entry_id}/payments"""

    paid_amount: Money
    payment_date: Optional[date] = None
    payment_method: PaymentMethod = "pix"
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    payment_id: str
    entry_id: str
    paid_amount: Decimal
    entry_status: EntryStatus
    amount_balance: Decimal
    message: str


class DraftRequest(BaseModel):
    """Request body for PUT /v1/drafts/{key}: FinancialFormState.to_dict() shape"""

    state: Dict[str, Any]


class DraftResponse(BaseModel):
    key: str
    state: Optional[Dict[str, Any]] = None
