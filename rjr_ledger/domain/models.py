"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID


class InstallmentOrigin(str, Enum):
    """How an installment got its amount and due date"""

    GENERATED = "generated"
    USER_EDITED = "user_edited"


class EntryStatus(str, Enum):
    """Payment status of a ledger entry"""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class BalanceState(str, Enum):
    """Whether a document still has a balance after the down payment"""

    NO_BALANCE = "no_balance"
    HAS_BALANCE = "has_balance"


@dataclass
class AmortizationInput:
    """Values the installment schedule is derived from"""

    total_value: Decimal
    down_payment: Decimal
    installments_number: int
    issue_date: date

    @property
    def remaining(self) -> Decimal:
        return self.total_value - self.down_payment


@dataclass
class Installment:
    """Single scheduled payment of the remaining balance (sequence 1..n)"""

    sequence_number: int
    due_date: date
    amount: Decimal
    origin: InstallmentOrigin = InstallmentOrigin.GENERATED
    # Bookkeeping carried over from a persisted entry in edit mode
    id: Optional[UUID] = None
    paid_amount: Decimal = Decimal("0.00")
    status: EntryStatus = EntryStatus.PENDING

    @property
    def user_edited(self) -> bool:
        return self.origin == InstallmentOrigin.USER_EDITED

    @property
    def balance(self) -> Decimal:
        return self.amount - self.paid_amount


@dataclass
class ValidationError:
    """Input problem reported back to the caller instead of raised"""

    field: str
    message: str


@dataclass
class BalanceDiscrepancy:
    """Installments no longer add up to the balance after a manual edit"""

    expected: Decimal  # total - down payment
    actual: Decimal  # sum of installments
    difference: Decimal  # expected - actual

    @property
    def kind(self) -> str:
        return "short" if self.difference > 0 else "excess"


@dataclass
class ScheduleResult:
    """Output of the amortization splitter and of manual edits"""

    installments: List[Installment] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)
    discrepancy: Optional[BalanceDiscrepancy] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class LedgerEntry:
    """One row of a financial document: down payment (0) or installment (1..n)"""

    installment_number: int
    total_installments: int
    due_date: date
    expected_amount: Decimal
    paid_amount: Decimal = Decimal("0.00")
    status: EntryStatus = EntryStatus.PENDING

    @property
    def amount_balance(self) -> Decimal:
        return self.expected_amount - self.paid_amount

    @property
    def is_down_payment(self) -> bool:
        return self.installment_number == 0
