"""Data access layer for financial documents, ledger entries and audit log"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from rjr_ledger.infrastructure.database.models import AuditLog, FinancialDocument, LedgerEntryRow, PaymentRow
from rjr_ledger.domain.models import EntryStatus, LedgerEntry


def to_domain_entry(row: LedgerEntryRow) -> LedgerEntry:
    """Map an ORM row to the domain entry used by payment rules"""
    return LedgerEntry(
        installment_number=row.installment_number,
        total_installments=row.total_installments,
        due_date=row.due_date,
        expected_amount=Decimal(row.expected_amount),
        paid_amount=Decimal(row.paid_amount or 0),
        status=EntryStatus(row.status),
    )


class DocumentRepository:
    """Repository for financial documents"""

    def __init__(self, db: Session):
        self.db = db

    def create_document(
        self,
        header: Dict[str, Any],
        entries: List[LedgerEntry],
    ) -> FinancialDocument:
        """Persist a document with its down payment and installments"""
        db_document = FinancialDocument(**header)
        self.db.add(db_document)
        self.db.flush()  # Get ID without committing

        for entry in entries:
            self.db.add(
                LedgerEntryRow(
                    document_id=db_document.id,
                    installment_number=entry.installment_number,
                    total_installments=entry.total_installments,
                    due_date=entry.due_date,
                    expected_amount=entry.expected_amount,
                    paid_amount=entry.paid_amount,
                    status=entry.status.value,
                )
            )

        self.db.flush()
        self.db.refresh(db_document)
        return db_document

    def get_document_by_id(self, document_id: uuid.UUID) -> Optional[FinancialDocument]:
        """Fetch document with entries"""
        return (
            self.db.query(FinancialDocument)
            .filter(FinancialDocument.id == document_id)
            .first()
        )

    def list_documents(self, limit: int = 50) -> List[FinancialDocument]:
        """Most recent documents first"""
        return (
            self.db.query(FinancialDocument)
            .order_by(FinancialDocument.issue_date.desc(), FinancialDocument.created_at.desc())
            .limit(limit)
            .all()
        )

    def paid_total(self, document: FinancialDocument) -> Decimal:
        """Sum of payments over every entry of the document"""
        return sum((Decimal(entry.paid_amount or 0) for entry in document.entries), Decimal("0.00"))

    def delete_document(self, document: FinancialDocument) -> None:
        self.db.delete(document)


class EntryRepository:
    """Repository for ledger entries and their payments"""

    def __init__(self, db: Session):
        self.db = db

    def get_entry_by_id(self, entry_id: uuid.UUID) -> Optional[LedgerEntryRow]:
        return (
            self.db.query(LedgerEntryRow)
            .filter(LedgerEntryRow.id == entry_id)
            .first()
        )

    def record_payment(
        self,
        row: LedgerEntryRow,
        updated: LedgerEntry,
        amount: Decimal,
        payment_date: date,
        payment_method: str,
        notes: Optional[str] = None,
    ) -> PaymentRow:
        """Store the payment and the entry's new paid amount/status"""
        payment = PaymentRow(
            entry_id=row.id,
            paid_amount=amount,
            payment_date=payment_date,
            payment_method=payment_method,
            notes=notes,
        )
        self.db.add(payment)

        row.paid_amount = updated.paid_amount
        row.status = updated.status.value
        self.db.flush()
        return payment


class AuditRepository:
    """Append-only action trail"""

    def __init__(self, db: Session):
        self.db = db

    def log_action(self, action: str, details: Optional[Dict[str, Any]] = None) -> AuditLog:
        record = AuditLog(action=action, details=details or {})
        self.db.add(record)
        return record

    def list_actions(self, limit: int = 100) -> List[AuditLog]:
        return (
            self.db.query(AuditLog)
            .order_by(AuditLog.created_at.desc())
            .limit(limit)
            .all()
        )
